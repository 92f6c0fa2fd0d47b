# src/preprocess.py
import io
import logging

import pandas as pd
import requests

from errors import RetrievalError
from population import BOROUGHS, REFERENCE_YEAR, population_table, year_population

log = logging.getLogger(__name__)

DATA_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
DATE_FORMAT = "%m/%d/%Y"
REQUIRED_COLUMNS = ["OCCUR_DATE", "BORO"]

# identifiers, coordinates, time of day, free-text location, murder flag, precinct codes
DROP_COLUMNS = [
    "INCIDENT_KEY",
    "OCCUR_TIME",
    "LOC_OF_OCCUR_DESC",
    "LOC_CLASSFCTN_DESC",
    "LOCATION_DESC",
    "STATISTICAL_MURDER_FLAG",
    "PRECINCT",
    "JURISDICTION_CODE",
    "X_COORD_CD",
    "Y_COORD_CD",
    "Latitude",
    "Longitude",
    "Lon_Lat",
]

RENAME_MAP = {
    "OCCUR_DATE": "Date",
    "BORO": "Borough",
    "PERP_AGE_GROUP": "Perpetrator Age Group",
    "PERP_SEX": "Perpetrator Sex",
    "PERP_RACE": "Perpetrator Race",
    "VIC_AGE_GROUP": "Victim Age Group",
    "VIC_SEX": "Victim Sex",
    "VIC_RACE": "Victim Race",
    "period": "Period",
}

BOROUGH_CODES = {name.upper(): name for name in BOROUGHS}
BOROUGH_DTYPE = pd.CategoricalDtype(list(BOROUGHS))

UNSPECIFIED = "UNKNOWN"
NULL_TOKENS = ["", "(NULL)", "NULL", "NAN", "NONE", "N/A", "U", "UNKNOWN"]

AGE_GROUPS = ("<18", "18-24", "25-44", "45-64", "65+", UNSPECIFIED)
SEXES = ("F", "M", UNSPECIFIED)
RACES = (
    "AMERICAN INDIAN/ALASKAN NATIVE",
    "ASIAN / PACIFIC ISLANDER",
    "BLACK",
    "BLACK HISPANIC",
    "WHITE",
    "WHITE HISPANIC",
    UNSPECIFIED,
)
CATEGORY_DOMAINS = {
    "PERP_AGE_GROUP": AGE_GROUPS,
    "PERP_SEX": SEXES,
    "PERP_RACE": RACES,
    "VIC_AGE_GROUP": AGE_GROUPS,
    "VIC_SEX": SEXES,
    "VIC_RACE": RACES,
}

# (start, end, label); end=None leaves the last period open
PERIODS = [
    ("2006-01-01", "2009-12-31", "2006-2009"),
    ("2010-01-01", "2013-12-31", "2010-2013"),
    ("2014-01-01", "2017-12-31", "2014-2017"),
    ("2018-01-01", None, "2018-Present"),
]
UNKNOWN_PERIOD = "Unknown"
PERIOD_DTYPE = pd.CategoricalDtype([label for _, _, label in PERIODS] + [UNKNOWN_PERIOD], ordered=True)

_PERIOD_BOUNDS = [
    (pd.Timestamp(start), pd.Timestamp(end) if end else None, label)
    for start, end, label in PERIODS
]


# ===========================
# INGESTION
# ===========================
def load_raw(source=DATA_URL, timeout=60):
    log.info("Loading incidents from %s", source)
    try:
        if str(source).startswith(("http://", "https://")):
            r = requests.get(source, timeout=timeout)
            r.raise_for_status()
            df = pd.read_csv(io.StringIO(r.text), low_memory=False)
        else:
            df = pd.read_csv(source, low_memory=False)
    except requests.RequestException as exc:
        raise RetrievalError(f"could not fetch {source}: {exc}") from exc
    except (OSError, ValueError, pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise RetrievalError(f"could not read incidents from {source}: {exc}") from exc

    df = df.rename(columns=lambda s: str(s).strip())
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise RetrievalError(f"{source} is missing required columns: {', '.join(missing)}")

    log.info("Loaded %s rows, %s columns", f"{len(df):,}", len(df.columns))
    return df


# ===========================
# CLEANING
# ===========================
def parse_dates(values):
    # bad or impossible dates become NaT
    text = values.astype("string").str.strip().astype(object)
    return pd.to_datetime(text, format=DATE_FORMAT, errors="coerce")


def normalize_borough(values):
    key = values.astype("string").str.strip().str.upper().str.replace(r"\s+", " ", regex=True)
    return key.astype(object).map(BOROUGH_CODES).astype(BOROUGH_DTYPE)


def recode_category(values, domain):
    s = values.astype("string").str.strip().str.upper()
    s = s.mask(s.isna() | s.isin(NULL_TOKENS), UNSPECIFIED).astype(object)
    # values outside the domain are kept, as extra categories after the known ones
    extras = sorted(set(s.unique()) - set(domain))
    if extras:
        log.info("Keeping out-of-domain values for %s: %s", values.name, extras)
    return s.astype(pd.CategoricalDtype(list(domain) + extras))


def out_of_domain(cleaned, column):
    raw_name = {v: k for k, v in RENAME_MAP.items()}.get(column, column)
    domain = CATEGORY_DOMAINS[raw_name]
    return ~cleaned[column].astype(object).isin(domain)


def period_for(date):
    if pd.isna(date):
        return UNKNOWN_PERIOD
    # ranges are whole days, so compare on the calendar day
    day = pd.Timestamp(date).normalize()
    for start, end, label in _PERIOD_BOUNDS:
        if day >= start and (end is None or day <= end):
            return label
    return UNKNOWN_PERIOD


def assign_period(dates):
    dates = pd.to_datetime(pd.Series(dates), errors="coerce")
    return dates.map(period_for).astype(PERIOD_DTYPE)


def clean(raw):
    df = raw.rename(columns=lambda s: str(s).strip()).copy()

    df["OCCUR_DATE"] = parse_dates(df["OCCUR_DATE"])
    df["BORO"] = normalize_borough(df["BORO"])
    for c, domain in CATEGORY_DOMAINS.items():
        if c in df.columns:
            df[c] = recode_category(df[c], domain)
    df["period"] = assign_period(df["OCCUR_DATE"])

    dropped = [c for c in DROP_COLUMNS if c in df.columns]
    df = df.drop(columns=dropped)
    df = df.rename(columns=RENAME_MAP)

    log.info(
        "Cleaned %s rows: %s unparseable dates, %s missing boroughs, dropped %s columns",
        f"{len(df):,}",
        int(df["Date"].isna().sum()),
        int(df["Borough"].isna().sum()),
        len(dropped),
    )
    return df


def load_and_clean(source=DATA_URL, timeout=60):
    return clean(load_raw(source, timeout=timeout))


# ===========================
# AGGREGATION
# ===========================
def aggregation_rows(cleaned):
    # a row with neither borough nor date carries nothing to aggregate
    keep = cleaned["Borough"].notna() | cleaned["Date"].notna()
    return cleaned[keep]


def region_totals(cleaned):
    rows = aggregation_rows(cleaned)
    rows = rows[rows["Borough"].notna()]
    boroughs = rows["Borough"].astype(BOROUGH_DTYPE)
    totals = boroughs.value_counts(sort=False).rename_axis("Borough").rename("Incidents").reset_index()
    totals["Borough"] = totals["Borough"].astype(str)
    return totals.sort_values("Borough").reset_index(drop=True)


def per_capita_rates(totals, population=None, year=REFERENCE_YEAR):
    if population is None:
        population = population_table()
    out = totals.merge(year_population(population, year), on="Borough", how="inner")
    out["Rate per 100k"] = out["Incidents"] / out["Population"] * 100000
    return out.sort_values("Borough").reset_index(drop=True)


def period_region_counts(cleaned):
    rows = aggregation_rows(cleaned)
    rows = rows[rows["Borough"].notna()]
    agg = rows.groupby(["Period", "Borough"], observed=True).size().rename("Incidents").reset_index()
    return agg


def demographic_counts(cleaned, column):
    counts = cleaned[column].value_counts(dropna=False)
    return counts.rename_axis(column).rename("Incidents").reset_index()
