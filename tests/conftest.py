import pandas as pd
import pytest
import requests

RAW_COLUMNS = [
    "INCIDENT_KEY", "OCCUR_DATE", "OCCUR_TIME", "BORO", "LOC_OF_OCCUR_DESC",
    "PRECINCT", "JURISDICTION_CODE", "LOC_CLASSFCTN_DESC", "LOCATION_DESC",
    "STATISTICAL_MURDER_FLAG", "PERP_AGE_GROUP", "PERP_SEX", "PERP_RACE",
    "VIC_AGE_GROUP", "VIC_SEX", "VIC_RACE", "X_COORD_CD", "Y_COORD_CD",
    "Latitude", "Longitude", "Lon_Lat",
]

# date, borough, perp age, perp sex, perp race, vic age, vic sex, vic race
ROWS = [
    ("08/27/2006", "BRONX", "25-44", "M", "BLACK", "18-24", "M", "BLACK"),
    ("03/15/2012", "BROOKLYN", None, None, None, "25-44", "F", "WHITE HISPANIC"),
    ("11/30/2019", "STATEN ISLAND", "(null)", "U", "UNKNOWN", "<18", "M", "BLACK"),
    ("02/30/2015", "QUEENS", "1020", "M", "WHITE", "45-64", "M", "WHITE"),
    ("07/04/2016", "MANHATTAN", "18-24", "F", "BLACK HISPANIC", "65+", "F", "ASIAN / PACIFIC ISLANDER"),
    ("not a date", None, None, None, None, "UNKNOWN", "U", "UNKNOWN"),
    ("12/31/2005", "brooklyn ", "<18", "M", "BLACK", "18-24", "M", "BLACK"),
    ("01/01/2022", "Queens", "25-44", "M", "WHITE HISPANIC", "25-44", "M", "BLACK HISPANIC"),
]


def make_raw(rows=ROWS):
    records = []
    for i, (date, boro, pa, ps, pr, va, vs, vr) in enumerate(rows):
        records.append({
            "INCIDENT_KEY": 100000 + i,
            "OCCUR_DATE": date,
            "OCCUR_TIME": "21:30:00",
            "BORO": boro,
            "LOC_OF_OCCUR_DESC": "OUTSIDE",
            "PRECINCT": 40 + i,
            "JURISDICTION_CODE": 0,
            "LOC_CLASSFCTN_DESC": "STREET",
            "LOCATION_DESC": "MULTI DWELL - APT BUILD",
            "STATISTICAL_MURDER_FLAG": i % 2 == 0,
            "PERP_AGE_GROUP": pa,
            "PERP_SEX": ps,
            "PERP_RACE": pr,
            "VIC_AGE_GROUP": va,
            "VIC_SEX": vs,
            "VIC_RACE": vr,
            "X_COORD_CD": 1000000.0 + i,
            "Y_COORD_CD": 200000.0 + i,
            "Latitude": 40.7 + i / 100,
            "Longitude": -73.9 - i / 100,
            "Lon_Lat": f"POINT ({-73.9 - i / 100} {40.7 + i / 100})",
        })
    return pd.DataFrame(records, columns=RAW_COLUMNS)


@pytest.fixture
def raw_frame():
    return make_raw()


@pytest.fixture
def raw_csv(tmp_path, raw_frame):
    path = tmp_path / "shootings.csv"
    raw_frame.to_csv(path, index=False)
    return path


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


@pytest.fixture
def fake_get(monkeypatch):
    """Patch requests.get; returns the list of calls for inspection."""
    calls = []

    def install(response):
        def _get(url, timeout=None, **kwargs):
            calls.append((url, timeout))
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr("requests.get", _get)
        return calls

    return install
