# src/population.py
import pandas as pd

BOROUGHS = ("Bronx", "Brooklyn", "Manhattan", "Queens", "Staten Island")
CENSUS_YEARS = (2000, 2010, 2020)
REFERENCE_YEAR = 2010

# decennial census counts
POPULATION_ROWS = (
    (2000, "Bronx", 1332650),
    (2000, "Brooklyn", 2465326),
    (2000, "Manhattan", 1537195),
    (2000, "Queens", 2229379),
    (2000, "Staten Island", 443728),
    (2010, "Bronx", 1385108),
    (2010, "Brooklyn", 2504700),
    (2010, "Manhattan", 1585873),
    (2010, "Queens", 2230722),
    (2010, "Staten Island", 468730),
    (2020, "Bronx", 1472654),
    (2020, "Brooklyn", 2736074),
    (2020, "Manhattan", 1694251),
    (2020, "Queens", 2405464),
    (2020, "Staten Island", 495747),
)

_POPULATION = pd.DataFrame(list(POPULATION_ROWS), columns=["Year", "Borough", "Population"])


def population_table():
    # callers get a copy so the embedded table can't be edited in place
    return _POPULATION.copy()


def population_shares(population=None):
    if population is None:
        population = population_table()
    out = population.copy()
    year_total = out.groupby("Year")["Population"].transform("sum")
    out["Share"] = out["Population"] / year_total * 100
    return out.sort_values(["Year", "Borough"]).reset_index(drop=True)


def year_population(population, year=REFERENCE_YEAR):
    sub = population[population["Year"] == year]
    return sub[["Borough", "Population"]].reset_index(drop=True)
