# src/stats_utils.py
import numpy as np
import pandas as pd
from scipy import stats

from errors import DomainError


def expected_proportions(shares):
    # mean population share over the census years, rescaled to sum to 1
    mean_share = shares.groupby("Borough")["Share"].mean()
    return (mean_share / mean_share.sum()).rename("Expected Proportion")


def _keyed(values, what):
    if isinstance(values, pd.DataFrame):
        raise DomainError(f"{what} must be keyed by region, got a table")
    try:
        s = pd.Series(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise DomainError(f"{what} must be numeric: {exc}") from exc
    if s.index.has_duplicates:
        dups = sorted(set(s.index[s.index.duplicated()]))
        raise DomainError(f"duplicate regions in {what}: {dups}")
    if s.isna().any():
        raise DomainError(f"missing values in {what} for {sorted(s[s.isna()].index)}")
    return s


def chisquare_gof(observed, proportions):
    """
    Pearson chi-square goodness-of-fit of observed counts against expected proportions.

    Both inputs are keyed by region (dict or Series); pairing is done by key.
    Returns (statistic, degrees_of_freedom, p_value).
    """
    obs = _keyed(observed, "observed counts")
    p = _keyed(proportions, "expected proportions")

    only_obs = sorted(set(obs.index) - set(p.index))
    only_exp = sorted(set(p.index) - set(obs.index))
    if only_obs or only_exp:
        raise DomainError(
            f"region sets differ: observed only {only_obs}, expected only {only_exp}"
        )
    if len(obs) < 2:
        raise DomainError("need at least two regions to compare")
    zero = sorted(p[p <= 0].index)
    if zero:
        raise DomainError(f"expected proportion is zero for {zero}")
    if obs.sum() <= 0:
        raise DomainError("no observed incidents to compare")

    keys = sorted(obs.index)
    obs = obs.reindex(keys)
    p = p.reindex(keys)
    expected = p / p.sum() * obs.sum()

    stat, p_value = stats.chisquare(obs.to_numpy(), f_exp=expected.to_numpy())
    dof = len(keys) - 1
    return float(stat), dof, float(p_value)


def observed_vs_expected(totals, proportions, shares=None):
    obs = totals.set_index("Borough")["Incidents"].rename("Observed")
    table = pd.concat([obs, proportions.rename("Expected Proportion")], axis=1, join="outer")
    table["Expected"] = table["Expected Proportion"] * obs.sum()
    table["Residual"] = (table["Observed"] - table["Expected"]) / np.sqrt(table["Expected"])

    if shares is not None:
        wide = shares.pivot(index="Borough", columns="Year", values="Share")
        wide.columns = [f"Share {year}" for year in wide.columns]
        table = table.join(wide, how="left")

    table.index.name = "Borough"
    return table.sort_index().reset_index()


def interpret(p_value, alpha=0.05):
    if p_value < alpha:
        return "reject"
    return "fail to reject"
