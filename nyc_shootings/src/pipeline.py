# src/pipeline.py
import logging
import sys

from errors import DomainError
from population import population_shares, population_table
from preprocess import (
    DATA_URL,
    load_and_clean,
    per_capita_rates,
    period_region_counts,
    region_totals,
)
from stats_utils import chisquare_gof, expected_proportions, observed_vs_expected

log = logging.getLogger(__name__)


def analyze(cleaned):
    """
    Aggregate a cleaned incident table and run the borough goodness-of-fit test.

    A failed test leaves `test` as None; the tables are still returned.
    """
    population = population_table()
    totals = region_totals(cleaned)
    shares = population_shares(population)
    per_capita = per_capita_rates(totals, population)
    proportions = expected_proportions(shares)
    comparison = observed_vs_expected(totals, proportions, shares)
    periods = period_region_counts(cleaned)
    log.info("Aggregated %s incidents across %s boroughs",
             f"{int(totals['Incidents'].sum()):,}", len(totals))

    try:
        test = chisquare_gof(totals.set_index("Borough")["Incidents"], proportions)
    except DomainError as exc:
        log.error("Goodness-of-fit test not run: %s", exc)
        test = None
    else:
        log.info("chi2=%.3f dof=%d p=%.3g", *test)

    return {
        "cleaned": cleaned,
        "totals": totals,
        "shares": shares,
        "per_capita": per_capita,
        "comparison": comparison,
        "periods": periods,
        "test": test,
    }


def run_pipeline(source=DATA_URL, timeout=60):
    return analyze(load_and_clean(source, timeout=timeout))


def main(argv=None):
    # pulls in reportlab
    from report import summary_text

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    argv = sys.argv[1:] if argv is None else argv
    source = argv[0] if argv else DATA_URL

    results = run_pipeline(source)
    print(results["comparison"].to_string(index=False))
    print()
    print(summary_text(results))


if __name__ == "__main__":
    main()
