import logging

import streamlit as st

from errors import RetrievalError
from eda import (
    plot_demographic,
    plot_observed_vs_expected,
    plot_per_capita,
    plot_period_counts,
    plot_population_shares,
    plot_region_totals,
)
from pipeline import analyze
from population import REFERENCE_YEAR
from preprocess import CATEGORY_DOMAINS, DATA_URL, RENAME_MAP, demographic_counts, load_and_clean
from report import build_pdf, summary_text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)

# ===========================
# LOAD DATASET
# ===========================
@st.cache_data
def load_data(source):
    return load_and_clean(source)


# ===========================
# SIDEBAR
# ===========================
st.sidebar.header("Data Source")
source = st.sidebar.text_input("CSV URL or path", value=DATA_URL)
alpha = st.sidebar.select_slider("Significance level", options=[0.01, 0.05, 0.10], value=0.05)

# ===========================
# MAIN PAGE
# ===========================
st.title("NYC Shooting Incidents — Borough Distribution")

try:
    cleaned = load_data(source)
except RetrievalError as exc:
    st.error(f"Could not load the incident data: {exc}")
    st.stop()

results = analyze(cleaned)

st.subheader("Incidents by Borough")
st.plotly_chart(plot_region_totals(results["totals"]), use_container_width=True)

st.subheader(f"Incidents per 100,000 Residents ({REFERENCE_YEAR} census)")
st.plotly_chart(plot_per_capita(results["per_capita"]), use_container_width=True)
st.dataframe(results["per_capita"])

st.subheader("Population Share by Census Year")
st.plotly_chart(plot_population_shares(results["shares"]), use_container_width=True)

st.subheader("Incidents by Period")
st.plotly_chart(plot_period_counts(results["periods"]), use_container_width=True)

demographics = [RENAME_MAP[c] for c in CATEGORY_DOMAINS if RENAME_MAP[c] in cleaned.columns]
if demographics:
    column = st.selectbox("Demographic breakdown", demographics)
    st.plotly_chart(plot_demographic(demographic_counts(cleaned, column), column), use_container_width=True)

st.subheader("Chi-square Goodness-of-Fit")
st.plotly_chart(plot_observed_vs_expected(results["comparison"]), use_container_width=True)
st.dataframe(results["comparison"])
st.text(summary_text(results, alpha))

st.download_button(
    label="⬇ Download PDF Report",
    data=build_pdf(results, alpha),
    file_name="nyc_shooting_report.pdf",
    mime="application/pdf"
)
