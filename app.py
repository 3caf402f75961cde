from pathlib import Path
from typing import Any, Dict, List, Optional

import streamlit as st

from covid_eda.charts import (
    continent_dual_bar,
    continent_pie,
    faceted_top_n_bar,
    regression_scatter,
    top_n_bar,
)
from covid_eda.config import CONTINENTS, DATA_DIR, DEFAULT_DATA_FILE, PRETTY, TOP_N
from covid_eda.csv_parser import MalformedCSVError
from covid_eda.dataframe import DataFrame, SchemaError
from covid_eda.execution_log import ExecutionLog
from covid_eda.pipeline import AnalysisTables, build_tables, load_observations, normalize_nulls
from covid_eda.regression import CORRELATIONS, RegressionResult, fit_line, regression_table

st.set_page_config(
    page_title="COVID-19 Exploratory Data Analysis",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2rem;
        font-weight: 600;
        text-align: center;
        margin-bottom: 1rem;
    }

    .section-header {
        font-size: 1.5rem;
        font-weight: 600;
        margin-top: 1.5rem;
        margin-bottom: 1rem;
    }

    .subsection-header {
        font-size: 1.2rem;
        font-weight: 600;
        margin-top: 1rem;
        margin-bottom: 0.5rem;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def _load_tables_once(csv_path: Path, delimiter: str = ','):
    log = ExecutionLog()
    with st.spinner(f"Loading and parsing {csv_path}..."):
        raw = load_observations(csv_path, separator=delimiter, log=log)
        observations = normalize_nulls(raw, log=log)
        tables = build_tables(observations, n=TOP_N, log=log)
    return raw, tables, log


def _convert_df_to_st_format(df: Optional[DataFrame]) -> Dict[str, Any]:
    if df is None:
        return {}
    return {PRETTY.get(col, col): values for col, values in df._data.items()}


def _fmt_int(x) -> str:
    try:
        return f"{float(x):,.0f}"
    except (TypeError, ValueError):
        return "N/A"


def _continent_value(tbl: DataFrame, continent: str, column: str):
    for cont, val in zip(tbl["continent"], tbl[column]):
        if cont == continent:
            return val
    return None


st.markdown('<h1 class="main-header">COVID-19 Exploratory Data Analysis</h1>', unsafe_allow_html=True)

with st.sidebar:
    st.header("Data Settings")

    data_file = st.text_input("CSV Filename", value=DEFAULT_DATA_FILE)

    sep_mode = st.selectbox("Separator Style", ["Comma (,)", "Tab (\\t)", "Semicolon (;)", "Custom"])

    if sep_mode == "Comma (,)":
        sep_input = ","
    elif sep_mode == "Tab (\\t)":
        sep_input = "\t"
    elif sep_mode == "Semicolon (;)":
        sep_input = ";"
    else:
        sep_input = st.text_input("Enter Custom Separator", value="|", max_chars=1)

    st.markdown("---")
    show_execution_log = st.checkbox("Show Execution Log", value=True,
                                     help="Display the table operations behind this report")

DATA_FILE = DATA_DIR / data_file

try:
    RAW_DF, TABLES, EXECUTION_LOG = _load_tables_once(DATA_FILE, delimiter=sep_input)
except FileNotFoundError:
    st.error(f"File not found: {DATA_FILE}. Download the OWID CSV into {DATA_DIR}.")
    st.stop()
except MalformedCSVError as e:
    st.error(f"Could not parse {DATA_FILE.name}: {e}")
    st.stop()
except SchemaError as e:
    st.error(f"{DATA_FILE.name} is missing columns required by this report.\n\n{e}")
    st.stop()
except OSError as e:
    st.error(f"Could not read {DATA_FILE}: {e}")
    st.stop()

tables: AnalysisTables = TABLES

# 1. Dataset overview
st.markdown('<h2 class="section-header">1. The Dataset</h2>', unsafe_allow_html=True)
st.markdown(f"""
The report uses the Our World in Data COVID-19 time series, one row per country and day.
Only eight columns are kept: continent, location, cumulative cases and deaths (absolute and
per million), population density and median age.

- Loaded **{len(RAW_DF):,} rows** from `{DATA_FILE.name}`
- **{len(tables.observations):,} rows** remain after dropping aggregate rows without a continent
- **{len(tables.countries):,} countries** across **{len(tables.continents)} continents**

Missing cumulative counts are treated as zero. This is crude, but it keeps every country in the
totals below; population density and median age are left untouched until the correlation section.
""")

col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Countries", f"{len(tables.countries):,}")
with col2:
    st.metric("Continents", len(tables.continents))
with col3:
    st.metric("Final Cases (all countries)", _fmt_int(sum(tables.countries["final_cases"])))
with col4:
    st.metric("Final Deaths (all countries)", _fmt_int(sum(tables.countries["final_deaths"])))

missing_continents = [c for c in CONTINENTS if c not in tables.continents["continent"]]
if missing_continents:
    st.info(f"No rows found for: {', '.join(missing_continents)}")

# 2. Country rankings
st.markdown("---")
st.markdown(f'<h2 class="section-header">2. Top {TOP_N} Countries</h2>', unsafe_allow_html=True)
st.markdown(f"""
For every country the final figure is the largest cumulative value ever reported, not the sum
and not the value on the last date. Countries are then ranked and the top {TOP_N} kept.
""")

col_chart1, col_chart2 = st.columns(2)
with col_chart1:
    st.plotly_chart(top_n_bar(tables.top_cases, "final_cases", f"Top {TOP_N} Countries by Cases"),
                    use_container_width=True)
with col_chart2:
    st.plotly_chart(top_n_bar(tables.top_deaths, "final_deaths", f"Top {TOP_N} Countries by Deaths"),
                    use_container_width=True)

leader = tables.top_cases.to_records()[:1]
if leader:
    st.markdown(
        f"**{leader[0]['location']}** reports the most cases, "
        f"{_fmt_int(leader[0]['final_cases'])} in total."
    )

st.markdown('<h3 class="subsection-header">Rankings within each continent</h3>', unsafe_allow_html=True)
st.markdown(f"The same ranking applied independently inside each continent, up to {TOP_N} countries each.")

tab_cases, tab_deaths = st.tabs(["Cases", "Deaths"])
with tab_cases:
    st.plotly_chart(
        faceted_top_n_bar(tables.top_cases_by_continent, "final_cases",
                          f"Top {TOP_N} Countries by Cases per Continent"),
        use_container_width=True,
    )
with tab_deaths:
    st.plotly_chart(
        faceted_top_n_bar(tables.top_deaths_by_continent, "final_deaths",
                          f"Top {TOP_N} Countries by Deaths per Continent"),
        use_container_width=True,
    )

# 3. Continents
st.markdown("---")
st.markdown('<h2 class="section-header">3. Continents</h2>', unsafe_allow_html=True)
st.markdown("Continent totals are the sum of the final figures of their countries.")

col_pie1, col_pie2 = st.columns(2)
with col_pie1:
    st.plotly_chart(continent_pie(tables.continents, "final_cases", "Share of Cases"),
                    use_container_width=True)
with col_pie2:
    st.plotly_chart(continent_pie(tables.continents, "final_deaths", "Share of Deaths"),
                    use_container_width=True)

st.plotly_chart(continent_dual_bar(tables.continents), use_container_width=True)

top_continent = tables.continents.sort_values("final_cases", ascending=False).to_records()[:1]
if top_continent:
    name = top_continent[0]["continent"]
    st.markdown(
        f"**{name}** accounts for {_fmt_int(_continent_value(tables.continents, name, 'final_cases'))} "
        f"cases and {_fmt_int(_continent_value(tables.continents, name, 'final_deaths'))} deaths."
    )

st.dataframe(_convert_df_to_st_format(tables.continents), width='stretch', hide_index=True)

# 4. Correlations
st.markdown("---")
st.markdown('<h2 class="section-header">4. Correlations</h2>', unsafe_allow_html=True)
st.markdown(f"""
Each country contributes the row where its cumulative case count peaks. Countries with any
missing value at that row are dropped, as are countries with zero cases, leaving
**{len(tables.latest):,} countries**. A straight line is fitted to each pair of variables; the
p-value tests whether the slope differs from zero.
""")

results: List[RegressionResult] = []
for x_col, y_col, title in CORRELATIONS:
    st.markdown(f'<h3 class="subsection-header">{title}</h3>', unsafe_allow_html=True)
    try:
        fit = fit_line(tables.latest, x_col, y_col)
    except ValueError as e:
        st.warning(f"Regression of {PRETTY.get(y_col, y_col)} on {PRETTY.get(x_col, x_col)} failed: {e}")
        continue
    results.append(fit)
    st.plotly_chart(regression_scatter(tables.latest, fit, title), use_container_width=True)
    verdict = "significant" if fit.p_value < 0.05 else "not significant"
    st.markdown(
        f"Slope {fit.slope:.4g} over {fit.n} countries; the relationship is **{verdict}** "
        f"at the 5% level (p = {fit.p_value:.3g}, R² = {fit.r_value ** 2:.3f})."
    )

if results:
    st.markdown("**Regression Summary**")
    st.dataframe(regression_table(results)._data, width='stretch', hide_index=True)

# 5. Data quality
st.markdown("---")
st.markdown('<h2 class="section-header">5. Data Quality</h2>', unsafe_allow_html=True)
if len(tables.conflicts) > 0:
    st.warning(
        f"{len(tables.conflicts)} location(s) appear under more than one continent; "
        "their per-country figures are split across continents."
    )
    st.dataframe(tables.conflicts._data, width='stretch', hide_index=True)
else:
    st.markdown("Every location maps to exactly one continent.")

if show_execution_log and len(EXECUTION_LOG) > 0:
    st.markdown("---")
    with st.expander("Execution Log", expanded=True):
        for i, log_entry in enumerate(EXECUTION_LOG, 1):
            st.code(f"{i}. {log_entry}", language="text")
