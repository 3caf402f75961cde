"""Table transformations feeding every chart and regression of the report.

Each function takes a DataFrame and returns a new one; nothing is mutated.
Passing an ``ExecutionLog`` records a timed entry per step.
"""
from contextlib import nullcontext
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

from covid_eda.config import SELECTED_COLUMNS, TOP_N, ZERO_FILL_COLUMNS
from covid_eda.csv_parser import custom_csv_parser
from covid_eda.dataframe import DataFrame, SchemaError, concat
from covid_eda.execution_log import ExecutionLog

FINAL_COLUMNS = {
    "total_cases": "final_cases",
    "total_deaths": "final_deaths",
}


def _step(log: Optional[ExecutionLog], operation: str):
    return log.timed(operation) if log is not None else nullcontext({})


def select_columns(df: DataFrame, columns: Optional[List[str]] = None,
                   log: Optional[ExecutionLog] = None) -> DataFrame:
    columns = SELECTED_COLUMNS if columns is None else columns
    with _step(log, f"select({len(columns)} columns)") as result:
        out = df.select(columns)
        result["rows"] = len(out)
    return out


def load_observations(path: Union[str, Path], separator: str = ',',
                      log: Optional[ExecutionLog] = None) -> DataFrame:
    """Parse the delimited file and project it down to the analysis columns.

    Raises ``FileNotFoundError``/``MalformedCSVError`` for unreadable input
    and ``SchemaError`` when one of the analysis columns is missing.
    """
    path = Path(path)
    with _step(log, f"parse({path.name})") as result:
        df = DataFrame(custom_csv_parser(path, separator=separator))
        result["rows"] = len(df)
    return select_columns(df, log=log)


def normalize_nulls(df: DataFrame, log: Optional[ExecutionLog] = None) -> DataFrame:
    # Zero-fill first, then drop rows without a continent (aggregate rows like "World")
    with _step(log, f"fillna({len(ZERO_FILL_COLUMNS)} columns, 0) + filter(continent is not None)") as result:
        filled = df.fillna(ZERO_FILL_COLUMNS, 0)
        out = filled.filter([c is not None for c in filled["continent"]])
        result["rows"] = len(out)
    return out


def country_summary(df: DataFrame, metric: str, log: Optional[ExecutionLog] = None) -> DataFrame:
    """One row per (continent, location) holding the maximum of ``metric``."""
    if metric not in FINAL_COLUMNS:
        raise ValueError(f"Unsupported metric '{metric}'. Use one of {list(FINAL_COLUMNS)}")
    final = FINAL_COLUMNS[metric]

    with _step(log, f"groupby(['continent', 'location']).agg({metric}: max)") as result:
        tbl = df.groupby(["continent", "location"], sort=True).agg({metric: ["max"]})
        out = tbl.rename({f"max_{metric}": final})
        result["rows"] = len(out)
    return out


def continent_summary(country_tbl: DataFrame, column: str,
                      log: Optional[ExecutionLog] = None) -> DataFrame:
    """Sum the per-country ``column`` within each continent."""
    with _step(log, f"groupby(['continent']).agg({column}: sum)") as result:
        tbl = country_tbl.groupby(["continent"], sort=True).agg({column: ["sum"]})
        out = tbl.rename({f"sum_{column}": column})
        result["rows"] = len(out)
    return out


def combined_country_summary(df: DataFrame, log: Optional[ExecutionLog] = None) -> DataFrame:
    cases = country_summary(df, "total_cases", log=log)
    deaths = country_summary(df, "total_deaths", log=log)
    with _step(log, "join(cases, deaths, on=['continent', 'location'], how='outer')") as result:
        out = cases.join(deaths, on=["continent", "location"], how="outer")
        result["rows"] = len(out)
    return out


def combined_continent_summary(countries: DataFrame, log: Optional[ExecutionLog] = None) -> DataFrame:
    """Continent totals of both metrics from a combined country summary."""
    cases = continent_summary(countries.select(["continent", "final_cases"]), "final_cases", log=log)
    deaths = continent_summary(countries.select(["continent", "final_deaths"]), "final_deaths", log=log)
    with _step(log, "join(cases, deaths, on=['continent'], how='outer')") as result:
        out = cases.join(deaths, on=["continent"], how="outer")
        result["rows"] = len(out)
    return out


def top_n(tbl: DataFrame, by: str, n: int = TOP_N) -> DataFrame:
    """Stable descending sort on ``by``, truncated to ``n`` rows."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return tbl.sort_values(by, ascending=False).head(n)


def top_n_by_continent(tbl: DataFrame, by: str, n: int = TOP_N) -> DataFrame:
    """Apply ``top_n`` independently inside each continent, continents in key order."""
    if by not in tbl.columns:
        raise SchemaError(f"Column '{by}' not found. Available columns: {tbl.columns}")
    if len(tbl) == 0:
        return tbl.head(0)
    return concat([top_n(group, by, n) for _, group in tbl.groupby("continent", sort=True)])


def latest_by_country(df: DataFrame, log: Optional[ExecutionLog] = None) -> DataFrame:
    """Per-(continent, location) row at the maximum total_cases.

    Rows with any remaining null are dropped outright (no zero-fill here),
    then countries with zero cases are excluded.
    """
    with _step(log, "groupby(['continent', 'location']).idxmax(total_cases) + dropna + filter(total_cases != 0)") as result:
        idxs = df.groupby(["continent", "location"], sort=True).idxmax("total_cases")
        latest = df.take(idxs).dropna()
        out = latest.filter([c != 0 for c in latest["total_cases"]])
        result["rows"] = len(out)
    return out


def find_continent_conflicts(df: DataFrame) -> DataFrame:
    """Locations reported under more than one continent."""
    seen = {}
    for loc, cont in zip(df["location"], df["continent"]):
        conts = seen.setdefault(loc, [])
        if cont not in conts:
            conts.append(cont)

    conflicts = {"location": [], "continents": []}
    for loc in sorted(seen, key=str):
        conts = seen[loc]
        if len(conts) > 1:
            conflicts["location"].append(loc)
            conflicts["continents"].append(", ".join(str(c) for c in conts))
    return DataFrame(conflicts)


class AnalysisTables(NamedTuple):
    observations: DataFrame
    countries: DataFrame
    continents: DataFrame
    top_cases: DataFrame
    top_deaths: DataFrame
    top_cases_by_continent: DataFrame
    top_deaths_by_continent: DataFrame
    latest: DataFrame
    conflicts: DataFrame


def build_tables(df: DataFrame, n: int = TOP_N, log: Optional[ExecutionLog] = None) -> AnalysisTables:
    """Every table the report renders, computed once from normalized observations."""
    countries = combined_country_summary(df, log=log)
    cases = countries.select(["continent", "location", "final_cases"])
    deaths = countries.select(["continent", "location", "final_deaths"])

    return AnalysisTables(
        observations=df,
        countries=countries,
        continents=combined_continent_summary(countries, log=log),
        top_cases=top_n(cases, "final_cases", n),
        top_deaths=top_n(deaths, "final_deaths", n),
        top_cases_by_continent=top_n_by_continent(cases, "final_cases", n),
        top_deaths_by_continent=top_n_by_continent(deaths, "final_deaths", n),
        latest=latest_by_country(df, log=log),
        conflicts=find_continent_conflicts(df),
    )
