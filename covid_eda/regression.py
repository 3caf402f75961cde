from typing import List, NamedTuple, Tuple

from scipy.stats import linregress

from covid_eda.csv_parser import to_float_or_none
from covid_eda.dataframe import DataFrame, SchemaError

# (x column, y column, section title)
CORRELATIONS: List[Tuple[str, str, str]] = [
    ("population_density", "total_cases", "Cases vs Population Density"),
    ("population_density", "total_deaths", "Deaths vs Population Density"),
    ("total_cases", "total_deaths", "Deaths vs Cases"),
    ("total_cases_per_million", "total_deaths_per_million", "Deaths per Million vs Cases per Million"),
    ("median_age", "total_deaths_per_million", "Deaths per Million vs Median Age"),
]


class RegressionResult(NamedTuple):
    x: str
    y: str
    slope: float
    intercept: float
    r_value: float
    p_value: float
    stderr: float
    n: int

    def predict(self, xs: List[float]) -> List[float]:
        return [self.intercept + self.slope * v for v in xs]


def paired_values(tbl: DataFrame, x: str, y: str) -> Tuple[List[float], List[float]]:
    if x not in tbl.columns or y not in tbl.columns:
        raise SchemaError(f"Regression columns {x!r}, {y!r} not both in {tbl.columns}")
    xs, ys = [], []
    for xv, yv in zip(tbl[x], tbl[y]):
        xf, yf = to_float_or_none(xv), to_float_or_none(yv)
        if xf is None or yf is None:
            continue
        xs.append(xf)
        ys.append(yf)
    return xs, ys


def fit_line(tbl: DataFrame, x: str, y: str) -> RegressionResult:
    """Ordinary least squares of ``y`` on ``x``.

    The p-value is the two-sided test of a zero slope. Degenerate input
    (fewer than two points, constant x) raises whatever scipy raises.
    """
    xs, ys = paired_values(tbl, x, y)
    fit = linregress(xs, ys)
    return RegressionResult(
        x=x,
        y=y,
        slope=float(fit.slope),
        intercept=float(fit.intercept),
        r_value=float(fit.rvalue),
        p_value=float(fit.pvalue),
        stderr=float(fit.stderr),
        n=len(xs),
    )


def regression_table(results: List[RegressionResult]) -> DataFrame:
    return DataFrame({
        "x": [r.x for r in results],
        "y": [r.y for r in results],
        "slope": [r.slope for r in results],
        "intercept": [r.intercept for r in results],
        "r_squared": [r.r_value ** 2 for r in results],
        "p_value": [r.p_value for r in results],
        "n": [r.n for r in results],
    })
