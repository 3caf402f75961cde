from pathlib import Path

import pytest

from covid_eda.config import SELECTED_COLUMNS

HEADER = ["iso_code", "date"] + SELECTED_COLUMNS


def _cell(v):
    return "" if v is None else str(v)


@pytest.fixture
def write_csv(tmp_path):
    def _write(rows, header=HEADER, name="covid.csv", sep=","):
        path = Path(tmp_path) / name
        lines = [sep.join(header)]
        for row in rows:
            lines.append(sep.join(_cell(row.get(h)) for h in header))
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


def obs(location, continent, date, cases=None, deaths=None, cases_pm=None, deaths_pm=None,
        density=100.0, age=30.0):
    return {
        "iso_code": location[:3].upper(),
        "date": date,
        "continent": continent,
        "location": location,
        "total_cases": cases,
        "total_deaths": deaths,
        "total_cases_per_million": cases_pm,
        "total_deaths_per_million": deaths_pm,
        "population_density": density,
        "median_age": age,
    }


@pytest.fixture
def sample_rows():
    return [
        obs("Testland", "Europe", "2020-03-01", 100, 1, 10.0, 0.1),
        obs("Testland", "Europe", "2020-03-02", 250, 5, 25.0, 0.5),
        obs("Testland", "Europe", "2020-03-03", 90, 6, 9.0, 0.6),
        obs("Otherland", "Europe", "2020-03-01", None, None, None, None),
        obs("Otherland", "Europe", "2020-03-02", 40, 2, 4.0, 0.2),
        obs("Farland", "Asia", "2020-03-01", 500, 20, 50.0, 2.0, density=None),
        obs("Zeroland", "Africa", "2020-03-01", None, None, None, None),
        obs("World", None, "2020-03-01", 890, 27, 1.0, 0.1),
    ]
