import os
from pathlib import Path

PROJECT_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("COVID_DATA_DIR", PROJECT_DIR / "data"))
DEFAULT_DATA_FILE = os.getenv("COVID_DATA_FILE", "owid-covid-data.csv")
DATA_FILE = DATA_DIR / DEFAULT_DATA_FILE

SELECTED_COLUMNS = [
    "continent",
    "location",
    "total_cases",
    "total_deaths",
    "total_cases_per_million",
    "total_deaths_per_million",
    "population_density",
    "median_age",
]

# Missing values in these columns are replaced by a literal 0
ZERO_FILL_COLUMNS = [
    "total_cases",
    "total_deaths",
    "total_cases_per_million",
    "total_deaths_per_million",
]

TOP_N = 15

CONTINENTS = ["Asia", "Africa", "Europe", "North America", "South America", "Oceania"]

PRETTY = {
    "continent": "Continent",
    "location": "Country",
    "total_cases": "Total Cases (Cumulative)",
    "total_deaths": "Total Deaths (Cumulative)",
    "total_cases_per_million": "Total Cases per Million",
    "total_deaths_per_million": "Total Deaths per Million (Deaths/M)",
    "population_density": "Population Density (people/km²)",
    "median_age": "Median Age (Years)",
    "final_cases": "Final Cases",
    "final_deaths": "Final Deaths",
}
