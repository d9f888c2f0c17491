"""Shared fixtures: a miniature data tree for week 2017-04-24."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from importrisk.config import CONFIRMED_KEY, IMPORTED_KEY

WEEK = "2017-04-24"

POPULATION = {
    "ecu": {"sum": 16144000, "sq_km": 256932},
    "bra": {"sum": 207848000, "sq_km": 8507128},
    "mex": {"sum": 127017000, "sq_km": 1962939},
    "pri": {"sum": 3474000, "sq_km": 9062},
}

AEGYPTI = {
    "ecu": {"sum": 0.26646, "sq_km": 127895},
    "pri": {"sum": 0.67679, "sq_km": 4716},
    "bra": {"sum": 0.64867, "sq_km": 5730002},
    "mex": {"sum": 0.41478, "sq_km": 1159804},
}


def _counts(confirmed: float, imported: float) -> dict:
    return {CONFIRMED_KEY: confirmed, IMPORTED_KEY: imported}


CASES = {
    "bra": {
        "new_cases_this_week": _counts(0, 0),
        "cumulative": _counts(132021, 0),
        "iso_week": WEEK,
    },
    "ecu": {
        "new_cases_this_week": _counts(60.57142857142857, 0),
        "cumulative": _counts(1300, 15),
        "iso_week": WEEK,
    },
    "mex": {
        "new_cases_this_week": _counts(64.85714285714286, 0),
        "cumulative": _counts(8713, 15),
        "iso_week": WEEK,
    },
    "pri": {
        "new_cases_this_week": _counts(76.14285714285714, 0),
        "cumulative": _counts(40095.71428571428, 137),
        "iso_week": WEEK,
    },
}

TRAVELS = {"mex": {"bra": 6318, "ecu": 1786, "pri": 834}}

CODES_CSV = """code,iso3
BR,BRA
EC,ECU
MX,MEX
PR,PRI
US,USA
NA,NAM
"""

TRAVEL_CSV = """orig,dest,cnt
BR,MX,6318
EC,MX,1786
PR,MX,834
ZZ,MX,999
EC,PR,not-a-number
"""


def write_record_files(base: Path, shapefile_set: str, records: dict, source: str) -> None:
    directory = base / shapefile_set
    directory.mkdir(parents=True, exist_ok=True)
    for country, rec in records.items():
        name = f"{country}_0_{shapefile_set}^{source}_raster^{source}^{rec['sum']}^{rec['sq_km']}.json"
        (directory / name).write_text("")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A complete input tree for one week."""
    codes = tmp_path / "country_codes.csv"
    codes.write_text(CODES_CSV)

    write_record_files(tmp_path / "aegypti", "gadm2-8", AEGYPTI, "simon_hay")

    population = tmp_path / "population" / "POP.csv"
    population.parent.mkdir(parents=True)
    lines = ["Country Name,Country Code,2014,2015"]
    lines += [f"{c.upper()},{c.upper()},1,{p['sum']}" for c, p in POPULATION.items()]
    lines.append("World,WLD,1,")
    population.write_text("\n".join(lines) + "\n")

    for country, p in POPULATION.items():
        shp = tmp_path / "shapefiles" / country
        shp.mkdir(parents=True)
        (shp / f"{country}_adm0.csv").write_text(f"ID_0,ISO,NAME_0,SQKM\n1,{country.upper()},x,{p['sq_km']}.4\n")

    cases = tmp_path / "cases"
    cases.mkdir()
    (cases / f"{WEEK}.json").write_text(json.dumps({"countries": CASES}))

    travel = tmp_path / "travel"
    travel.mkdir()
    (travel / f"{WEEK}.csv").write_text(TRAVEL_CSV)
    return tmp_path


@pytest.fixture
def codes() -> dict[str, str]:
    return {"BR": "bra", "EC": "ecu", "MX": "mex", "PR": "pri", "US": "usa", "NA": "nam"}
