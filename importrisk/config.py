"""Central configuration for the importation-risk pipeline."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

# ── Paths ────────────────────────────────────────────────────────────────────
ROOT_DIR: Final[Path] = Path(__file__).resolve().parents[1]
DATA_DIR: Final[Path] = Path(os.getenv("IMPORTRISK_DATA_DIR", str(ROOT_DIR / "data")))

CASES_ROOT: Final[Path] = Path(os.getenv("IMPORTRISK_CASES_ROOT", str(DATA_DIR / "cases")))
TRAVEL_DIR: Final[Path] = Path(
    os.getenv("IMPORTRISK_TRAVEL_DIR", str(DATA_DIR / "mobility" / "amadeus" / "traffic" / "country"))
)
POPULATION_DIR: Final[Path] = Path(
    os.getenv("IMPORTRISK_POPULATION_DIR", str(DATA_DIR / "population" / "worldpop"))
)
POPULATION_CSV: Final[Path] = Path(
    os.getenv("IMPORTRISK_POPULATION_CSV", str(DATA_DIR / "population" / "worldbank" / "POP.csv"))
)
MOSQUITO_DIRS: Final[dict[str, Path]] = {
    "aegypti": Path(os.getenv("IMPORTRISK_AEGYPTI_DIR", str(DATA_DIR / "aegypti" / "simon_hay"))),
    "albopictus": Path(os.getenv("IMPORTRISK_ALBOPICTUS_DIR", str(DATA_DIR / "albopictus" / "simon_hay"))),
}
SHAPEFILES_DIR: Final[Path] = Path(
    os.getenv("IMPORTRISK_SHAPEFILES_DIR", str(DATA_DIR / "shapefiles" / "gadm2-8"))
)
OUTPUT_DIR: Final[Path] = Path(os.getenv("IMPORTRISK_OUTPUT_DIR", str(DATA_DIR / "risk")))

COUNTRY_CODES_PATH: Final[Path] = Path(
    os.getenv("IMPORTRISK_COUNTRY_CODES", str(Path(__file__).resolve().parent / "data" / "country_codes.csv"))
)


def cases_dir(disease: str) -> Path:
    """Return the weekly case-report directory for *disease*."""
    return CASES_ROOT / disease / "paho" / "iso"


# ── Run defaults ─────────────────────────────────────────────────────────────
DEFAULT_DISEASE: Final[str] = os.getenv("IMPORTRISK_DISEASE", "zika")
DEFAULT_SPECIES: Final[str] = os.getenv("IMPORTRISK_SPECIES", "aegypti")
POPULATION_YEAR: Final[str] = os.getenv("IMPORTRISK_POPULATION_YEAR", "2015")

# ── Case-report keys ─────────────────────────────────────────────────────────
CONFIRMED_KEY: Final[str] = "autochthonous_cases_confirmed"
IMPORTED_KEY: Final[str] = "imported_cases"

# ── Models ───────────────────────────────────────────────────────────────────
MODEL_NAMES: Final[tuple[str, ...]] = ("model_0", "model_1", "model_2", "model_3", "model_4")
MISSING_LABEL: Final[str] = "NA"

# "density" weights model_3 by sum / sq_km; "area_product" by sum * sq_km.
DENSITY_MODE: Final[str] = os.getenv("IMPORTRISK_DENSITY_MODE", "density")

# "last" keeps the later of repeated (dest, orig) rows; "sum" adds them.
TRAVEL_DUPLICATES: Final[str] = os.getenv("IMPORTRISK_TRAVEL_DUPLICATES", "last")

# ── Concurrency ──────────────────────────────────────────────────────────────
MAX_WORKERS: Final[int] = int(os.getenv("IMPORTRISK_MAX_WORKERS", "4"))
LOAD_TIMEOUT_S: Final[float] = float(os.getenv("IMPORTRISK_LOAD_TIMEOUT_S", "300"))

# ── Env overrides ────────────────────────────────────────────────────────────
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")
