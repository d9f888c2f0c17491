"""Country-level population and area tables.

The raster aggregations in :mod:`importrisk.records` can be replaced by a
World Bank population table (``POP.csv``: a ``Country Code`` column plus
one column per year). Country areas come from the admin-level-0 shapefile
attribute tables, ``<base>/<country>/<country>_adm0.csv``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from importrisk.config import POPULATION_YEAR
from importrisk.schema import RasterRecord, RecordMap
from importrisk.utils.io import list_dir, load_csv
from importrisk.utils.logging import get_logger

log = get_logger(__name__)


def load_population_table(path: Path, year: Optional[str] = None) -> RecordMap:
    """Load a World Bank population CSV into ``{country: [record]}``.

    Rows without a finite value for *year* are skipped.

    Raises:
        FileNotFoundError: if *path* does not exist.
        ValueError: if ``Country Code`` or the *year* column is absent.
    """
    year = str(year or POPULATION_YEAR)
    path = Path(path)
    df = load_csv(path)
    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    missing = {"Country Code", year} - set(df.columns)
    if missing:
        raise ValueError(
            f"[{path.name}] Missing required columns: {sorted(missing)}. "
            f"Available: {sorted(df.columns)[:10]}"
        )

    values = pd.to_numeric(df[year], errors="coerce")
    codes = df["Country Code"].astype(str).str.strip().str.lower()
    valid = np.isfinite(values) & (codes.str.len() == 3)
    if (~valid).any():
        log.warning("[%s] Skipping %d rows without a %s population", path.name, int((~valid).sum()), year)

    population: RecordMap = {}
    for country, value in zip(codes[valid], values[valid]):
        population[country] = [
            RasterRecord(
                country=country,
                data_source="worldbank",
                shapefile_set="worldbank",
                admin_level="0",
                sum=float(value),
                raster=f"POP_{year}",
            )
        ]
    log.info("Loaded %s population for %d countries from %s", year, len(population), path.name)
    return population


def load_country_areas(base: Path) -> dict[str, int]:
    """Return ``{country: sq_km}`` from every ``<country>/<country>_adm0.csv``.

    Country directories without an admin-0 table are skipped.

    Raises:
        FileNotFoundError: if *base* does not exist.
        ValueError: if a table lacks the ``ISO`` or ``SQKM`` column.
    """
    areas: dict[str, int] = {}
    for country_dir in list_dir(Path(base)):
        if not country_dir.is_dir():
            continue
        table = country_dir / f"{country_dir.name}_adm0.csv"
        if not table.exists():
            log.warning("No admin-0 table for %s", country_dir.name)
            continue
        df = load_csv(table)
        missing = {"ISO", "SQKM"} - set(df.columns)
        if missing:
            raise ValueError(f"[{table.name}] Missing required columns: {sorted(missing)}")
        sq_km = pd.to_numeric(df["SQKM"], errors="coerce").groupby(df["ISO"].astype(str).str.lower()).sum()
        for iso, area in sq_km.items():
            if np.isfinite(area) and area > 0:
                areas[iso] = int(area)
    log.info("Loaded areas for %d countries from %s", len(areas), base)
    return areas


def attach_areas(population: RecordMap, areas: dict[str, int]) -> RecordMap:
    """Return a copy of *population* with known areas filled in.

    Only records without an area of their own are filled; areas parsed
    from raster filenames are kept.
    """
    return {
        country: [
            r.with_area(areas[country]) if r.sq_km is None and country in areas else r
            for r in records
        ]
        for country, records in population.items()
    }
