"""Weekly travel-survey loader.

Each weekly CSV lists traveler counts between countries in the survey's
own coding (ISO alpha-2)::

    orig,dest,cnt
    BR,MX,6318

Codes are translated through a country-code table into canonical
lowercase alpha-3 and accumulated as ``{date: {dest: {orig: cnt}}}``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from importrisk.config import COUNTRY_CODES_PATH, TRAVEL_DUPLICATES
from importrisk.schema import TravelMap
from importrisk.utils.dates import week_key
from importrisk.utils.io import list_dir, load_csv
from importrisk.utils.logging import get_logger

log = get_logger(__name__)

_REQUIRED_COLUMNS: frozenset[str] = frozenset({"orig", "dest", "cnt"})


def load_country_codes(path: Optional[Path] = None) -> dict[str, str]:
    """Load the survey-code table as ``{SURVEY_CODE: canonical_code}``.

    ``keep_default_na`` is off so that Namibia's ``NA`` stays a code.
    """
    path = path or COUNTRY_CODES_PATH
    df = load_csv(path, dtype=str, keep_default_na=False)
    missing = {"code", "iso3"} - set(df.columns)
    if missing:
        raise ValueError(f"[{Path(path).name}] Missing columns: {sorted(missing)}")
    df = df[(df["code"].str.strip() != "") & (df["iso3"].str.strip() != "")]
    return dict(zip(df["code"].str.strip().str.upper(), df["iso3"].str.strip().str.lower()))


def master_country_list(codes: dict[str, str]) -> list[str]:
    """Sorted canonical codes every weekly result must cover."""
    return sorted(set(codes.values()))


def _validate_columns(df: pd.DataFrame, path: Path) -> pd.DataFrame:
    df = df.rename(columns={c: c.strip().lower() for c in df.columns})
    missing = _REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(
            f"[{path.name}] Missing required travel columns: {sorted(missing)}. "
            f"Available: {sorted(df.columns)}"
        )
    return df


def load_travel_file(
    path: Path,
    codes: dict[str, str],
    duplicates: Optional[str] = None,
) -> TravelMap:
    """Load one weekly travel CSV into ``{date: {dest: {orig: cnt}}}``.

    Rows with an untranslatable ``orig`` or ``dest`` are dropped, and rows
    whose ``cnt`` is not a finite number are skipped. A (dest, orig) pair
    that recurs keeps the later row's count when *duplicates* is
    ``"last"`` and adds the counts when it is ``"sum"``.

    Raises:
        FileNotFoundError: if *path* does not exist.
        ValueError: if the file lacks the ``orig``/``dest``/``cnt`` columns
            or *duplicates* is unknown.
    """
    duplicates = duplicates or TRAVEL_DUPLICATES
    if duplicates not in ("last", "sum"):
        raise ValueError(f"Unknown duplicates policy: {duplicates}")

    path = Path(path)
    df = _validate_columns(load_csv(path, dtype=str, keep_default_na=False), path)

    counts = pd.to_numeric(df["cnt"].str.strip(), errors="coerce")
    bad_count = ~np.isfinite(counts)
    if bad_count.any():
        log.warning("[%s] Skipping %d rows with unparseable cnt", path.name, int(bad_count.sum()))

    orig = df["orig"].str.strip().str.upper().map(codes)
    dest = df["dest"].str.strip().str.upper().map(codes)
    untranslated = (orig.isna() | dest.isna()) & ~bad_count
    if untranslated.any():
        log.debug("[%s] Dropping %d rows with unknown country codes", path.name, int(untranslated.sum()))

    keep = ~bad_count & ~untranslated
    week: dict[str, dict[str, float]] = {}
    for o, d, cnt in zip(orig[keep], dest[keep], counts[keep]):
        origins = week.setdefault(d, {})
        if duplicates == "sum":
            origins[o] = origins.get(o, 0.0) + float(cnt)
        else:
            origins[o] = float(cnt)

    log.info(
        "Loaded travel for %d destinations (%d/%d rows kept) from %s",
        len(week),
        int(keep.sum()),
        len(df),
        path.name,
    )
    return {week_key(path): week}


def load_travel(
    directory: Path,
    codes: dict[str, str],
    duplicates: Optional[str] = None,
) -> TravelMap:
    """Load every weekly ``.csv`` file in *directory*."""
    travel: TravelMap = {}
    for path in list_dir(Path(directory)):
        if path.is_file() and path.suffix == ".csv":
            travel.update(load_travel_file(path, codes, duplicates))
    return travel
