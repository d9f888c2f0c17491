"""Aggregate filename-encoded raster summaries into per-country records.

Population and mosquito-prevalence summaries are published as one empty
JSON file per country per shapefile set, with the payload carried by the
filename itself::

    <base>/<shapefile_set>/<country>_<admin>_<shapefile_set>^<raster>^<source>^<sum>^<sq_km>.json

e.g. ``gadm2-8/tha_3_gadm2-8^THA_ppp_v2b_2015_UNadj^worldpop^74943039^198478.json``.
"""

from __future__ import annotations

import math
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from importrisk.config import MAX_WORKERS
from importrisk.schema import RasterRecord, RecordMap
from importrisk.utils.io import list_dir
from importrisk.utils.logging import get_logger

log = get_logger(__name__)

_JSON_SUFFIX = re.compile(r"\.json$")


class RecordParseError(ValueError):
    """A raster summary filename does not follow the naming convention."""


def _parse_area(field: str) -> Optional[int]:
    """Area in whole square kilometres, or ``None`` when absent or not finite."""
    try:
        area = float(field)
    except ValueError:
        return None
    return int(area) if math.isfinite(area) else None


def parse_record_filename(name: str) -> RasterRecord:
    """Parse one raster summary filename into a :class:`RasterRecord`.

    An empty ``sq_km`` field leaves the area unknown and a fractional one
    is truncated, so the record survives with only its density undefined.

    Raises:
        RecordParseError: if the name has the wrong number of fields, a
            malformed prefix, or a non-numeric ``sum``.
    """
    fields = name.split("^")
    if len(fields) != 5:
        raise RecordParseError(f"Expected 5 '^'-separated fields in {name!r}, got {len(fields)}")
    prefix, raster, data_source, pop_sum, sq_km = fields

    parts = prefix.split("_")
    if len(parts) < 3 or not all(parts[-3:]):
        raise RecordParseError(f"Expected <country>_<admin>_<shapefile_set> prefix in {name!r}")
    country, admin_level, shapefile_set = parts[-3:]

    try:
        total = float(pop_sum)
    except ValueError as exc:
        raise RecordParseError(f"Non-numeric sum in {name!r}: {exc}") from exc
    area = _parse_area(_JSON_SUFFIX.sub("", sq_km))

    return RasterRecord(
        country=country.lower(),
        data_source=data_source,
        shapefile_set=shapefile_set,
        admin_level=admin_level,
        sum=total,
        sq_km=area,
        raster=_JSON_SUFFIX.sub("", raster),
    )


def _aggregate_shapefile_set(directory: Path) -> RecordMap:
    """Parse every file of one shapefile-set directory into a task-local map."""
    local: RecordMap = {}
    skipped = 0
    for entry in list_dir(directory):
        if not entry.is_file():
            continue
        try:
            record = parse_record_filename(entry.name)
        except RecordParseError as exc:
            skipped += 1
            log.warning("Skipping %s: %s", entry, exc)
            continue
        local.setdefault(record.country, []).append(record)
    log.info(
        "Parsed shapefile set %s: %d countries, %d files skipped.",
        directory.name,
        len(local),
        skipped,
    )
    return local


def merge_record_maps(partials: list[RecordMap]) -> RecordMap:
    """Merge per-directory maps in order, appending records per country."""
    merged: RecordMap = {}
    for partial in partials:
        for country, records in partial.items():
            merged.setdefault(country, []).extend(records)
    return merged


def aggregate_records(base: Path, max_workers: Optional[int] = None) -> RecordMap:
    """Return ``{country: [record, ...]}`` for every shapefile set under *base*.

    Each subdirectory of *base* is one shapefile set and is parsed in its
    own task. Partial maps are merged in sorted directory order, so a
    country present in several sets keeps one record per set, in a stable
    order. Files whose names do not parse are skipped with a warning.

    Raises:
        FileNotFoundError: if *base* does not exist.
    """
    directories = [p for p in list_dir(Path(base)) if p.is_dir()]
    if not directories:
        log.warning("No shapefile-set directories under %s", base)
        return {}

    workers = max_workers or MAX_WORKERS
    with ThreadPoolExecutor(max_workers=workers) as pool:
        partials = list(pool.map(_aggregate_shapefile_set, directories))

    merged = merge_record_maps(partials)
    log.info(
        "Aggregated %d countries from %d shapefile sets under %s",
        len(merged),
        len(directories),
        base,
    )
    return merged
