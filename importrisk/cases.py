"""Weekly case-report loader.

A case report is a JSON file named after its week, with a top-level
``countries`` map. Two historical schemas are normalised to
:class:`~importrisk.schema.CaseRecord`:

* legacy: ``new_cases_this_week`` and ``cumulative`` (or
  ``cases_cumulative``) are plain numbers, read as confirmed cases with
  no imported cases;
* current: both are objects with ``autochthonous_cases_confirmed`` and
  ``imported_cases``.
"""

from __future__ import annotations

import math
import numbers
from pathlib import Path
from typing import Any

from importrisk.config import CONFIRMED_KEY, IMPORTED_KEY
from importrisk.schema import CaseMap, CaseRecord, CountPair
from importrisk.utils.dates import week_key
from importrisk.utils.io import list_dir, load_json
from importrisk.utils.logging import get_logger

log = get_logger(__name__)

_CUMULATIVE_KEYS: tuple[str, ...] = ("cumulative", "cases_cumulative")


def _to_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, str)):
        raise ValueError(f"not a number: {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"not a finite count: {value!r}")
    return result


def parse_count(value: Any) -> CountPair:
    """Normalise either case-count shape to a :class:`CountPair`."""
    if isinstance(value, dict):
        return CountPair(
            confirmed=_to_number(value.get(CONFIRMED_KEY, 0)),
            imported=_to_number(value.get(IMPORTED_KEY, 0)),
        )
    return CountPair(confirmed=_to_number(value), imported=0.0)


def parse_case_entry(country: str, entry: dict) -> CaseRecord:
    """Build a :class:`CaseRecord` from one ``countries`` entry.

    Raises:
        ValueError: if a count is absent or not numeric.
    """
    if not isinstance(entry, dict):
        raise ValueError(f"entry is not an object: {entry!r}")
    if "new_cases_this_week" not in entry:
        raise ValueError("missing new_cases_this_week")
    cumulative_key = next((k for k in _CUMULATIVE_KEYS if k in entry), None)
    if cumulative_key is None:
        raise ValueError("missing cumulative")
    return CaseRecord(
        country=country.lower(),
        iso_week=entry.get("iso_week"),
        new_cases_this_week=parse_count(entry["new_cases_this_week"]),
        cumulative=parse_count(entry[cumulative_key]),
    )


def load_case_file(path: Path) -> CaseMap:
    """Load one weekly case report into ``{date: {country: CaseRecord}}``.

    Countries whose entry cannot be parsed are skipped with a warning.

    Raises:
        FileNotFoundError: if *path* does not exist.
        json.JSONDecodeError: if the file is not valid JSON.
        ValueError: if the file has no ``countries`` object.
    """
    path = Path(path)
    content = load_json(path)
    countries = content.get("countries") if isinstance(content, dict) else None
    if not isinstance(countries, dict):
        raise ValueError(f"[{path.name}] Missing 'countries' object")

    date = week_key(path)
    week: dict[str, CaseRecord] = {}
    for country, entry in countries.items():
        try:
            record = parse_case_entry(country, entry)
        except ValueError as exc:
            log.warning("[%s] Skipping cases for %s: %s", path.name, country, exc)
            continue
        week[record.country] = record
    log.info("Loaded cases for %d countries from %s", len(week), path.name)
    return {date: week}


def load_cases(directory: Path) -> CaseMap:
    """Load every weekly ``.json`` report in *directory*."""
    cases: CaseMap = {}
    for path in list_dir(Path(directory)):
        if path.is_file() and path.suffix == ".json":
            cases.update(load_case_file(path))
    return cases
