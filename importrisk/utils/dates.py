"""Week-key helpers.

Weekly inputs are named by the start date of their ISO week, e.g.
``2017-04-24.json`` or ``2017-04-24.csv``. The stem is the week key used
throughout the pipeline.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from importrisk.utils.io import list_dir


def week_key(path: Path | str) -> str:
    """Return the week key (filename stem up to the first dot) of *path*."""
    return Path(path).name.split(".")[0]


def iso_week_start(date: dt.date) -> dt.date:
    """Return the Monday that starts the ISO week containing *date*."""
    return date - dt.timedelta(days=date.weekday())


def parse_week(key: str) -> dt.date:
    """Parse a ``YYYY-MM-DD`` week key, raising ``ValueError`` if malformed."""
    return dt.datetime.strptime(key, "%Y-%m-%d").date()


def list_weeks(directory: Path, suffix: str) -> list[str]:
    """Return sorted week keys of the *suffix* files in *directory*."""
    return sorted(
        week_key(p) for p in list_dir(directory)
        if p.is_file() and p.name.endswith(suffix)
    )


def common_weeks(cases_dir: Path, travel_dir: Path) -> list[str]:
    """Weeks for which both a case report and a travel file exist."""
    cases = set(list_weeks(cases_dir, ".json"))
    return [w for w in list_weeks(travel_dir, ".csv") if w in cases]
