"""I/O helpers for weekly input files and risk output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from importrisk.utils.logging import get_logger

log = get_logger(__name__)


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if it doesn't exist. Returns *path*."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def list_dir(path: Path) -> list[Path]:
    """Return the entries of *path* sorted by name."""
    path = Path(path)
    if not path.is_dir():
        raise FileNotFoundError(f"Directory not found: {path}")
    return sorted(path.iterdir(), key=lambda p: p.name)


def load_csv(path: Path, **kwargs: Any) -> pd.DataFrame:
    """Load a CSV with sensible defaults and informative logging."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV not found: {path}")
    log.info("Loading CSV: %s", path)
    return pd.read_csv(path, **kwargs)


def save_json(data: dict, path: Path) -> None:
    """Write a JSON file."""
    ensure_dir(path.parent)
    with open(path, "w") as fh:
        json.dump(data, fh, indent=2, default=str, allow_nan=False)
    log.info("Saved JSON: %s", path)


def load_json(path: Path) -> dict:
    """Read a JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"JSON not found: {path}")
    with open(path) as fh:
        return json.load(fh)
