"""Tabular views over written weekly risk files."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from importrisk.config import MISSING_LABEL, MODEL_NAMES
from importrisk.utils.dates import list_weeks
from importrisk.utils.io import load_json


def week_frame(week: dict) -> pd.DataFrame:
    """Flatten ``{country: {model_k: {...}}}`` into one row per country.

    Columns are ``country`` plus ``<model>_new`` / ``<model>_cummulative``
    per model; ``NA`` scores become NaN.
    """
    rows: list[dict] = []
    for country, models in week.items():
        row: dict = {"country": country}
        for name in MODEL_NAMES:
            scores = models.get(name, {})
            for field, suffix in (("score_new", "new"), ("score_cummulative", "cummulative")):
                value = scores.get(field, MISSING_LABEL)
                row[f"{name}_{suffix}"] = np.nan if value == MISSING_LABEL else float(value)
        rows.append(row)
    columns = ["country"] + [f"{n}_{s}" for n in MODEL_NAMES for s in ("new", "cummulative")]
    return pd.DataFrame(rows, columns=columns)


def load_week_frame(out_dir: Path, disease: str, date: str) -> pd.DataFrame:
    """Load ``<out_dir>/<disease>/<date>.json`` as a :func:`week_frame`."""
    return week_frame(load_json(Path(out_dir) / disease / f"{date}.json"))


def available_weeks(out_dir: Path, disease: str) -> list[str]:
    directory = Path(out_dir) / disease
    if not directory.is_dir():
        return []
    return list_weeks(directory, ".json")


def rank_countries(frame: pd.DataFrame, column: str, top: int = 10) -> pd.DataFrame:
    """Top *top* countries by *column*, skipping countries scored NA."""
    if column not in frame.columns:
        raise KeyError(f"Unknown score column: {column}")
    scored = frame.dropna(subset=[column])
    return (
        scored.sort_values(column, ascending=False)
        .head(top)[["country", column]]
        .reset_index(drop=True)
    )


def coverage(frame: pd.DataFrame) -> pd.Series:
    """Share of countries with a numeric ``score_new`` per model."""
    if frame.empty:
        return pd.Series({name: 0.0 for name in MODEL_NAMES})
    return pd.Series({name: float(frame[f"{name}_new"].notna().mean()) for name in MODEL_NAMES})
