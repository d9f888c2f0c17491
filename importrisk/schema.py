"""Canonical data model shared by the loaders and the risk pipeline.

Country codes are always the lowercase ISO alpha-3 form (``"bra"``) and
are the join key across population, mosquito, case, and travel data.

A model score is either a finite number or :data:`MISSING`. Missing is a
distinct state, never zero, and every arithmetic step on a missing score
stays missing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Optional

from importrisk.config import MISSING_LABEL, MODEL_NAMES


@dataclass(frozen=True)
class Score:
    """A model score: a finite float, or missing when ``value`` is ``None``."""

    value: Optional[float] = None

    @classmethod
    def of(cls, value: Optional[float]) -> "Score":
        """Wrap *value*; ``None``, NaN and infinities become :data:`MISSING`."""
        if value is None:
            return MISSING
        value = float(value)
        if not math.isfinite(value):
            return MISSING
        return cls(value)

    @property
    def is_missing(self) -> bool:
        return self.value is None

    def then(self, fn: Callable[[float], Optional[float]]) -> "Score":
        """Apply *fn* to the value; missing stays missing."""
        if self.value is None:
            return MISSING
        return Score.of(fn(self.value))

    def to_json(self) -> float | str:
        return MISSING_LABEL if self.value is None else self.value


MISSING: Score = Score(None)


@dataclass(frozen=True)
class RasterRecord:
    """Per-country raster summary for one shapefile set.

    Used both for population counts and for mosquito-vector prevalence;
    ``sum`` holds the raster total over the country's boundary.
    """

    country: str
    data_source: str
    shapefile_set: str
    admin_level: str
    sum: float
    sq_km: Optional[int] = None
    raster: str = ""

    @property
    def density(self) -> float:
        """``sum / sq_km``, or NaN when the area is unknown or zero."""
        if not self.sq_km:
            return math.nan
        return self.sum / self.sq_km

    def with_area(self, sq_km: Optional[int]) -> "RasterRecord":
        return replace(self, sq_km=sq_km)


# Population and mosquito records share one shape.
PopulationRecord = RasterRecord
MosquitoRecord = RasterRecord


@dataclass(frozen=True)
class CountPair:
    confirmed: float = 0.0
    imported: float = 0.0

    @property
    def total(self) -> float:
        return self.confirmed + self.imported


@dataclass(frozen=True)
class CaseRecord:
    """Case counts reported by one country for one week."""

    country: str
    iso_week: Optional[str]
    new_cases_this_week: CountPair
    cumulative: CountPair

    @property
    def total_new_cases(self) -> float:
        return self.new_cases_this_week.total

    @property
    def total_cumulative_cases(self) -> float:
        return self.cumulative.total


@dataclass(frozen=True)
class ModelScore:
    score_new: Score = MISSING
    score_cummulative: Score = MISSING

    @property
    def is_missing(self) -> bool:
        return self.score_new.is_missing and self.score_cummulative.is_missing

    def to_dict(self) -> dict:
        return {
            "score_new": self.score_new.to_json(),
            "score_cummulative": self.score_cummulative.to_json(),
        }


MISSING_MODEL = ModelScore()


@dataclass(frozen=True)
class RiskResult:
    """Scores of all five models for one country in one week."""

    date: str
    country: str
    model_0: ModelScore = MISSING_MODEL
    model_1: ModelScore = MISSING_MODEL
    model_2: ModelScore = MISSING_MODEL
    model_3: ModelScore = MISSING_MODEL
    model_4: ModelScore = MISSING_MODEL

    def model(self, name: str) -> ModelScore:
        if name not in MODEL_NAMES:
            raise KeyError(f"Unknown model: {name}")
        return getattr(self, name)

    def to_dict(self) -> dict:
        return {name: self.model(name).to_dict() for name in MODEL_NAMES}


# Type aliases for the loader outputs.
RecordMap = dict[str, list[RasterRecord]]
CaseMap = dict[str, dict[str, CaseRecord]]
TravelMap = dict[str, dict[str, dict[str, float]]]
WeekRisk = dict[str, RiskResult]
