"""Weekly importation-risk models.

For a destination country ``C`` and week ``W``:

* ``model_0``: importation pressure, the sum over origins ``O != C`` of
  ``cases(O) / population(O) * travelers(O -> C)``;
* ``model_1``: ``model_0`` weighted by mosquito prevalence in ``C``;
* ``model_2``: ``model_1`` per head of ``C``'s population;
* ``model_3``: ``model_1`` weighted by ``C``'s population density;
* ``model_4``: ``model_1`` plus local burden, ``prevalence(C) * cases(C)``.

Each model is scored twice, on new cases (``score_new``) and on
cumulative cases (``score_cummulative``). A score that cannot be computed
is :data:`~importrisk.schema.MISSING` and every model downstream of it
stays missing. The pipeline is a pure function of its inputs.
"""

from __future__ import annotations

import math
import operator
from typing import Callable, Iterable, Optional

from importrisk.config import DENSITY_MODE
from importrisk.schema import (
    MISSING,
    MISSING_MODEL,
    CaseMap,
    CaseRecord,
    ModelScore,
    RasterRecord,
    RecordMap,
    RiskResult,
    Score,
    TravelMap,
    WeekRisk,
)
from importrisk.utils.logging import get_logger

log = get_logger(__name__)

# ModelScore field -> CaseRecord total used for it.
_VARIANTS: dict[str, str] = {
    "score_new": "total_new_cases",
    "score_cummulative": "total_cumulative_cases",
}

DENSITY_MODES: tuple[str, ...] = ("density", "area_product")


# ── Lookups ──────────────────────────────────────────────────────────────────

def first_record(records: RecordMap, country: str) -> Optional[RasterRecord]:
    """The record representing *country*: the first of its list, if any."""
    found = records.get(country)
    return found[0] if found else None


def mosquito_prevalence(mosquito: RecordMap, country: str) -> Score:
    record = first_record(mosquito, country)
    return MISSING if record is None else Score.of(record.sum)


def population_sum(population: RecordMap, country: str) -> Score:
    record = first_record(population, country)
    return MISSING if record is None else Score.of(record.sum)


def density_weight(population: RecordMap, country: str, mode: Optional[str] = None) -> Score:
    """Weight used by model_3, missing when the area is unknown or zero."""
    mode = mode or DENSITY_MODE
    if mode not in DENSITY_MODES:
        raise ValueError(f"Unknown density mode: {mode}")
    record = first_record(population, country)
    if record is None or not record.sq_km:
        return MISSING
    if mode == "area_product":
        return Score.of(record.sum * record.sq_km)
    return Score.of(record.density)


# ── Score arithmetic ─────────────────────────────────────────────────────────

def _safe_div(a: float, b: float) -> float:
    return a / b if b else math.nan


def combine(a: Score, b: Score, op: Callable[[float, float], float]) -> Score:
    """``op(a, b)``; missing if either side is missing or the result is not finite."""
    if a.is_missing or b.is_missing:
        return MISSING
    return Score.of(op(a.value, b.value))


def _per_variant(fn: Callable[[str, Score], Score], base: ModelScore) -> ModelScore:
    return ModelScore(**{field: fn(field, getattr(base, field)) for field in _VARIANTS})


# ── Models ───────────────────────────────────────────────────────────────────

def model_0(
    country: str,
    travelers: Optional[dict[str, float]],
    week_cases: dict[str, CaseRecord],
    population: RecordMap,
) -> ModelScore:
    """Importation pressure on *country* from every other origin.

    Missing when *country* has no traveler entries this week. Origins
    without case data, or without a usable population, contribute nothing.
    """
    if not travelers:
        return MISSING_MODEL
    totals = dict.fromkeys(_VARIANTS, 0.0)
    for origin, count in travelers.items():
        if origin == country or origin not in week_cases:
            continue
        origin_pop = population_sum(population, origin)
        if origin_pop.is_missing or origin_pop.value == 0:
            continue
        record = week_cases[origin]
        for field, total in _VARIANTS.items():
            totals[field] += (getattr(record, total) / origin_pop.value) * count
    return ModelScore(**{field: Score.of(value) for field, value in totals.items()})


def model_1(m0: ModelScore, prevalence: Score) -> ModelScore:
    return _per_variant(lambda _, s: combine(s, prevalence, operator.mul), m0)


def model_2(m1: ModelScore, pop: Score) -> ModelScore:
    return _per_variant(lambda _, s: combine(s, pop, _safe_div), m1)


def model_3(m1: ModelScore, weight: Score) -> ModelScore:
    return _per_variant(lambda _, s: combine(s, weight, operator.mul), m1)


def model_4(m1: ModelScore, prevalence: Score, record: Optional[CaseRecord]) -> ModelScore:
    if record is None:
        return MISSING_MODEL

    def local(field: str, score: Score) -> Score:
        burden = combine(prevalence, Score.of(getattr(record, _VARIANTS[field])), operator.mul)
        return combine(score, burden, operator.add)

    return _per_variant(local, m1)


# ── Pipeline ─────────────────────────────────────────────────────────────────

def country_risk(
    date: str,
    country: str,
    population: RecordMap,
    mosquito: RecordMap,
    week_cases: dict[str, CaseRecord],
    week_travel: dict[str, dict[str, float]],
    density_mode: Optional[str] = None,
) -> RiskResult:
    """Score all five models for one destination country."""
    m0 = model_0(country, week_travel.get(country), week_cases, population)
    if m0.is_missing:
        log.debug("%s %s: no travelers, all models NA", date, country)
        return RiskResult(date=date, country=country)

    prevalence = mosquito_prevalence(mosquito, country)
    m1 = model_1(m0, prevalence)
    return RiskResult(
        date=date,
        country=country,
        model_0=m0,
        model_1=m1,
        model_2=model_2(m1, population_sum(population, country)),
        model_3=model_3(m1, density_weight(population, country, density_mode)),
        model_4=model_4(m1, prevalence, week_cases.get(country)),
    )


def compute_week_risk(
    date: str,
    population: RecordMap,
    mosquito: RecordMap,
    cases: CaseMap,
    travel: TravelMap,
    countries: Iterable[str],
    density_mode: Optional[str] = None,
) -> WeekRisk:
    """Return ``{country: RiskResult}`` for every country of *countries*.

    Countries absent from every source still get an all-missing entry, so
    the shape of the output is the same every week.
    """
    week_cases = cases.get(date, {})
    week_travel = travel.get(date, {})
    if not week_travel:
        log.warning("No travel data for week %s; every model will be NA", date)

    result = {
        country: country_risk(date, country, population, mosquito, week_cases, week_travel, density_mode)
        for country in countries
    }
    scored = sum(1 for r in result.values() if not r.model_0.is_missing)
    log.info("Week %s: scored %d / %d countries", date, scored, len(result))
    return result


def week_to_dict(week: WeekRisk) -> dict:
    """Output shape: ``{country: {model_k: {score_new, score_cummulative}}}``."""
    return {country: risk.to_dict() for country, risk in week.items()}
