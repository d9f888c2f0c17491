"""CLI entry point: ``python -m importrisk.run --disease zika``.

Reference data (population, mosquito prevalence, country areas) is loaded
once per run; case and travel files are loaded per week. Independent
sources load concurrently and each week is scored in its own task.
"""

from __future__ import annotations

import argparse
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from importrisk import config
from importrisk.cases import load_case_file
from importrisk.population import attach_areas, load_country_areas, load_population_table
from importrisk.records import aggregate_records
from importrisk.risk import compute_week_risk, week_to_dict
from importrisk.schema import RecordMap, WeekRisk
from importrisk.travel import load_country_codes, load_travel_file, master_country_list
from importrisk.utils.dates import common_weeks, iso_week_start, parse_week
from importrisk.utils.io import save_json
from importrisk.utils.logging import get_logger, set_level

log = get_logger("importrisk.run")


@dataclass(frozen=True)
class ReferenceData:
    """Slow-changing inputs shared by every week of a run."""

    population: RecordMap
    mosquito: RecordMap
    countries: tuple[str, ...]
    codes: dict[str, str]


@dataclass(frozen=True)
class RunPaths:
    cases: Path
    travel: Path
    population: Path
    mosquito: Path
    shapefiles: Optional[Path] = None
    output: Optional[Path] = None

    @classmethod
    def from_config(cls, disease: str, species: str) -> "RunPaths":
        if species not in config.MOSQUITO_DIRS:
            raise ValueError(f"Unknown mosquito species: {species}")
        return cls(
            cases=config.cases_dir(disease),
            travel=config.TRAVEL_DIR,
            population=config.POPULATION_CSV,
            mosquito=config.MOSQUITO_DIRS[species],
            shapefiles=config.SHAPEFILES_DIR,
            output=config.OUTPUT_DIR,
        )


def _result(future: Future, name: str, timeout: float, optional: bool = False, default=None):
    """Join *future*; optional sources degrade to *default* on failure."""
    try:
        return future.result(timeout=timeout)
    except FuturesTimeoutError:
        if not optional:
            raise TimeoutError(f"Timed out loading {name} after {timeout}s")
        log.warning("Timed out loading optional %s; treating as missing", name)
    except (OSError, ValueError) as exc:
        if not optional:
            raise
        log.warning("Could not load optional %s (%s); treating as missing", name, exc)
    return default


def _release(pool: ThreadPoolExecutor) -> None:
    """Shut *pool* down without waiting on loaders that overran their timeout."""
    pool.shutdown(wait=False, cancel_futures=True)


def load_population(path: Path) -> RecordMap:
    """Population from a World Bank CSV, or from a raster aggregation directory."""
    path = Path(path)
    if path.is_dir():
        return aggregate_records(path)
    return load_population_table(path)


def load_reference_data(
    paths: RunPaths,
    codes_path: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> ReferenceData:
    """Load population, mosquito prevalence, areas, and the country table.

    Mosquito prevalence and country areas are optional: a failure logs a
    warning and leaves the affected models missing. The other sources are
    required and the first failure propagates.
    """
    timeout = timeout or config.LOAD_TIMEOUT_S
    pool = ThreadPoolExecutor(max_workers=4)
    try:
        f_codes = pool.submit(load_country_codes, codes_path)
        f_population = pool.submit(load_population, paths.population)
        f_mosquito = pool.submit(aggregate_records, paths.mosquito)
        f_areas = pool.submit(load_country_areas, paths.shapefiles) if paths.shapefiles else None

        codes = _result(f_codes, "country codes", timeout)
        population = _result(f_population, "population", timeout)
        mosquito = _result(f_mosquito, "mosquito prevalence", timeout, optional=True, default={})
        areas = _result(f_areas, "country areas", timeout, optional=True, default={}) if f_areas else {}
    finally:
        _release(pool)

    return ReferenceData(
        population=attach_areas(population, areas),
        mosquito=mosquito,
        countries=tuple(master_country_list(codes)),
        codes=codes,
    )


def load_week_inputs(
    date: str,
    paths: RunPaths,
    codes: dict[str, str],
    timeout: Optional[float] = None,
) -> tuple[dict, dict]:
    """Load the case report and travel file of one week concurrently."""
    timeout = timeout or config.LOAD_TIMEOUT_S
    pool = ThreadPoolExecutor(max_workers=2)
    try:
        f_cases = pool.submit(load_case_file, paths.cases / f"{date}.json")
        f_travel = pool.submit(load_travel_file, paths.travel / f"{date}.csv", codes)
        travel = _result(f_travel, f"travel {date}", timeout)
        cases = _result(f_cases, f"cases {date}", timeout)
    finally:
        _release(pool)
    return cases, travel


def run_week(
    date: str,
    reference: ReferenceData,
    paths: RunPaths,
    density_mode: Optional[str] = None,
) -> WeekRisk:
    cases, travel = load_week_inputs(date, paths, reference.codes)
    return compute_week_risk(
        date,
        reference.population,
        reference.mosquito,
        cases,
        travel,
        reference.countries,
        density_mode=density_mode,
    )


def run_weeks(
    weeks: list[str],
    reference: ReferenceData,
    paths: RunPaths,
    density_mode: Optional[str] = None,
    on_week: Optional[Callable[[str, WeekRisk], None]] = None,
    max_workers: Optional[int] = None,
) -> dict[str, WeekRisk]:
    """Score *weeks* in parallel; returns ``{date: {country: RiskResult}}``."""
    results: dict[str, WeekRisk] = {}
    with ThreadPoolExecutor(max_workers=max_workers or config.MAX_WORKERS) as pool:
        futures = {w: pool.submit(run_week, w, reference, paths, density_mode) for w in weeks}
        for week in weeks:
            results[week] = futures[week].result()
            if on_week is not None:
                on_week(week, results[week])
    return results


def write_week_result(week: WeekRisk, out_dir: Path, disease: str, date: str) -> Path:
    """Write ``<out_dir>/<disease>/<date>.json``."""
    path = Path(out_dir) / disease / f"{date}.json"
    save_json(week_to_dict(week), path)
    return path


def _validate_weeks(weeks: list[str]) -> list[str]:
    for week in weeks:
        start = parse_week(week)
        if iso_week_start(start) != start:
            log.warning("Week %s does not start on a Monday", week)
    return weeks


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Calculate weekly importation risk of a disease")
    parser.add_argument("-d", "--disease", default=config.DEFAULT_DISEASE, help="Name of disease.")
    parser.add_argument(
        "-s",
        "--species",
        default=config.DEFAULT_SPECIES,
        choices=sorted(config.MOSQUITO_DIRS),
        help="Mosquito species used for prevalence.",
    )
    parser.add_argument("-w", "--weeks", nargs="*", help="Week start dates (default: all available).")
    parser.add_argument(
        "--density-mode",
        default=config.DENSITY_MODE,
        choices=["density", "area_product"],
        help="Weighting used by model_3.",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Verbosity of the importrisk loggers.",
    )
    args = parser.parse_args(argv)
    set_level(args.log_level)

    paths = RunPaths.from_config(args.disease, args.species)
    weeks = _validate_weeks(args.weeks) if args.weeks else common_weeks(paths.cases, paths.travel)
    if not weeks:
        log.warning("No weeks with both case and travel data for %s", args.disease)
        return
    log.info("Scoring %d weeks for %s", len(weeks), args.disease)

    reference = load_reference_data(paths)
    run_weeks(
        weeks,
        reference,
        paths,
        density_mode=args.density_mode,
        on_week=lambda date, week: write_week_result(week, paths.output, args.disease, date),
    )
    log.info("Done calculating risk.")


if __name__ == "__main__":
    main()
