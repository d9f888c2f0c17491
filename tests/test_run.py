import json
import threading
import time

import pytest

import importrisk.run as run_module
from importrisk.run import RunPaths, load_reference_data, load_week_inputs, main, run_weeks, write_week_result
from importrisk.utils.dates import common_weeks
from tests.conftest import POPULATION, WEEK


@pytest.fixture
def paths(data_dir):
    return RunPaths(
        cases=data_dir / "cases",
        travel=data_dir / "travel",
        population=data_dir / "population" / "POP.csv",
        mosquito=data_dir / "aegypti",
        shapefiles=data_dir / "shapefiles",
        output=data_dir / "risk",
    )


@pytest.fixture
def reference(paths, data_dir):
    return load_reference_data(paths, codes_path=data_dir / "country_codes.csv")


def test_reference_data(reference):
    assert reference.countries == ("bra", "ecu", "mex", "nam", "pri", "usa")
    assert reference.population["mex"][0].sq_km == POPULATION["mex"]["sq_km"]
    assert reference.mosquito["mex"][0].sum == 0.41478


def test_population_from_raster_directory(paths, data_dir):
    raster = RunPaths(**{**paths.__dict__, "population": data_dir / "aegypti", "shapefiles": None})
    reference = load_reference_data(raster, codes_path=data_dir / "country_codes.csv")
    assert reference.population["mex"][0].shapefile_set == "gadm2-8"


def test_raster_population_keeps_its_own_areas(paths, data_dir):
    raster = RunPaths(**{**paths.__dict__, "population": data_dir / "aegypti"})
    reference = load_reference_data(raster, codes_path=data_dir / "country_codes.csv")
    assert reference.population["mex"][0].sq_km == 1159804


def test_slow_optional_source_does_not_stall(paths, data_dir, monkeypatch):
    release = threading.Event()

    def slow_aggregate(base, max_workers=None):
        release.wait(timeout=10)
        return {}

    monkeypatch.setattr(run_module, "aggregate_records", slow_aggregate)
    started = time.monotonic()
    try:
        reference = load_reference_data(paths, codes_path=data_dir / "country_codes.csv", timeout=1.0)
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 5
    assert reference.mosquito == {}
    assert reference.population["mex"][0].sum == POPULATION["mex"]["sum"]


def test_mosquito_is_optional(paths, data_dir):
    degraded = RunPaths(**{**paths.__dict__, "mosquito": data_dir / "albopictus"})
    reference = load_reference_data(degraded, codes_path=data_dir / "country_codes.csv")
    assert reference.mosquito == {}


def test_population_is_required(paths, data_dir):
    broken = RunPaths(**{**paths.__dict__, "population": data_dir / "nope.csv"})
    with pytest.raises(FileNotFoundError):
        load_reference_data(broken, codes_path=data_dir / "country_codes.csv")


def test_week_inputs_require_travel(paths, reference):
    with pytest.raises(FileNotFoundError):
        load_week_inputs("2017-05-01", paths, reference.codes)


def test_run_weeks_and_write(paths, reference, data_dir):
    written = []

    def on_week(date, week):
        written.append(write_week_result(week, paths.output, "zika", date))

    results = run_weeks([WEEK], reference, paths, on_week=on_week, max_workers=2)

    assert list(results) == [WEEK]
    assert set(results[WEEK]) == set(reference.countries)
    out = json.loads((data_dir / "risk" / "zika" / f"{WEEK}.json").read_text())
    assert written == [data_dir / "risk" / "zika" / f"{WEEK}.json"]
    assert out["nam"]["model_4"] == {"score_new": "NA", "score_cummulative": "NA"}
    assert out["mex"]["model_1"]["score_new"] == results[WEEK]["mex"].model_1.score_new.value


def test_common_weeks(data_dir):
    (data_dir / "cases" / "2017-05-01.json").write_text("{}")
    assert common_weeks(data_dir / "cases", data_dir / "travel") == [WEEK]


def test_cli_rejects_bad_week():
    with pytest.raises(ValueError):
        main(["--disease", "zika", "--weeks", "24-04-2017"])
