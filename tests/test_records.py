import pytest

from importrisk.records import RecordParseError, aggregate_records, merge_record_maps, parse_record_filename
from tests.conftest import AEGYPTI, write_record_files


def test_parse_record_filename():
    rec = parse_record_filename("tha_3_gadm2-8^THA_ppp_v2b_2015_UNadj^worldpop^74943039^198478.json")
    assert rec.country == "tha"
    assert rec.admin_level == "3"
    assert rec.shapefile_set == "gadm2-8"
    assert rec.data_source == "worldpop"
    assert rec.raster == "THA_ppp_v2b_2015_UNadj"
    assert rec.sum == 74943039.0
    assert rec.sq_km == 198478
    assert rec.density == 74943039.0 / 198478


def test_parse_uses_last_three_prefix_segments():
    rec = parse_record_filename("extra_bra_0_santiblanko^r^src^12.5^10.json")
    assert (rec.country, rec.admin_level, rec.shapefile_set) == ("bra", "0", "santiblanko")


@pytest.mark.parametrize(
    "name",
    [
        "tha_3_gadm2-8.json",
        "tha_3_gadm2-8^r^worldpop^lots^198478.json",
        "gadm2-8^r^worldpop^1^2.json",
    ],
)
def test_parse_rejects_malformed(name):
    with pytest.raises(RecordParseError):
        parse_record_filename(name)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("mex_0_gadm2-8^r^simon_hay^0.41478^.json", None),
        ("bra_0_gadm2-8^r^simon_hay^0.6^5730002.5.json", 5730002),
        ("ecu_0_gadm2-8^r^simon_hay^0.2^big.json", None),
    ],
)
def test_unusable_area_keeps_record(name, expected):
    rec = parse_record_filename(name)
    assert rec.sq_km == expected
    assert rec.sum > 0


def test_aggregate_keeps_countries_with_unknown_area(tmp_path):
    directory = tmp_path / "gadm2-8"
    directory.mkdir()
    (directory / "mex_0_gadm2-8^r^simon_hay^0.41478^.json").write_text("")
    (directory / "bra_0_gadm2-8^r^simon_hay^0.6^5730002.5.json").write_text("")

    records = aggregate_records(tmp_path)

    assert records["mex"][0].sum == 0.41478
    assert records["mex"][0].sq_km is None
    assert records["bra"][0].sq_km == 5730002


def test_aggregate_appends_across_shapefile_sets(tmp_path):
    write_record_files(tmp_path, "gadm2-8", AEGYPTI, "simon_hay")
    write_record_files(tmp_path, "santiblanko", {"mex": {"sum": 0.5, "sq_km": 10}}, "simon_hay")

    records = aggregate_records(tmp_path, max_workers=2)

    assert set(records) == set(AEGYPTI)
    assert [r.shapefile_set for r in records["mex"]] == ["gadm2-8", "santiblanko"]
    assert records["mex"][0].sum == 0.41478
    assert records["pri"][0].sq_km == 4716


def test_aggregate_skips_bad_filenames(tmp_path):
    write_record_files(tmp_path, "gadm2-8", AEGYPTI, "simon_hay")
    (tmp_path / "gadm2-8" / "README.json").write_text("")

    records = aggregate_records(tmp_path)

    assert set(records) == set(AEGYPTI)


def test_aggregate_missing_base(tmp_path):
    with pytest.raises(FileNotFoundError):
        aggregate_records(tmp_path / "nope")


def test_merge_does_not_mutate_partials():
    a = {"bra": [parse_record_filename("bra_0_a^r^s^1^1.json")]}
    b = {"bra": [parse_record_filename("bra_0_b^r^s^2^1.json")]}
    merged = merge_record_maps([a, b])
    assert [r.sum for r in merged["bra"]] == [1.0, 2.0]
    assert len(a["bra"]) == 1
