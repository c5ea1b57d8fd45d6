import datetime as dt

import pytest

from shelter.domain.filters import (
    REQUEST_CRITERIA,
    AdmissionDateFilter,
    AdoptionDateFilter,
    SexFilter,
    SpeciesAndBreedsFilter,
    StatusFilter,
    compile_filters,
    parse_filters,
    period_start,
)
from shelter.errors import InvalidInput

# Wednesday
NOW = dt.datetime(2024, 5, 15, 13, 45, 10, tzinfo=dt.timezone.utc)


def _ts(y, m, d):
    return int(dt.datetime(y, m, d, tzinfo=dt.timezone.utc).timestamp())


def test_no_filters_means_no_predicate():
    assert compile_filters(None) == ("", [])
    assert compile_filters([]) == ("", [])
    assert compile_filters([None, None]) == ("", [])


def test_status_set_binds_each_value():
    where, params = compile_filters([StatusFilter(frozenset({"available", "adopted"}))])
    assert where == "status IN (?,?)"
    assert params == ["adopted", "available"]


def test_empty_sets_match_nothing():
    assert compile_filters([StatusFilter(frozenset())]) == ("1=0", [])
    assert compile_filters([SexFilter(frozenset())]) == ("1=0", [])
    assert compile_filters([SpeciesAndBreedsFilter({})]) == ("1=0", [])
    assert compile_filters([SpeciesAndBreedsFilter({"dog": frozenset(), "cat": frozenset()})]) == ("1=0", [])


def test_species_with_empty_breeds_are_skipped():
    f = SpeciesAndBreedsFilter({"dog": frozenset({"pug", "lab"}), "cat": frozenset()})
    where, params = compile_filters([f])
    assert where == "((specie = ? AND breed IN (?,?)))"
    assert params == ["dog", "lab", "pug"]


def test_species_are_ored_together():
    f = SpeciesAndBreedsFilter({"dog": frozenset({"pug"}), "cat": frozenset({"siamese"})})
    where, params = compile_filters([f])
    assert where == "((specie = ? AND breed IN (?)) OR (specie = ? AND breed IN (?)))"
    assert params == ["cat", "siamese", "dog", "pug"]


@pytest.mark.parametrize("token", ["all_time", "yesterday", ""])
def test_all_time_and_unknown_periods_add_nothing(token):
    assert compile_filters([AdmissionDateFilter(token)], NOW) == ("", [])
    assert compile_filters([AdoptionDateFilter(token)], NOW) == ("", [])


def test_period_starts():
    assert period_start("today", NOW) == _ts(2024, 5, 15)
    assert period_start("this_week", NOW) == _ts(2024, 5, 13)
    assert period_start("this_month", NOW) == _ts(2024, 5, 1)
    assert period_start("this_year", NOW) == _ts(2024, 1, 1)
    assert period_start("all_time", NOW) is None


def test_week_starts_on_the_same_day_for_a_monday():
    monday = dt.datetime(2024, 5, 13, 0, 0, 1, tzinfo=dt.timezone.utc)
    assert period_start("this_week", monday) == _ts(2024, 5, 13)


def test_naive_now_is_read_as_utc():
    assert period_start("today", NOW.replace(tzinfo=None)) == _ts(2024, 5, 15)


def test_period_uses_the_utc_calendar_date():
    bangkok = dt.timezone(dt.timedelta(hours=7))
    # 2024-05-16 02:00 in Bangkok is still the 15th in UTC
    assert period_start("today", dt.datetime(2024, 5, 16, 2, 0, tzinfo=bangkok)) == _ts(2024, 5, 15)


def test_admission_date_predicate():
    where, params = compile_filters([AdmissionDateFilter("this_month")], NOW)
    assert where == "admission_timestamp >= ?"
    assert params == [_ts(2024, 5, 1)]


def test_adoption_date_is_a_correlated_exists():
    where, params = compile_filters([AdoptionDateFilter("today")], NOW)
    assert where.startswith("EXISTS (SELECT 1 FROM adoption_requests ar")
    assert "ar.animal_id = animals.id" in where
    assert params == ["approved", _ts(2024, 5, 15)]


def test_criteria_are_anded_in_order():
    where, params = compile_filters(
        [SexFilter(frozenset({"female"})), None, AdmissionDateFilter("this_year")],
        NOW,
    )
    assert where == "sex IN (?) AND admission_timestamp >= ?"
    assert params == ["female", _ts(2024, 1, 1)]


def test_values_never_reach_the_sql_text():
    evil = "x' OR '1'='1"
    where, params = compile_filters([StatusFilter(frozenset({evil})), SexFilter(frozenset({evil}))])
    assert "'" not in where
    assert params == [evil, evil]


def test_parse_filters_from_wire_format():
    filters = parse_filters(
        {
            "status": ["available"],
            "sex": None,
            "species_and_breeds": {"dog": ["pug"]},
            "admission_date": "this_week",
            "adoption_date": "all_time",
        }
    )
    assert filters == [
        StatusFilter(frozenset({"available"})),
        SpeciesAndBreedsFilter({"dog": frozenset({"pug"})}),
        AdmissionDateFilter("this_week"),
        AdoptionDateFilter("all_time"),
    ]


def test_parse_filters_accepts_single_status_string():
    assert parse_filters({"status": "adopted"}) == [StatusFilter(frozenset({"adopted"}))]


def test_parse_filters_empty_input():
    assert parse_filters(None) == []
    assert parse_filters({}) == []


@pytest.mark.parametrize(
    "raw",
    [
        {"colour": ["brown"]},
        {"status": 3},
        {"status": ["ok", 1]},
        {"species_and_breeds": ["dog"]},
        {"admission_date": ["today"]},
    ],
)
def test_parse_filters_rejects_bad_input(raw):
    with pytest.raises(InvalidInput):
        parse_filters(raw)


def test_request_filters_only_allow_status():
    assert parse_filters({"status": ["pending"]}, REQUEST_CRITERIA) == [StatusFilter(frozenset({"pending"}))]
    with pytest.raises(InvalidInput):
        parse_filters({"sex": ["male"]}, REQUEST_CRITERIA)
