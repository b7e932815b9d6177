# tests/test_parser.py
import json
from datetime import timedelta

import pytest

from nimbledroid.errors import ParseError
from nimbledroid.models import JobStatus, Profile, ProfileResult
from nimbledroid.parser import parse_profile_result, parse_scenarios, parse_status, parse_upload_response

PROFILE = {"scenario_name": "login", "status": "ok", "time_in_ms": 1200, "profile_url": "https://x/y"}


# ----------------------------------------------------------------------
# Status mapping
# ----------------------------------------------------------------------
@pytest.mark.parametrize(
    "wire, expected",
    [
        ("Crawling", JobStatus.CRAWLING),
        ("Pending", JobStatus.PENDING),
        ("Complete", JobStatus.COMPLETE),
        ("Failed", JobStatus.FAILED),
    ],
)
def test_known_statuses_map_exactly(wire, expected):
    assert parse_status({"status": wire}) is expected


@pytest.mark.parametrize("wire", ["complete", "COMPLETE", " Complete", "Error", "Done", "", 1, None, ["Complete"]])
def test_unknown_statuses_map_to_error(wire):
    assert parse_status({"status": wire}) is JobStatus.ERROR


def test_missing_status_and_non_object_bodies_map_to_error():
    assert parse_status({}) is JobStatus.ERROR
    assert parse_status(["Complete"]) is JobStatus.ERROR
    assert parse_status("Complete") is JobStatus.ERROR


# ----------------------------------------------------------------------
# Result parsing (tolerant)
# ----------------------------------------------------------------------
def test_complete_with_one_profile():
    body = json.dumps({"status": "Complete", "profiles": [PROFILE]})
    result = parse_profile_result(body)

    assert result.status is JobStatus.COMPLETE
    assert result.profiles == (Profile("login", "ok", 1200, "https://x/y"),)


def test_profiles_not_an_array_falls_back_to_empty():
    result = parse_profile_result('{"status":"Complete","profiles":"not-an-array"}')
    assert result == ProfileResult(status=JobStatus.COMPLETE)


def test_one_bad_element_empties_the_whole_list():
    bad = dict(PROFILE, time_in_ms=-5)
    body = json.dumps({"status": "Failed", "profiles": [PROFILE, bad]})
    result = parse_profile_result(body)

    assert result.status is JobStatus.FAILED
    assert result.profiles == ()


@pytest.mark.parametrize(
    "mutation",
    [
        {"time_in_ms": "1200"},
        {"time_in_ms": 12.5},
        {"time_in_ms": True},
        {"time_in_ms": -1},
        {"time_in_ms": 2**64},
        {"scenario_name": None},
        {"profile_url": 7},
    ],
)
def test_mistyped_profile_fields_are_rejected(mutation):
    body = json.dumps({"status": "Complete", "profiles": [dict(PROFILE, **mutation)]})
    assert parse_profile_result(body).profiles == ()


def test_time_in_ms_accepts_the_full_unsigned_64_bit_range():
    body = json.dumps({"status": "Complete", "profiles": [dict(PROFILE, time_in_ms=2**64 - 1)]})
    (p,) = parse_profile_result(body).profiles
    assert p.time_in_ms == 2**64 - 1


def test_missing_profiles_key_is_empty():
    assert parse_profile_result('{"status":"Failed"}').profiles == ()


@pytest.mark.parametrize("wire", ["Crawling", "Pending", "Bogus"])
def test_non_terminal_results_never_carry_profiles(wire):
    body = json.dumps({"status": wire, "profiles": [PROFILE]})
    result = parse_profile_result(body)
    assert result.profiles == ()
    assert not result.status.is_terminal


def test_non_json_result_body_is_none():
    assert parse_profile_result("<html>502 Bad Gateway</html>") is None


def test_extra_fields_are_ignored():
    body = json.dumps({"status": "Complete", "extra": 1, "profiles": [dict(PROFILE, note="x")]})
    assert len(parse_profile_result(body).profiles) == 1


# ----------------------------------------------------------------------
# Scenario parsing (strict)
# ----------------------------------------------------------------------
def test_scenario_fixture():
    body = '{"scenarios":[{"name":"a","time":500,"screenshots":["u1"],"thumbnail_screenshots":["t1"]}]}'
    scenarios = parse_scenarios(body)

    assert len(scenarios) == 1
    (s,) = scenarios
    assert s.name == "a"
    assert s.time == timedelta(milliseconds=500)
    assert s.screenshots == ("u1",)
    assert s.thumbnail_screenshots == ("t1",)


def test_screenshot_lists_may_differ_in_length():
    body = json.dumps({
        "scenarios": [{"name": "a", "time": 1, "screenshots": ["u1", "u2"], "thumbnail_screenshots": []}]
    })
    (s,) = parse_scenarios(body)
    assert len(s.screenshots) == 2 and s.thumbnail_screenshots == ()


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "[]",
        "{}",
        '{"scenarios": "nope"}',
        '{"scenarios": [{"name": "a", "time": 1, "screenshots": []}]}',
        '{"scenarios": [{"name": "a", "time": "1", "screenshots": [], "thumbnail_screenshots": []}]}',
        '{"scenarios": [{"name": "a", "time": 1, "screenshots": [3], "thumbnail_screenshots": []}]}',
        '{"scenarios": [1]}',
        '{"scenarios": [{"name": "a", "time": 100000000000000000, "screenshots": [], "thumbnail_screenshots": []}]}',
        '{"scenarios": [{"name": "a", "time": -5, "screenshots": [], "thumbnail_screenshots": []}]}',
    ],
)
def test_any_scenario_failure_is_none(body):
    assert parse_scenarios(body) is None


def test_empty_scenarios_list_is_valid():
    assert len(parse_scenarios('{"scenarios": []}')) == 0


# ----------------------------------------------------------------------
# Upload response
# ----------------------------------------------------------------------
def test_upload_response_returns_apk_url():
    assert parse_upload_response('{"apk_url": "https://nimbledroid.com/apks/1", "x": 2}') == (
        "https://nimbledroid.com/apks/1"
    )


@pytest.mark.parametrize(
    "body",
    [
        "Internal Server Error",
        "[]",
        "{}",
        '{"apk_url": null}',
        '{"apk_url": 12}',
        '{"apk_url": "not a url"}',
        '{"apk_url": "/relative/path"}',
        '{"apk_url": "ftp://host/x"}',
    ],
)
def test_upload_response_errors(body):
    with pytest.raises(ParseError):
        parse_upload_response(body)


# ----------------------------------------------------------------------
# Deeply nested bodies
# ----------------------------------------------------------------------
DEEP = '{"status":' + "[" * 100000 + "]" * 100000 + "}"


def test_deeply_nested_result_body_is_none():
    assert parse_profile_result(DEEP) is None


def test_deeply_nested_scenarios_body_is_none():
    assert parse_scenarios('{"scenarios":' + "[" * 100000 + "]" * 100000 + "}") is None


def test_deeply_nested_upload_body_is_parse_error():
    with pytest.raises(ParseError, match="Could not parse response"):
        parse_upload_response(DEEP)
