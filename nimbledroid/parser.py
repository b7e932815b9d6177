"""
JSON body -> entity mapping for the profiling service.

Two deliberately different strategies live here:
  - parse_profile_result is tolerant: a bad `profiles` array degrades to an
    empty list so the caller still learns the job's status.
  - parse_scenarios is strict: any bad element rejects the whole body.
"""

from __future__ import annotations

import json
from datetime import timedelta
from typing import Any
from urllib.parse import urlsplit

from .errors import ParseError
from .models import JobStatus, Profile, ProfileResult, ProfileScenario, ProfileScenarios


class _ShapeError(ValueError):
    """An element did not have the expected fields/types."""


U64_MAX = 2**64 - 1


def _loads(body: str | bytes) -> Any:
    """Decode JSON; raises ValueError on invalid or pathologically nested input."""
    try:
        return json.loads(body)
    except RecursionError as e:
        raise ValueError("JSON body is nested too deeply") from e


# -----------------------------
# Field readers
# -----------------------------
def _require_str(obj: dict[str, Any], key: str) -> str:
    val = obj.get(key)
    if not isinstance(val, str):
        raise _ShapeError(f"{key!r} must be a string (got {type(val).__name__})")
    return val


def _require_uint(obj: dict[str, Any], key: str) -> int:
    val = obj.get(key)
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(val, bool) or not isinstance(val, int) or not 0 <= val <= U64_MAX:
        raise _ShapeError(f"{key!r} must be an unsigned 64-bit integer (got {val!r})")
    return val


def _require_str_list(obj: dict[str, Any], key: str) -> tuple[str, ...]:
    val = obj.get(key)
    if not isinstance(val, list) or not all(isinstance(x, str) for x in val):
        raise _ShapeError(f"{key!r} must be a list of strings")
    return tuple(val)


def _require_object(val: Any) -> dict[str, Any]:
    if not isinstance(val, dict):
        raise _ShapeError(f"expected an object (got {type(val).__name__})")
    return val


# -----------------------------
# Status / profiles (tolerant)
# -----------------------------
def parse_status(payload: Any) -> JobStatus:
    """Map a decoded body to a JobStatus. Never fails: unknown/missing -> ERROR."""
    if not isinstance(payload, dict):
        return JobStatus.ERROR
    return JobStatus.from_wire(payload.get("status"))


def _parse_profile(raw: Any) -> Profile:
    obj = _require_object(raw)
    return Profile(
        scenario_name=_require_str(obj, "scenario_name"),
        status=_require_str(obj, "status"),
        time_in_ms=_require_uint(obj, "time_in_ms"),
        profile_url=_require_str(obj, "profile_url"),
    )


def _parse_profiles_or_empty(raw: Any) -> tuple[Profile, ...]:
    if not isinstance(raw, list):
        return ()
    try:
        return tuple(_parse_profile(item) for item in raw)
    except _ShapeError:
        return ()


def parse_profile_result(body: str | bytes) -> ProfileResult | None:
    """
    Parse a result/status body. Returns None only when the body is not JSON.
    """
    try:
        payload = _loads(body)
    except ValueError:
        return None

    status = parse_status(payload)
    if not status.is_terminal:
        return ProfileResult(status=status)
    return ProfileResult(status=status, profiles=_parse_profiles_or_empty(payload.get("profiles")))


# -----------------------------
# Scenarios (strict)
# -----------------------------
def _millis(ms: int) -> timedelta:
    try:
        return timedelta(milliseconds=ms)
    except OverflowError as e:
        raise _ShapeError(f"'time' of {ms} ms does not fit a timedelta") from e


def _parse_scenario(raw: Any) -> ProfileScenario:
    obj = _require_object(raw)
    return ProfileScenario(
        name=_require_str(obj, "name"),
        time=_millis(_require_uint(obj, "time")),
        screenshots=_require_str_list(obj, "screenshots"),
        thumbnail_screenshots=_require_str_list(obj, "thumbnail_screenshots"),
    )


def parse_scenarios(body: str | bytes) -> ProfileScenarios | None:
    """Parse a scenario detail body. Any failure anywhere -> None."""
    try:
        payload = _require_object(_loads(body))
        raw = payload.get("scenarios")
        if not isinstance(raw, list):
            return None
        return ProfileScenarios(scenarios=tuple(_parse_scenario(item) for item in raw))
    except ValueError:
        # json.JSONDecodeError and _ShapeError are both ValueErrors
        return None


# -----------------------------
# Upload
# -----------------------------
def parse_upload_response(body: str | bytes) -> str:
    """Extract the job's result-handle (`apk_url`) from an upload response."""
    try:
        payload = _loads(body)
    except ValueError as e:
        raise ParseError("Could not parse response.") from e

    apk_url = payload.get("apk_url") if isinstance(payload, dict) else None
    if not isinstance(apk_url, str) or not apk_url.strip():
        raise ParseError("Response has no 'apk_url' string.")

    apk_url = apk_url.strip()
    parts = urlsplit(apk_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ParseError(f"'apk_url' is not a valid URL: {apk_url!r}")
    return apk_url
