# service/logging_utils.py
from __future__ import annotations

import contextlib
import datetime as _dt
import json
import os
import re
import socket
from collections.abc import Iterable
from typing import Any

# ---- Configuration (env-driven, read per call so tests can redirect) --------

_DEFAULT_LOG_DIR = "./local/logs"

# A minimal set of keys/substrings to redact (case-insensitive, substring match)
_DEFAULT_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "cookie",
    "set-cookie",
}

# "Basic <b64>" / "Bearer <token>" credential strings inside values
_CREDENTIAL_RE = re.compile(r"\b(Basic|Bearer)\s+[A-Za-z0-9+/=._~-]+", re.IGNORECASE)

# Host + process metadata (fixed per-process)
_HOSTNAME = socket.gethostname()
_PID = os.getpid()


def _log_dir() -> str:
    return os.getenv("LOG_DIR", _DEFAULT_LOG_DIR)


def _activity_prefix() -> str:
    return os.getenv("ACTIVITY_LOG_PREFIX", "activity")


def _error_prefix() -> str:
    return os.getenv("ERROR_LOG_PREFIX", "error")


def _max_bytes() -> int:
    # Optional size-based rotation (bytes). If <=0, size-based rotation is disabled.
    try:
        return int(os.getenv("ACTIVITY_LOG_MAX_BYTES", "0"))
    except ValueError:
        return 0


def _disabled() -> bool:
    return os.getenv("LOG_DISABLE", "").strip().lower() in {"1", "true", "yes", "on"}


# ---- Public API --------------------------------------------------------------


def write_activity_log(record: dict[str, Any]) -> None:
    """
    Persist a single structured activity record (JSON-safe).

    May raise OSError on unrecoverable I/O errors.
    Never mutates the passed-in dict.
    """
    if _disabled():
        return
    _write_jsonl(_log_path_for_today(_activity_prefix()), record)


def write_error_log(record: dict[str, Any]) -> None:
    """Persist a single structured error record (JSON-safe), parallel to the activity log."""
    if _disabled():
        return
    _write_jsonl(_log_path_for_today(_error_prefix()), record)


def get_activity_log_path() -> str:
    """Return the current day's activity log path (<prefix>-YYYY-MM-DD.jsonl)."""
    return _log_path_for_today(_activity_prefix())


def get_error_log_path() -> str:
    return _log_path_for_today(_error_prefix())


def redact(record: dict[str, Any], keys: set[str] | None = None) -> dict[str, Any]:
    """
    Produce a redacted deep copy of `record` by scrubbing values whose KEYS
    contain any of the substrings in `keys` (case-insensitive). Does not mutate input.
    """
    return _redact_deep(record, keys or _DEFAULT_REDACT_KEYS)


# ---- Internal helpers --------------------------------------------------------


def _log_path_for_today(prefix: str) -> str:
    today = _dt.date.today().isoformat()  # YYYY-MM-DD
    return os.path.join(_log_dir(), f"{prefix}-{today}.jsonl")


def _ensure_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


def _rotate_file_if_needed(path: str) -> None:
    """
    Rotate current file if it exceeds ACTIVITY_LOG_MAX_BYTES. Date rotation is
    inherent via the per-day filename.
    """
    limit = _max_bytes()
    if limit <= 0:
        return
    try:
        if os.path.getsize(path) < limit:
            return
    except FileNotFoundError:
        return
    ts = _dt.datetime.now().strftime("%Y%m%d-%H%M%S")
    with contextlib.suppress(FileNotFoundError):
        os.replace(path, f"{path}.{ts}")


def _json_dumps(obj: Any) -> str:
    # Compact, UTF-8; anything non-JSON (Paths, enums) is stringified
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=str)


def _scrub_credentials(value: str) -> str:
    """Keep the auth scheme, replace the credential part."""
    return _CREDENTIAL_RE.sub(lambda m: f"{m.group(1)} ***REDACTED***", value)


def _key_matches(name: str, patterns: Iterable[str]) -> bool:
    n = name.lower()
    return any(pat in n for pat in patterns)


def _redact_deep(value: Any, patterns: Iterable[str]) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if isinstance(k, str) and _key_matches(k, patterns):
                out[k] = "***REDACTED***"
            else:
                out[k] = _redact_deep(v, patterns)
        return out
    if isinstance(value, list):
        return [_redact_deep(v, patterns) for v in value]
    if isinstance(value, tuple):
        return tuple(_redact_deep(v, patterns) for v in value)
    if isinstance(value, str):
        return _scrub_credentials(value)
    return value


def _with_metadata(record: dict[str, Any]) -> dict[str, Any]:
    meta = record.get("_meta", {})
    if not isinstance(meta, dict):
        meta = {}
    out = dict(record)
    out["_meta"] = {**meta, "host": _HOSTNAME, "pid": _PID}
    return out


def _write_jsonl(path: str, record: dict[str, Any]) -> None:
    """
    Core writer:
      - makes a deep redacted copy and adds host/pid
      - rotates by size (optional)
      - appends a single line (POSIX O_APPEND)
      - retries once on transient OSError
    """
    _ensure_dir(path)
    _rotate_file_if_needed(path)

    payload = _with_metadata(_redact_deep(record, _DEFAULT_REDACT_KEYS))
    data = (_json_dumps(payload) + "\n").encode("utf-8")

    flags = os.O_CREAT | os.O_APPEND | os.O_WRONLY

    def _append_once() -> None:
        fd = os.open(path, flags, 0o644)
        try:
            os.write(fd, data)
        finally:
            os.close(fd)

    try:
        _append_once()
    except OSError:
        _ensure_dir(path)
        _append_once()
