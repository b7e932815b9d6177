from __future__ import annotations

import logging
from typing import Any

from service import logging_utils as _backend

from .utils import now_iso

LOG = logging.getLogger("nimbledroid.activity")


def _stamped(record: dict[str, Any]) -> dict[str, Any]:
    out = {"ts": now_iso()}
    out.update(record)
    return out


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the JSONL activity log.
    A failing log write never breaks a profiling run; it is reported on stdlib logging instead.
    """
    payload = _stamped(record)
    try:
        _backend.write_activity_log(payload)
    except OSError:
        LOG.warning("activity log write failed: %s", _backend.redact(payload), exc_info=True)


def error(record: dict[str, Any]) -> None:
    """Write an error record to the JSONL error log (stdlib logging on write failure)."""
    payload = _stamped(record)
    try:
        _backend.write_error_log(payload)
    except OSError:
        LOG.error("error log write failed: %s", _backend.redact(payload), exc_info=True)
