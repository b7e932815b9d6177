from __future__ import annotations

import html
import os
from datetime import datetime, timezone
from typing import Any

_TRUE_WORDS = frozenset({"1", "true", "yes", "on", "y", "t"})


def esc(s: str | None) -> str:
    """Escape scenario names and profile/screenshot URLs for the HTML report."""
    return "" if s is None else html.escape(str(s), quote=True)


def truthy(v: Any) -> bool:
    """
    Read a flag such as `fetch_scenarios` from kwargs or the environment.

    Numbers are true when non-zero; strings must be one of _TRUE_WORDS.
    """
    if v is None or isinstance(v, bool):
        return bool(v)
    if isinstance(v, (int, float)):
        return v != 0
    return str(v).strip().lower() in _TRUE_WORDS


def now_iso() -> str:
    # 'ts' field of every log record
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Stripped value of a NIMBLEDROID_* (or API key) variable.

    An exported-but-blank variable falls back to `default`, so
    `NIMBLEDROID_ENDPOINT=` does not override the built-in endpoint.
    """
    val = (os.getenv(name) or "").strip()
    return val or default
