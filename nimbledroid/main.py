from __future__ import annotations

import time
from typing import Any

import requests

from . import render
from .config import Settings
from .errors import StatusUnavailableError
from .logging_bridge import activity as log_activity
from .models import ProfileScenarios
from .profiler import Profiler


def run(session: requests.Session | None = None, **kwargs: Any) -> tuple[str, dict]:
    """
    Upload one package, wait for its job to finish and collect the results.

    Accepts kwargs (see Settings.from_env_and_kwargs), including:
      apk_path: str                       # REQUIRED
      api_key_env: str = "NIMBLEDROID_API_KEY"
      timeout_seconds: float = 1800
      fetch_scenarios: bool = False
      endpoint / user_agent / poll_interval / ...  # client overrides

    `session` lets callers (and tests) supply the requests session.

    Returns:
      (html, meta) - an HTML report and a summary dict.
    """
    settings = Settings.from_env_and_kwargs(kwargs)
    start_ns = time.perf_counter_ns()

    log_activity({
        "component": "nimbledroid.main",
        "op": "start",
        "apk_path": settings.apk_path,
        "endpoint": settings.client.endpoint,
        "timeout_seconds": settings.timeout_seconds,
        "fetch_scenarios": settings.fetch_scenarios,
    })

    with Profiler(settings.api_key, settings.apk_path, settings.client, session=session) as profiler:
        apk_url = profiler.upload()
        status = profiler.wait_for_profile(apk_url, settings.timeout_seconds)

        result = profiler.get_profile_result(apk_url)
        if result is None:
            raise StatusUnavailableError(f"Job at {apk_url} finished ({status}) but its result could not be fetched")

        details: dict[str, ProfileScenarios | None] = {}
        if settings.fetch_scenarios:
            for p in result.profiles:
                details[p.profile_url] = profiler.get_profile_scenarios(p.profile_url)

    html = render.build_report_html(apk_url, result, details)
    meta = {
        "apk_url": apk_url,
        "status": result.status.value,
        "profiles": len(result.profiles),
        "scenarios_fetched": sum(1 for d in details.values() if d is not None),
        "total_us": int((time.perf_counter_ns() - start_ns) // 1000),
    }
    log_activity({"component": "nimbledroid.main", "op": "done", **meta})
    return html, meta
