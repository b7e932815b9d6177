from __future__ import annotations

import logging

import requests

from . import logging_bridge
from .errors import StatusUnavailableError
from .http_client import HttpClient
from .models import JobStatus, ProfileResult
from .parser import parse_profile_result

LOG = logging.getLogger(__name__)


def fetch_result(client: HttpClient, handle: str) -> ProfileResult | None:
    """
    One GET against the job's result-handle.

    Returns None on transport failure or a non-JSON body; both are treated as
    transient by the wait loop. Unknown statuses come back as JobStatus.ERROR.
    """
    try:
        resp = client.get(handle)
    except requests.RequestException as e:
        LOG.warning("poll %s failed: %s", handle, e)
        logging_bridge.error({
            "component": "nimbledroid.poller",
            "op": "poll",
            "apk_url": handle,
            "error": repr(e),
        })
        return None

    result = parse_profile_result(resp.text)
    if result is None:
        LOG.warning("poll %s returned a non-JSON body (HTTP %s)", handle, resp.status_code)
        return None

    logging_bridge.activity({
        "component": "nimbledroid.poller",
        "op": "poll",
        "apk_url": handle,
        "status": result.status.value,
        "profiles": len(result.profiles),
    })
    return result


def fetch_status(client: HttpClient, handle: str) -> JobStatus:
    """Status-only view of fetch_result; raises StatusUnavailableError when there is no result."""
    result = fetch_result(client, handle)
    if result is None:
        raise StatusUnavailableError("Failed to get profile status")
    return result.status
