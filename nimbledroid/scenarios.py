from __future__ import annotations

import logging

import requests

from . import logging_bridge
from .http_client import HttpClient
from .models import ProfileScenarios
from .parser import parse_scenarios

LOG = logging.getLogger(__name__)


def fetch_scenarios(client: HttpClient, profile_url: str) -> ProfileScenarios | None:
    """
    Fetch the scenario breakdown behind one Profile.profile_url.

    All-or-nothing: a transport failure, a non-JSON body or any malformed
    scenario yields None.
    """
    try:
        resp = client.get(profile_url)
    except requests.RequestException as e:
        LOG.warning("scenario fetch %s failed: %s", profile_url, e)
        logging_bridge.error({
            "component": "nimbledroid.scenarios",
            "op": "scenarios",
            "profile_url": profile_url,
            "error": repr(e),
        })
        return None

    scenarios = parse_scenarios(resp.text)
    if scenarios is None:
        logging_bridge.error({
            "component": "nimbledroid.scenarios",
            "op": "scenarios",
            "profile_url": profile_url,
            "http_status": resp.status_code,
            "error": "unparseable scenarios body",
        })
        return None

    logging_bridge.activity({
        "component": "nimbledroid.scenarios",
        "op": "scenarios",
        "profile_url": profile_url,
        "count": len(scenarios),
    })
    return scenarios
