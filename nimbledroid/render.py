from __future__ import annotations

from collections.abc import Mapping

from . import utils
from .models import Profile, ProfileResult, ProfileScenario, ProfileScenarios


# ---- plain text -------------------------------------------------------------
def format_profile(p: Profile) -> str:
    return (
        f"scenario_name: {p.scenario_name}\n"
        f"status: {p.status}\n"
        f"time_in_ms: {p.time_in_ms}\n"
        f"profile_url: {p.profile_url}\n"
    )


def format_result(result: ProfileResult) -> str:
    """status line followed by one block per profile."""
    lines = [f"status: {result.status}\n"]
    lines.extend(format_profile(p) for p in result.profiles)
    return "".join(lines)


def format_scenario(s: ProfileScenario) -> str:
    lines = [f"name: {s.name}", f"time: {s.time_in_ms}", "Screenshots:"]
    lines.extend(s.screenshots)
    lines.append("Thumbnail Screenshots:")
    lines.extend(s.thumbnail_screenshots)
    return "\n".join(lines) + "\n"


def format_scenarios(scenarios: ProfileScenarios) -> str:
    return "\n".join(format_scenario(s) for s in scenarios)


# ---- HTML -------------------------------------------------------------------
def build_report_html(
    apk_url: str,
    result: ProfileResult,
    details: Mapping[str, ProfileScenarios | None] | None = None,
) -> str:
    """
    Minimal HTML report: one table of profiles, then (optionally) a table of
    scenarios per profile keyed by profile_url.
    """
    details = details or {}
    rows: list[str] = []
    for p in result.profiles:
        link = f'<a href="{utils.esc(p.profile_url)}">details</a>'
        rows.append(
            f"<tr><td>{utils.esc(p.scenario_name)}</td><td>{utils.esc(p.status)}</td>"
            f"<td>{p.time_in_ms}</td><td>{link}</td></tr>"
        )
    parts: list[str] = [
        "<div>",
        f"<h2>Profile {utils.esc(str(result.status))}</h2>",
        f"<p>{utils.esc(apk_url)}</p>",
        "<table border='1' cellspacing='0' cellpadding='6'>"
        "<tr><th>Scenario</th><th>Status</th><th>Time (ms)</th><th>Link</th></tr>" + "".join(rows) + "</table>",
    ]

    for p in result.profiles:
        scen = details.get(p.profile_url)
        if scen is None:
            continue
        srows = []
        for s in scen:
            shots = " ".join(f'<a href="{utils.esc(u)}">{i + 1}</a>' for i, u in enumerate(s.screenshots))
            srows.append(f"<tr><td>{utils.esc(s.name)}</td><td>{s.time_in_ms}</td><td>{shots}</td></tr>")
        parts.append(f"<h3>{utils.esc(p.scenario_name)}</h3>")
        parts.append(
            "<table border='1' cellspacing='0' cellpadding='6'>"
            "<tr><th>Name</th><th>Time (ms)</th><th>Screenshots</th></tr>" + "".join(srows) + "</table>"
        )

    parts.append("</div>")
    return "\n".join(parts)
