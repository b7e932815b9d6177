# service/cli.py
"""
User-facing command-line entrypoints for the profiling client.

Subcommands
-----------
upload APK
    - Uploads a package and prints the result-handle (apk_url)

status URL
    - Polls a result-handle once and prints the job status

result URL
    - Polls a result-handle once and prints status plus profiles

wait URL [--timeout S]
    - Blocks until the job is Complete/Failed or the timeout passes

scenarios URL
    - Fetches and prints the scenario breakdown behind a profile_url

run APK [--timeout S] [--scenarios] [--print-html]
    - Upload, wait and fetch results via nimbledroid.main.run()

The API key is read from the environment variable named by --api-key-env
(default NIMBLEDROID_API_KEY).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Iterable

from nimbledroid import render
from nimbledroid import main as _main
from nimbledroid.config import ClientConfig, ConfigError
from nimbledroid.errors import ProfilerError
from nimbledroid.profiler import Profiler
from nimbledroid.utils import getenv_str, now_iso
from service import logging_utils as L

LOG = logging.getLogger("service.cli")


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging() -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.INFO),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


# -------------------------- Utility / glue code ------------------------------
class _MissingKey(Exception):
    pass


def _client_overrides(args: argparse.Namespace) -> dict[str, object]:
    return {"endpoint": args.endpoint, "user_agent": args.user_agent}


def _profiler(args: argparse.Namespace, apk_path: str | None = None) -> Profiler:
    api_key = getenv_str(args.api_key_env)
    if not api_key:
        raise _MissingKey(args.api_key_env)
    config = ClientConfig.from_env_and_kwargs(_client_overrides(args))
    return Profiler(api_key, apk_path, config)


def _guarded(name: str, func) -> int:
    """Run a subcommand body with the shared exit-code policy and error logging."""
    start = time.monotonic()
    try:
        return func()
    except KeyboardInterrupt:
        return 130
    except _MissingKey as e:
        print(f"ERROR: environment variable {e} holding the API key is not set.", file=sys.stderr)
        return 2
    except (ProfilerError, ConfigError) as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": now_iso(),
            "where": f"cli.{name}",
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start) * 1000),
        })
        return 1


# ------------------------------ Subcommands ----------------------------------
def cmd_upload(args: argparse.Namespace) -> int:
    def body() -> int:
        with _profiler(args, args.apk) as p:
            print(p.upload())
        return 0

    return _guarded("upload", body)


def cmd_status(args: argparse.Namespace) -> int:
    def body() -> int:
        with _profiler(args) as p:
            print(p.get_profile_status(args.url))
        return 0

    return _guarded("status", body)


def cmd_result(args: argparse.Namespace) -> int:
    def body() -> int:
        with _profiler(args) as p:
            result = p.get_profile_result(args.url)
        if result is None:
            print(f"FAILURE: no result available from {args.url}", file=sys.stderr)
            return 1
        print(render.format_result(result), end="")
        return 0

    return _guarded("result", body)


def cmd_wait(args: argparse.Namespace) -> int:
    def body() -> int:
        with _profiler(args) as p:
            status = p.wait_for_profile(args.url, args.timeout)
        print(status)
        return 0

    return _guarded("wait", body)


def cmd_scenarios(args: argparse.Namespace) -> int:
    def body() -> int:
        with _profiler(args) as p:
            scenarios = p.get_profile_scenarios(args.url)
        if scenarios is None:
            print(f"FAILURE: no scenarios available from {args.url}", file=sys.stderr)
            return 1
        print(render.format_scenarios(scenarios), end="")
        return 0

    return _guarded("scenarios", body)


def cmd_run(args: argparse.Namespace) -> int:
    def body() -> int:
        if not getenv_str(args.api_key_env):
            raise _MissingKey(args.api_key_env)
        html, meta = _main.run(
            apk_path=args.apk,
            api_key_env=args.api_key_env,
            timeout_seconds=args.timeout,
            fetch_scenarios=args.scenarios,
            **_client_overrides(args),
        )
        print(f"SUCCESS: {meta['status']} with {meta['profiles']} profile(s) at {meta['apk_url']}")
        if args.print_html:
            print("\n----- HTML OUTPUT -----\n")
            print(html)
        return 0

    return _guarded("run", body)


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="NimbleDroid profiling client",
    )
    p.add_argument("--api-key-env", default="NIMBLEDROID_API_KEY", help="Env var holding the API key.")
    p.add_argument("--endpoint", help="Override the service base URL.")
    p.add_argument("--user-agent", help="Override the client identifier.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("upload", help="Upload a package and print its apk_url.")
    sp.add_argument("apk", help="Path to the package.")
    sp.set_defaults(func=cmd_upload)

    sp = sub.add_parser("status", help="Poll a job once and print its status.")
    sp.add_argument("url", help="Result-handle (apk_url) returned by upload.")
    sp.set_defaults(func=cmd_status)

    sp = sub.add_parser("result", help="Poll a job once and print status and profiles.")
    sp.add_argument("url", help="Result-handle (apk_url) returned by upload.")
    sp.set_defaults(func=cmd_result)

    sp = sub.add_parser("wait", help="Block until the job is Complete or Failed.")
    sp.add_argument("url", help="Result-handle (apk_url) returned by upload.")
    sp.add_argument("--timeout", type=float, default=1800.0, help="Seconds before giving up.")
    sp.set_defaults(func=cmd_wait)

    sp = sub.add_parser("scenarios", help="Print the scenarios behind a profile_url.")
    sp.add_argument("url", help="A profile's profile_url.")
    sp.set_defaults(func=cmd_scenarios)

    sp = sub.add_parser("run", help="Upload, wait and fetch results in one go.")
    sp.add_argument("apk", help="Path to the package.")
    sp.add_argument("--timeout", type=float, default=1800.0, help="Seconds before giving up.")
    sp.add_argument("--scenarios", action="store_true", help="Also fetch scenarios per profile.")
    sp.add_argument("--print-html", action="store_true", help="Print the HTML report to stdout.")
    sp.set_defaults(func=cmd_run)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
