from __future__ import annotations

import time
from pathlib import Path

import requests

from . import logging_bridge
from .errors import PackageFileError, ParseError, TransportError
from .http_client import HttpClient
from .parser import parse_upload_response

UPLOAD_FIELD = "apk"


def upload(client: HttpClient, package_path: str | Path) -> str:
    """
    Submit a package for profiling and return its result-handle (the `apk_url`).

    Not idempotent: every call creates a new job on the service.

    Raises:
        PackageFileError: the package cannot be read (no request is issued)
        TransportError:   the request itself failed
        ParseError:       the response is not JSON or lacks a valid `apk_url`
    """
    path = Path(package_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise PackageFileError(f"Cannot read package {str(path)!r}: {e}") from e

    url = client.config.upload_url
    t0 = time.perf_counter_ns()
    try:
        resp = client.post_file(url, field=UPLOAD_FIELD, filename=path.name, data=data)
    except requests.RequestException as e:
        logging_bridge.error({
            "component": "nimbledroid.uploader",
            "op": "upload",
            "package": str(path),
            "error": repr(e),
        })
        raise TransportError(str(e)) from e

    try:
        apk_url = parse_upload_response(resp.text)
    except ParseError as e:
        logging_bridge.error({
            "component": "nimbledroid.uploader",
            "op": "upload",
            "package": str(path),
            "http_status": resp.status_code,
            "error": str(e),
        })
        raise

    logging_bridge.activity({
        "component": "nimbledroid.uploader",
        "op": "upload",
        "package": str(path),
        "bytes": len(data),
        "apk_url": apk_url,
        "duration_us": int((time.perf_counter_ns() - t0) // 1000),
    })
    return apk_url
