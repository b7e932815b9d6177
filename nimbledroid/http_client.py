# nimbledroid/http_client.py
from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import ClientConfig

LOG = logging.getLogger(__name__)


def basic_auth_header(api_key: str) -> str:
    """Basic credentials with the API key as username and an empty password."""
    token = base64.b64encode(f"{api_key}:".encode()).decode("ascii")
    return f"Basic {token}"


class HttpClient:
    """
    Authenticated HTTP session for the profiling service.

    Every request carries Authorization/Host/User-Agent headers and asks for an
    uncompressed body. There is no transport timeout unless the config sets one;
    the wait loop is what bounds time.
    """

    def __init__(
        self,
        api_key: str,
        config: ClientConfig | None = None,
        *,
        session: requests.Session | None = None,
    ):
        self.config = config or ClientConfig()
        if session is None:
            session = requests.Session()
            # Uploads create jobs, so only GET is ever retried.
            retry = Retry(
                total=self.config.get_retries,
                backoff_factor=0.5,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=frozenset(["GET"]),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session
        self.session.headers.update({
            "Authorization": basic_auth_header(api_key),
            "Host": self.config.host_header,
            "User-Agent": self.config.user_agent,
            "Accept-Encoding": "identity",
        })

    def get(self, url: str, *, headers: Mapping[str, str] | None = None, **kwargs: Any) -> requests.Response:
        """GET `url`. Transport errors propagate as requests.RequestException."""
        LOG.debug("GET %s", url)
        return self.session.get(url, headers=headers, timeout=self.config.request_timeout, **kwargs)

    def post_file(self, url: str, *, field: str, filename: str, data: bytes) -> requests.Response:
        """POST a multipart/form-data body holding a single file field."""
        LOG.debug("POST %s (%s=%s, %d bytes)", url, field, filename, len(data))
        files = {field: (filename, data, "application/octet-stream")}
        return self.session.post(url, files=files, timeout=self.config.request_timeout)

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("HttpClient.close() swallow", exc_info=True)

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
