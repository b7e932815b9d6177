from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from . import __version__
from .utils import getenv_str, truthy

DEFAULT_ENDPOINT = "https://nimbledroid.com"
DEFAULT_USER_AGENT = f"nimbledroid-py/{__version__}"
UPLOAD_PATH = "/api/v2/apks"


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid configuration."""


# -----------------------------
# Models
# -----------------------------
@dataclass(frozen=True)
class ClientConfig:
    """
    Connection settings shared by every request the client makes.

    - endpoint: base URL of the service; uploads go to <endpoint>/api/v2/apks
    - user_agent: client identifier sent on every request
    - host: explicit Host header; derived from endpoint when unset
    - poll_interval: seconds between status polls while waiting
    - request_timeout: per-request transport timeout (None = no timeout)
    - get_retries: transport-level retries for GET only (uploads are never retried)
    """

    endpoint: str = DEFAULT_ENDPOINT
    user_agent: str = DEFAULT_USER_AGENT
    host: str | None = None
    poll_interval: float = 3.0
    request_timeout: float | None = None
    get_retries: int = 3

    @property
    def upload_url(self) -> str:
        return self.endpoint.rstrip("/") + UPLOAD_PATH

    @property
    def host_header(self) -> str:
        if self.host:
            return self.host
        return urlsplit(self.endpoint).netloc

    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None = None) -> ClientConfig:
        """
        Build a ClientConfig from kwargs, falling back to environment variables:

            endpoint         NIMBLEDROID_ENDPOINT
            user_agent       NIMBLEDROID_USER_AGENT
            host             NIMBLEDROID_HOST
            poll_interval    NIMBLEDROID_POLL_INTERVAL
            request_timeout  NIMBLEDROID_REQUEST_TIMEOUT
            get_retries      NIMBLEDROID_GET_RETRIES
        """
        kw = dict(kwargs or {})

        def pick(key: str, env: str) -> Any:
            val = kw.get(key)
            if val is None or (isinstance(val, str) and not val.strip()):
                return getenv_str(env)
            return val

        endpoint = str(pick("endpoint", "NIMBLEDROID_ENDPOINT") or DEFAULT_ENDPOINT).strip()
        user_agent = str(pick("user_agent", "NIMBLEDROID_USER_AGENT") or DEFAULT_USER_AGENT).strip()
        host = pick("host", "NIMBLEDROID_HOST")

        try:
            poll_raw = pick("poll_interval", "NIMBLEDROID_POLL_INTERVAL")
            poll_interval = 3.0 if poll_raw is None else float(poll_raw)
            timeout_raw = pick("request_timeout", "NIMBLEDROID_REQUEST_TIMEOUT")
            request_timeout = None if timeout_raw is None else float(timeout_raw)
            retries_raw = pick("get_retries", "NIMBLEDROID_GET_RETRIES")
            get_retries = 3 if retries_raw is None else int(retries_raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric client setting: {e}") from e

        config = cls(
            endpoint=endpoint,
            user_agent=user_agent,
            host=str(host).strip() if host else None,
            poll_interval=poll_interval,
            request_timeout=request_timeout,
            get_retries=get_retries,
        )
        _validate_client_config(config)
        return config


@dataclass
class Settings:
    """
    Canonical configuration for one profiling run (upload -> wait -> fetch).

    The API key is never passed around in kwargs; `api_key_env` names the
    environment variable holding it, and the resolved value lands in `api_key`.
    """

    api_key: str = field(default="", repr=False)
    api_key_env: str = "NIMBLEDROID_API_KEY"
    apk_path: str = ""
    timeout_seconds: float = 1800.0
    fetch_scenarios: bool = False
    client: ClientConfig = field(default_factory=ClientConfig)

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs with validation.

        Expected kwargs:

            apk_path: str                  # REQUIRED, local package to upload
            api_key_env: str = "NIMBLEDROID_API_KEY"
            timeout_seconds: float = 1800
            fetch_scenarios: bool = false

            # Client overrides (see ClientConfig.from_env_and_kwargs)
            endpoint, user_agent, host, poll_interval, request_timeout, get_retries
        """
        kw = dict(kwargs or {})

        api_key_env = str(kw.get("api_key_env") or "NIMBLEDROID_API_KEY").strip()
        api_key = getenv_str(api_key_env) or ""
        if not api_key:
            raise ConfigError(f"Missing API key: environment variable {api_key_env!r} is not set.")

        apk_path = str(kw.get("apk_path") or "").strip()
        if not apk_path:
            raise ConfigError("Missing 'apk_path' (package to upload).")

        timeout_raw = kw.get("timeout_seconds")
        try:
            timeout_seconds = 1800.0 if timeout_raw in (None, "") else float(timeout_raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid 'timeout_seconds': {timeout_raw!r}") from e

        settings = cls(
            api_key=api_key,
            api_key_env=api_key_env,
            apk_path=apk_path,
            timeout_seconds=timeout_seconds,
            fetch_scenarios=truthy(kw.get("fetch_scenarios")),
            client=ClientConfig.from_env_and_kwargs(kw),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def _validate_client_config(c: ClientConfig) -> None:
    parts = urlsplit(c.endpoint)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(f"'endpoint' must be an absolute http(s) URL (got {c.endpoint!r}).")
    if not c.user_agent:
        raise ConfigError("'user_agent' cannot be empty.")
    if c.poll_interval < 0:
        raise ConfigError("'poll_interval' must be >= 0.")
    if c.request_timeout is not None and c.request_timeout <= 0:
        raise ConfigError("'request_timeout' must be > 0 when set.")
    if c.get_retries < 0:
        raise ConfigError("'get_retries' must be >= 0.")


def _validate_settings(s: Settings) -> None:
    if s.timeout_seconds < 0:
        raise ConfigError("'timeout_seconds' must be >= 0.")
