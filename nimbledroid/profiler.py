from __future__ import annotations

import functools
import threading
from datetime import timedelta
from pathlib import Path

import requests

from . import poller, scenarios, uploader, waiter
from .config import ClientConfig
from .http_client import HttpClient
from .models import JobStatus, ProfileResult, ProfileScenarios


class Profiler:
    """
    Main entry point: drives the creation and inspection of one profile.

        with Profiler(api_key, "app.apk") as p:
            url = p.upload()
            p.wait_for_profile(url, timeout=1800)
            result = p.get_profile_result(url)
            for prof in result.profiles:
                details = p.get_profile_scenarios(prof.profile_url)

    Instances carry only the key, the package path and connection settings,
    so separate instances can wait on separate threads without locking.
    """

    def __init__(
        self,
        api_key: str,
        apk_path: str | Path | None = None,
        config: ClientConfig | None = None,
        *,
        session: requests.Session | None = None,
    ):
        self.apk_path = Path(apk_path) if apk_path is not None else None
        self.config = config or ClientConfig()
        self._client = HttpClient(api_key, self.config, session=session)

    def upload(self) -> str:
        if self.apk_path is None:
            raise ValueError("Profiler was created without an apk_path.")
        return uploader.upload(self._client, self.apk_path)

    def get_profile_result(self, apk_url: str) -> ProfileResult | None:
        return poller.fetch_result(self._client, apk_url)

    def get_profile_status(self, apk_url: str) -> JobStatus:
        return poller.fetch_status(self._client, apk_url)

    def get_profile_scenarios(self, profile_url: str) -> ProfileScenarios | None:
        return scenarios.fetch_scenarios(self._client, profile_url)

    def wait_for_profile(
        self,
        apk_url: str,
        timeout: float | timedelta,
        *,
        cancel: threading.Event | None = None,
    ) -> JobStatus:
        return waiter.wait_for_profile(
            functools.partial(poller.fetch_status, self._client),
            apk_url,
            timeout,
            interval=self.config.poll_interval,
            cancel=cancel,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Profiler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
