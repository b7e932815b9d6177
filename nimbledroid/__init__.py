# nimbledroid/__init__.py
from __future__ import annotations

__version__ = "0.1.0"

# Re-export commonly-used types for convenience
from .config import ClientConfig, ConfigError, Settings
from .errors import (
    PackageFileError,
    ParseError,
    ProfilerError,
    StatusUnavailableError,
    TransportError,
    UploadError,
    WaitCancelled,
    WaitTimeoutError,
)
from .http_client import HttpClient
from .models import JobStatus, Profile, ProfileResult, ProfileScenario, ProfileScenarios
from .poller import fetch_result, fetch_status
from .profiler import Profiler
from .scenarios import fetch_scenarios
from .uploader import upload
from .waiter import wait_for_profile

__all__ = [
    "ClientConfig",
    "ConfigError",
    "HttpClient",
    "JobStatus",
    "PackageFileError",
    "ParseError",
    "Profile",
    "ProfileResult",
    "ProfileScenario",
    "ProfileScenarios",
    "Profiler",
    "ProfilerError",
    "Settings",
    "StatusUnavailableError",
    "TransportError",
    "UploadError",
    "WaitCancelled",
    "WaitTimeoutError",
    "fetch_result",
    "fetch_scenarios",
    "fetch_status",
    "upload",
    "wait_for_profile",
]
