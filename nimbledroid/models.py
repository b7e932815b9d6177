from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    """
    Lifecycle of one profiling job.

    Crawling/Pending are in progress, Complete/Failed are terminal.
    Error is never sent by the service: it is what an unrecognized or
    missing remote status maps to.
    """

    CRAWLING = "Crawling"
    PENDING = "Pending"
    COMPLETE = "Complete"
    FAILED = "Failed"
    ERROR = "Error"

    @classmethod
    def from_wire(cls, value: Any) -> JobStatus:
        """Exact, case-sensitive match of a remote status string. Total: defaults to ERROR."""
        if isinstance(value, str) and value in _REMOTE_STATUSES:
            return cls(value)
        return cls.ERROR

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETE, JobStatus.FAILED)

    def __str__(self) -> str:
        return self.value


_REMOTE_STATUSES = frozenset({"Pending", "Crawling", "Complete", "Failed"})


@dataclass(frozen=True)
class Profile:
    """
    Summary of one analysed scenario within a job.
    profile_url points at the scenario detail resource (see scenarios.fetch_scenarios).
    """

    scenario_name: str
    status: str  # free-form, defined by the service
    time_in_ms: int
    profile_url: str


@dataclass(frozen=True)
class ProfileResult:
    """
    One snapshot of a job: its status plus whatever profiles it reported.
    Profiles are only ever present for terminal statuses.
    """

    status: JobStatus
    profiles: tuple[Profile, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.profiles and not self.status.is_terminal:
            raise ValueError(f"profiles must be empty for non-terminal status {self.status}")


@dataclass(frozen=True)
class ProfileScenario:
    name: str
    time: timedelta
    screenshots: tuple[str, ...] = field(default_factory=tuple)
    thumbnail_screenshots: tuple[str, ...] = field(default_factory=tuple)

    @property
    def time_in_ms(self) -> int:
        return int(self.time / timedelta(milliseconds=1))


@dataclass(frozen=True)
class ProfileScenarios:
    scenarios: tuple[ProfileScenario, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[ProfileScenario]:
        return iter(self.scenarios)

    def __len__(self) -> int:
        return len(self.scenarios)
