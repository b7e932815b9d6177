"""
Blocking wait loop for one profiling job.

The loop polls on a fixed cadence until the job is Complete or Failed, or the
deadline passes. In-progress statuses, the Error sentinel and unavailable
polls are all treated alike: keep polling. The call blocks its thread for up
to `timeout`; run one wait per job on its own thread to profile several jobs
at once (no state is shared between calls).
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import timedelta

from . import logging_bridge
from .errors import StatusUnavailableError, WaitCancelled, WaitTimeoutError
from .models import JobStatus

DEFAULT_POLL_INTERVAL = 3.0


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def wait_for_profile(
    fetch_status: Callable[[str], JobStatus],
    handle: str,
    timeout: float | timedelta,
    *,
    interval: float | timedelta = DEFAULT_POLL_INTERVAL,
    cancel: threading.Event | None = None,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
) -> JobStatus:
    """
    Poll `fetch_status(handle)` until a terminal status is observed.

    Args:
        fetch_status: status callable, e.g. functools.partial(poller.fetch_status, client)
        handle: the job's result-handle (apk_url)
        timeout: overall deadline, seconds or timedelta
        interval: pause between polls
        cancel: optional event; when set the loop stops with WaitCancelled
        sleep/clock: injectable time sources (default time.sleep / time.monotonic)

    Returns:
        The terminal JobStatus (COMPLETE or FAILED).

    Raises:
        WaitTimeoutError: the deadline passed without a terminal status
        WaitCancelled: `cancel` was set
    """
    limit = _seconds(timeout)
    pause = _seconds(interval)
    now = clock or time.monotonic
    start = now()
    polls = 0
    last: JobStatus | None = None

    while True:
        if cancel is not None and cancel.is_set():
            logging_bridge.activity({
                "component": "nimbledroid.waiter",
                "op": "wait_cancelled",
                "apk_url": handle,
                "polls": polls,
            })
            raise WaitCancelled(f"Wait for {handle} cancelled after {polls} poll(s)")

        polls += 1
        try:
            last = fetch_status(handle)
        except StatusUnavailableError:
            last = None

        if last is not None and last.is_terminal:
            logging_bridge.activity({
                "component": "nimbledroid.waiter",
                "op": "wait_done",
                "apk_url": handle,
                "status": last.value,
                "polls": polls,
                "elapsed_s": round(now() - start, 3),
            })
            return last

        elapsed = now() - start
        if elapsed > limit:
            logging_bridge.error({
                "component": "nimbledroid.waiter",
                "op": "wait_timeout",
                "apk_url": handle,
                "last_status": last.value if last is not None else None,
                "polls": polls,
                "timeout_s": limit,
            })
            raise WaitTimeoutError(
                f"Profile at {handle} not finished after {elapsed:.1f}s "
                f"(last status: {last.value if last is not None else 'unavailable'})"
            )

        if sleep is not None:
            sleep(pause)
        elif cancel is not None:
            cancel.wait(pause)
        else:
            time.sleep(pause)
