from __future__ import annotations


class ProfilerError(Exception):
    """Base exception for nimbledroid client failures."""


class UploadError(ProfilerError):
    """Base exception for a failed package upload."""


class PackageFileError(UploadError):
    """The local package could not be opened or read. No request was issued."""


class TransportError(UploadError):
    """The HTTP request failed below the application layer."""


class ParseError(UploadError):
    """The response body was not JSON, or a required field was missing/invalid."""


class StatusUnavailableError(ProfilerError):
    """A status poll produced no result (transport failure or non-JSON body)."""


class WaitTimeoutError(ProfilerError, TimeoutError):
    """The job did not reach a terminal status before the deadline."""


class WaitCancelled(ProfilerError):
    """The wait loop was stopped through its cancellation event."""
