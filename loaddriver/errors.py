"""
Error taxonomy for the load driver.

Fatal (abort before any request is sent):
* :class:`ConfigError`, :class:`SourceReadError`, :class:`EmptyPayloadSet`

Per-job (logged, the job is skipped, the run continues):
* :class:`PayloadValidationSkip`, :class:`RequestBuildError`,
  :class:`TransportError`, :class:`RecordWriteError`
"""

from __future__ import annotations


class LoadDriverError(Exception):
    """Base class for every error raised by :mod:`loaddriver`."""


class ConfigError(LoadDriverError):
    """Missing or invalid run configuration."""


class SourceReadError(LoadDriverError):
    """The payload file could not be opened or read."""


class EmptyPayloadSet(LoadDriverError):
    """No valid payload survived validation."""


class PayloadValidationSkip(LoadDriverError):
    """A single candidate payload is not well-formed JSON."""

    def __init__(self, candidate: str, reason: str) -> None:
        super().__init__(f"Invalid JSON skipped: {candidate} ({reason})")
        self.candidate = candidate
        self.reason = reason


class RequestBuildError(LoadDriverError):
    """The HTTP request for one job could not be constructed."""


class TransportError(LoadDriverError):
    """Network or timeout failure for one job."""

    def __init__(self, message: str, elapsed: float) -> None:
        super().__init__(message)
        self.elapsed = elapsed


class RecordWriteError(LoadDriverError):
    """Opening or appending to the result log failed."""


class QueueClosed(LoadDriverError):
    """A job was enqueued after the queue had been closed."""
