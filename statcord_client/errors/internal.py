"""Centralized error hierarchy for the stats client.

Classes:
  StatcordError     – Base for all client errors.
  InvalidArgument   – Bad input types passed to a public method.
  TransportFailure  – No HTTP response obtainable, or metrics sampling failed.
  RemoteError       – The remote service answered with a non-success status.
  FetchDisabled     – Historical stats fetch was turned off in the options.

Input validation errors are raised synchronously before any I/O. Submission
path HTTP failures are never raised; they travel as ``RemoteError`` instances
through the event hooks and the returned submission result.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class StatcordError(Exception):
    """Base class for all stats client errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class InvalidArgument(StatcordError, TypeError):
    """Exception raised when a public method receives an argument of the wrong type."""


class TransportFailure(StatcordError):
    """Exception raised when no response could be obtained.

    Covers connection errors, timeouts, and failures of the system metrics
    provider while assembling a submission.
    """


class RemoteError(StatcordError):
    """Exception describing a non-success answer from the stats service.

    Attributes:
        status: HTTP status code returned by the service.
        status_text: HTTP reason phrase, if any.
        body: Decoded response body (empty dict when it could not be decoded).

    Args:
        status: HTTP status code.
        status_text: HTTP reason phrase.
        body: Decoded response body.
        message: Optional message override.
    """

    def __init__(
        self,
        status: int,
        status_text: str | None = None,
        *,
        body: Any = None,
        message: str | None = None,
    ) -> None:
        self.status = status
        self.status_text = status_text or ""
        self.body = body if body is not None else {}
        text = message or f"Statcord responded with HTTP {status}"
        if self.status_text and not message:
            text = f"{text} {self.status_text}"
        super().__init__(text, data={"status": status, "body": self.body})


class FetchDisabled(StatcordError):
    """Exception raised when ``get_stats`` is called with fetching disabled."""


__all__ = [
    "StatcordError",
    "InvalidArgument",
    "TransportFailure",
    "RemoteError",
    "FetchDisabled",
]
