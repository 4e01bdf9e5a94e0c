from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp

from ..logging_config import log_structured_error
from .internal import (
    FetchDisabled,
    InvalidArgument,
    RemoteError,
    StatcordError,
    TransportFailure,
)

T = TypeVar("T")


def log_error(message: str, error: Exception, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    The error is categorised from its type and forwarded to structured
    logging so repeated failures are aggregated per category.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, TransportFailure | OSError | ConnectionError | aiohttp.ClientError):
        error_type = "network"
    elif isinstance(error, RemoteError):
        error_type = "ratelimit" if error.status == 429 else "remote"
    elif isinstance(error, InvalidArgument):
        error_type = "argument"
    elif isinstance(error, FetchDisabled):
        error_type = "config"
    elif isinstance(error, StatcordError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


async def handle_transport_error(
    operation: Callable[[], Awaitable[T]], context: str
) -> T:
    """Await a transport operation, converting I/O failures into TransportFailure.

    Args:
        operation: The async operation to execute.
        context: Descriptive context for the operation (e.g., "Statcord POST stats").

    Returns:
        The result of the operation if successful.

    Raises:
        TransportFailure: If the operation failed without producing a response.
    """
    try:
        return await operation()
    except (aiohttp.ClientError, TimeoutError, OSError) as e:
        error_context = {"operation": context, "timestamp": time.time()}
        if hasattr(e, "url"):
            error_context["url"] = str(e.url)
        log_error(f"Transport operation failed in {context}", e, context=error_context)
        raise TransportFailure(
            f"No response obtained in {context}. Check network connectivity and the API base URL. Error: {str(e)}",
            data=error_context,
        ) from e
