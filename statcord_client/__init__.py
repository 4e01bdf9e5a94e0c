"""Statcord stats client.

Accumulates bot command usage, samples host metrics and reports them to the
Statcord API.
"""

from .autopost import AutoPoster
from .client import StatsClient
from .config import API_VERSIONS, ClientOptions
from .errors import (
    FetchDisabled,
    InvalidArgument,
    RemoteError,
    StatcordError,
    TransportFailure,
)
from .hooks import EventHooks
from .logging_config import LoggerConfigurator
from .metrics import PsutilMetricsProvider, SystemMetricsProvider
from .models import BotStatsData, CommandRecord, StatsPayload, SubmissionResult

__version__ = "1.0.0"

__all__ = [
    "StatsClient",
    "ClientOptions",
    "API_VERSIONS",
    "AutoPoster",
    "EventHooks",
    "LoggerConfigurator",
    "SystemMetricsProvider",
    "PsutilMetricsProvider",
    "BotStatsData",
    "CommandRecord",
    "StatsPayload",
    "SubmissionResult",
    "StatcordError",
    "InvalidArgument",
    "TransportFailure",
    "RemoteError",
    "FetchDisabled",
]
