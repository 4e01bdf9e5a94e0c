from .handling import handle_transport_error, log_error
from .internal import (
    FetchDisabled,
    InvalidArgument,
    RemoteError,
    StatcordError,
    TransportFailure,
)

__all__ = [
    "StatcordError",
    "InvalidArgument",
    "TransportFailure",
    "RemoteError",
    "FetchDisabled",
    "log_error",
    "handle_transport_error",
]
