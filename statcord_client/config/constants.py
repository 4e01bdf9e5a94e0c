"""
Configuration constants for the Statcord stats client

This module contains the constants used throughout the client. Numeric
constants can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_bool(name: str, default: bool) -> bool:
    """Retrieve a boolean flag from an environment variable ('true', '1', 'yes')."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


# API origins, keyed by version
API_VERSIONS: dict[str, str] = {
    "v3": "https://api.statcord.com/v3",
}
DEFAULT_API_VERSION = "v3"
DEFAULT_BASE_URL = API_VERSIONS[DEFAULT_API_VERSION]

# Endpoint paths (relative to the base URL)
STATS_ENDPOINT = "stats"

# Payload shaping
TOP_COMMANDS_LIMIT = _get_env_int(
    "STATCORD_TOP_COMMANDS", 5
)  # Popular commands sent per post
CUSTOM_FIELD_SLOTS = (1, 2)  # Remote contract only knows custom1/custom2
CUSTOM_FIELD_DEFAULT = "0"  # Value restored after every successful post

# Platforms where CPU load sampling is not supported (report 0 instead)
CPU_UNSUPPORTED_PLATFORMS = frozenset({"freebsd", "openbsd", "netbsd"})

# Status codes the remote service documents as terminal failures for a round
RATE_LIMIT_STATUS = 429
BAD_REQUEST_STATUS = 400
SERVER_ERROR_MIN_STATUS = 500

# Auto-post scheduling
AUTOPOST_MIN_INTERVAL_SECONDS = 60.0  # Statcord rejects more frequent posts
AUTOPOST_INTERVAL_SECONDS = _get_env_float(
    "STATCORD_AUTOPOST_INTERVAL", 60.0
)  # Default seconds between automatic posts

# Environment variable names read by ClientOptions.from_env()
ENV_BASE_URL = "STATCORD_BASE_URL"
ENV_POST_CPU = "STATCORD_POST_CPU"
ENV_POST_MEMORY = "STATCORD_POST_MEMORY"
ENV_POST_NETWORK = "STATCORD_POST_NETWORK"
ENV_ENABLE_FETCH = "STATCORD_ENABLE_FETCH"
