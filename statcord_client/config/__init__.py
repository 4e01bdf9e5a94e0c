"""Configuration package exports.

Options model plus the constants table used by the client.
"""

from .constants import API_VERSIONS, DEFAULT_BASE_URL  # noqa: F401
from .model import ClientOptions

__all__ = ["API_VERSIONS", "DEFAULT_BASE_URL", "ClientOptions"]
