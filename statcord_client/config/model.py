from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    AUTOPOST_INTERVAL_SECONDS,
    AUTOPOST_MIN_INTERVAL_SECONDS,
    DEFAULT_BASE_URL,
    ENV_BASE_URL,
    ENV_ENABLE_FETCH,
    ENV_POST_CPU,
    ENV_POST_MEMORY,
    ENV_POST_NETWORK,
    _get_env_bool,
)


class ClientOptions(BaseModel):
    """Options recognised by the stats client.

    Attributes:
        base_url: API origin override. Defaults to the versioned Statcord API.
        post_cpu_statistics: Include CPU load in posted stats.
        post_memory_statistics: Include memory usage in posted stats.
        post_network_statistics: Include received-bandwidth deltas in posted stats.
        enable_stats_fetch: Allow ``get_stats`` to query historical stats.
        autopost_interval: Seconds between automatic posts (minimum 60).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = DEFAULT_BASE_URL
    post_cpu_statistics: bool = False
    post_memory_statistics: bool = False
    post_network_statistics: bool = False
    enable_stats_fetch: bool = True
    autopost_interval: float = Field(default=AUTOPOST_INTERVAL_SECONDS)

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_base_url(cls, v: Any) -> str:
        """Fall back to the default origin for empty values and drop trailing '/'."""
        if v is None:
            return DEFAULT_BASE_URL
        if not isinstance(v, str):
            raise ValueError("base_url must be a string")
        stripped = v.strip().rstrip("/")
        if not stripped:
            return DEFAULT_BASE_URL
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return stripped

    @field_validator("autopost_interval")
    @classmethod
    def validate_autopost_interval(cls, v: float) -> float:
        if v < AUTOPOST_MIN_INTERVAL_SECONDS:
            raise ValueError(
                f"autopost_interval must be at least {AUTOPOST_MIN_INTERVAL_SECONDS:.0f} seconds"
            )
        return v

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ClientOptions:
        """Create ClientOptions from a mapping, ignoring ``None`` values.

        Args:
            data: Mapping of option names to values, or None for defaults.

        Returns:
            ClientOptions instance.
        """
        if not data:
            return cls()
        return cls.model_validate({k: v for k, v in data.items() if v is not None})

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientOptions:
        """Build options from ``STATCORD_*`` environment variables.

        Keyword overrides win over the environment.
        """
        data: dict[str, Any] = {
            "base_url": os.getenv(ENV_BASE_URL),
            "post_cpu_statistics": _get_env_bool(ENV_POST_CPU, False),
            "post_memory_statistics": _get_env_bool(ENV_POST_MEMORY, False),
            "post_network_statistics": _get_env_bool(ENV_POST_NETWORK, False),
            "enable_stats_fetch": _get_env_bool(ENV_ENABLE_FETCH, True),
        }
        data.update(overrides)
        return cls.from_dict(data)
