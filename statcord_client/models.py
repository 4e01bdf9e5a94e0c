"""Data models exchanged with the Statcord API.

``StatsInput`` validates what callers hand to ``submit_stats``;
``StatsPayload`` is the body posted to ``/stats`` (minus the key);
``BotStatsData`` is one historical record returned by ``GET /{bot_id}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

Number = StrictInt | StrictFloat


@dataclass(frozen=True, slots=True)
class CommandRecord:
    """Snapshot of a command's invocation count at the time it was recorded."""

    name: str
    count: int


class StatsInput(BaseModel):
    """Arguments accepted by ``StatsClient.submit_stats``.

    ``memory_used`` is the memory load percentage; ``bandwidth`` overrides the
    stored received-bytes baseline for a single call.
    """

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    guilds_count: Number
    users_count: Number
    memory_active: Number | None = None
    memory_used: Number | None = None
    cpuload: Number | None = None
    bandwidth: Number | None = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("booleans are not numbers here")
        return v


class PopularCommand(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    count: str


class StatsPayload(BaseModel):
    """Body of ``POST /stats``. Numbers travel as strings."""

    model_config = ConfigDict(frozen=True)

    id: str
    servers: str
    users: str
    active: list[str] = Field(default_factory=list)
    commands: str = "0"
    popular: list[PopularCommand] = Field(default_factory=list)
    memactive: str = "0"
    memload: str = "0"
    cpuload: str = "0"
    bandwidth: str = "0"
    custom1: str = "0"
    custom2: str = "0"

    def to_request_body(self, key: str) -> dict[str, Any]:
        """Return the JSON body with the access key merged in."""
        body = self.model_dump()
        body["key"] = key
        return body


class BotStatsData(BaseModel):
    """A historical stats record for a bot."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    time: int = 0
    servers: str = "0"
    users: str = "0"
    active: list[str] = Field(default_factory=list)
    commands: str = "0"
    popular: list[PopularCommand] = Field(default_factory=list)
    memactive: str = "0"
    memload: str = "0"
    cpuload: str = "0"
    bandwidth: str = "0"
    custom1: str = "0"
    custom2: str = "0"
    count: int = 0
    votes: int = 0


@dataclass(slots=True)
class SubmissionResult:
    """Outcome of one ``submit_stats`` round.

    ``ok`` is True only for HTTP 200, in which case the accumulators were reset.
    """

    status: int
    payload: StatsPayload
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status == 200


__all__ = [
    "CommandRecord",
    "StatsInput",
    "PopularCommand",
    "StatsPayload",
    "BotStatsData",
    "SubmissionResult",
]
