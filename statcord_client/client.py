"""Statcord stats client.

Collects command usage between posts, samples host metrics and posts the
result to the Statcord API. Typical use::

    client = StatsClient(key, bot_id, {"post_cpu_statistics": True})
    client.on("error", lambda err: log.warning(err))
    client.record_command("ping", str(user.id))
    await client.submit_stats(len(guilds), user_count)

Known consistency gap: ``record_command`` calls landing while a
``submit_stats`` is in flight may or may not be part of the posted payload,
and the reset after a successful post drops them. Acceptable for low-frequency
periodic reporting.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from .api.statcord import StatcordAPI
from .autopost import AutoPoster, CountsProvider
from .config.constants import (
    AUTOPOST_MIN_INTERVAL_SECONDS,
    BAD_REQUEST_STATUS,
    RATE_LIMIT_STATUS,
    SERVER_ERROR_MIN_STATUS,
)
from .config.model import ClientOptions
from .errors.handling import log_error
from .errors.internal import (
    FetchDisabled,
    InvalidArgument,
    RemoteError,
    TransportFailure,
)
from .hooks import EventHooks, EventName, Listener
from .logging_config import credential_filter
from .metrics.provider import PsutilMetricsProvider, SystemMetricsProvider
from .metrics.sampler import MetricsSample, MetricsSampler
from .models import (
    BotStatsData,
    CommandRecord,
    PopularCommand,
    StatsInput,
    StatsPayload,
    SubmissionResult,
)
from .stats.accumulator import UsageAccumulator


def _to_str(value: float) -> str:
    """Render a number the way the remote contract expects ("5", not "5.0")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class StatsClient:
    """Reports bot usage statistics to Statcord.

    Args:
        key: Statcord access key. Read-only after construction.
        bot_id: Identifier of the bot being reported on.
        options: ``ClientOptions`` or a mapping of option names to values.
        session: Optional aiohttp session. When omitted the client creates one
            lazily and closes it in ``close()``.
        metrics_provider: Source of host metrics, psutil-backed by default.

    Raises:
        InvalidArgument: If ``key`` is not a non-empty string or ``bot_id`` is
            neither a string nor None.
    """

    def __init__(
        self,
        key: str,
        bot_id: str | None = None,
        options: ClientOptions | Mapping[str, Any] | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        metrics_provider: SystemMetricsProvider | None = None,
    ) -> None:
        if not isinstance(key, str) or not key:
            raise InvalidArgument("key must be a non-empty string")
        if bot_id is not None and not isinstance(bot_id, str):
            raise InvalidArgument(f"bot_id must be a string, got {type(bot_id).__name__}")
        self._key = key
        credential_filter.register(key)
        logging.getLogger().addFilter(credential_filter)

        self.bot_id = bot_id
        if isinstance(options, ClientOptions):
            self.options = options
        else:
            try:
                self.options = ClientOptions.from_dict(options)
            except ValidationError as e:
                raise InvalidArgument(f"invalid client options: {e}") from e

        self._session = session
        self._owns_session = session is None
        self._api: StatcordAPI | None = None

        self.stats = UsageAccumulator()
        self.hooks = EventHooks()
        self.sampler = MetricsSampler(
            self.options, metrics_provider or PsutilMetricsProvider()
        )
        self._autoposter: AutoPoster | None = None

    # --------------------------- Identity --------------------------- #
    @property
    def key(self) -> str:
        return self._key

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(bot_id={self.bot_id!r}, base_url={self.options.base_url!r})"
        )

    # ----------------------- Accumulator access --------------------- #
    @property
    def active_users(self) -> list[str]:
        return self.stats.active_users

    @property
    def commands_run(self) -> int:
        return self.stats.commands_run

    @property
    def popular_commands(self) -> dict[str, int]:
        return self.stats.popular_commands

    @property
    def custom_fields(self) -> dict[int, str]:
        return self.stats.custom_fields

    @property
    def bandwidth_baseline(self) -> int:
        return self.sampler.bandwidth_baseline

    def record_command(self, command_name: str, user_id: str) -> CommandRecord:
        """Record a command invocation. Synchronous, no network access."""
        return self.stats.record_command(command_name, user_id)

    def set_custom_field(self, slot: int, value: str | int | float) -> None:
        """Set custom field 1 or 2; both go back to "0" after a successful post."""
        self.stats.set_custom_field(slot, value)

    # ----------------------------- Events --------------------------- #
    def on(self, event: EventName, listener: Listener) -> Listener:
        return self.hooks.on(event, listener)

    def once(self, event: EventName, listener: Listener) -> Listener:
        return self.hooks.once(event, listener)

    def off(self, event: EventName, listener: Listener) -> bool:
        return self.hooks.off(event, listener)

    # --------------------------- Submission ------------------------- #
    async def submit_stats(
        self,
        guilds_count: float,
        users_count: float,
        *,
        memory_active: float | None = None,
        memory_used: float | None = None,
        cpuload: float | None = None,
        bandwidth: float | None = None,
    ) -> SubmissionResult:
        """Sample metrics, post the accumulated stats and interpret the answer.

        HTTP-level failures never raise: they are emitted as ``error`` events
        and returned in the result. Only a 200 resets the accumulators.

        Args:
            guilds_count: Number of guilds the bot is in.
            users_count: Number of users the bot can see.
            memory_active: Active memory in bytes, skips sampling it.
            memory_used: Memory load percentage, skips sampling it.
            cpuload: CPU load percentage, skips sampling it.
            bandwidth: Received-bytes baseline to diff against for this call.

        Returns:
            The outcome of this round.

        Raises:
            InvalidArgument: If counts are missing or not numeric, or no bot id is set.
            TransportFailure: If metrics sampling failed or no HTTP response was obtained.
        """
        data = self._validate_input(
            guilds_count=guilds_count,
            users_count=users_count,
            memory_active=memory_active,
            memory_used=memory_used,
            cpuload=cpuload,
            bandwidth=bandwidth,
        )
        bot_id = self._require_bot_id(self.bot_id)

        try:
            sample = await self.sampler.sample(
                bandwidth=data.bandwidth,
                cpuload=data.cpuload,
                memory_active=data.memory_active,
                memory_used=data.memory_used,
            )
        except TransportFailure as e:
            log_error("Metrics sampling failed, stats not posted", e, context={"bot_id": bot_id})
            raise

        payload = self._build_payload(bot_id, data, sample)
        api = await self._ensure_api()
        body, status, reason = await api.post_stats(payload.to_request_body(self._key))
        return await self._handle_post_response(payload, body, status, reason)

    def _validate_input(self, **values: Any) -> StatsInput:
        try:
            return StatsInput(**values)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
            raise InvalidArgument(
                f"submit_stats expects numeric values, invalid: {fields}",
                data={"fields": fields},
            ) from e

    @staticmethod
    def _require_bot_id(bot_id: Any) -> str:
        if not isinstance(bot_id, str) or not bot_id:
            raise InvalidArgument(
                f"bot id must be a non-empty string, got {type(bot_id).__name__}"
            )
        return bot_id

    def _build_payload(
        self, bot_id: str, data: StatsInput, sample: MetricsSample
    ) -> StatsPayload:
        custom = self.stats.custom_fields
        return StatsPayload(
            id=bot_id,
            servers=_to_str(data.guilds_count),
            users=_to_str(data.users_count),
            active=self.stats.active_users,
            commands=str(self.stats.commands_run),
            popular=[
                PopularCommand(name=record.name, count=str(record.count))
                for record in self.stats.top_commands()
            ],
            memactive=str(sample.memactive),
            memload=str(sample.memload),
            cpuload=str(sample.cpuload),
            bandwidth=str(sample.bandwidth),
            custom1=custom[1],
            custom2=custom[2],
        )

    async def _handle_post_response(
        self, payload: StatsPayload, body: Any, status: int, reason: str
    ) -> SubmissionResult:
        if status == 200:
            logging.info(
                f"📊 Posted stats to Statcord (servers={payload.servers} users={payload.users} "
                f"commands={payload.commands})"
            )
            await self.hooks.emit("post_stats", payload)
            self.stats.reset()
            return SubmissionResult(status=status, payload=payload)

        if status >= SERVER_ERROR_MIN_STATUS or status in (BAD_REQUEST_STATUS, RATE_LIMIT_STATUS):
            error = RemoteError(status, reason, body=body)
        else:
            error = RemoteError(
                status,
                reason,
                body=body,
                message=f"Unexpected Statcord response HTTP {status} {reason}".rstrip(),
            )
        if status == RATE_LIMIT_STATUS:
            logging.warning("⏳ Statcord is rate limiting stats posts")
        log_error(
            "Statcord rejected stats post",
            error,
            context={"bot_id": payload.id, "status": status},
        )
        await self.hooks.emit("error", error)
        return SubmissionResult(status=status, payload=payload, error=error)

    # ----------------------------- Fetch ---------------------------- #
    async def get_stats(self, bot_id: str | None = None) -> list[BotStatsData]:
        """Fetch the historical stats of a bot.

        Args:
            bot_id: Bot to query; defaults to the client's bot id.

        Returns:
            Historical records, oldest first as returned by the API.

        Raises:
            FetchDisabled: If ``enable_stats_fetch`` is off.
            InvalidArgument: If the bot id is not a string.
            RemoteError: If the API answered with a non-200 status or malformed data.
            TransportFailure: If no response was obtained.
        """
        if not self.options.enable_stats_fetch:
            raise FetchDisabled("stats fetching is disabled by client options")
        target = self._require_bot_id(self.bot_id if bot_id is None else bot_id)

        api = await self._ensure_api()
        data, status, reason = await api.get_bot_stats(target)
        if status != 200:
            raise RemoteError(status, reason, body=data)

        rows = data.get("data") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise RemoteError(status, reason, body=data, message="Statcord stats response has no data list")
        try:
            records = [BotStatsData.model_validate(row) for row in rows]
        except ValidationError as e:
            raise RemoteError(
                status, reason, body=data, message=f"Malformed Statcord stats record: {e}"
            ) from e
        logging.debug(f"📥 Fetched {len(records)} stats records for bot {target}")
        return records

    # --------------------------- Auto-post -------------------------- #
    def start_autopost(
        self,
        counts_provider: CountsProvider,
        *,
        interval: float | None = None,
    ) -> AutoPoster:
        """Start posting stats every ``interval`` seconds (options default).

        ``counts_provider`` returns ``(guilds_count, users_count)`` and may be
        a coroutine function. Calling this again while running is a no-op.
        """
        if interval is None:
            interval = self.options.autopost_interval
        if interval < AUTOPOST_MIN_INTERVAL_SECONDS:
            raise InvalidArgument(
                f"autopost interval must be at least {AUTOPOST_MIN_INTERVAL_SECONDS:.0f} seconds"
            )
        if self._autoposter is None or not self._autoposter.running:
            self._autoposter = AutoPoster(
                self.submit_stats,
                counts_provider,
                interval,
            )
            self._autoposter.start()
        return self._autoposter

    async def stop_autopost(self) -> None:
        if self._autoposter is not None:
            await self._autoposter.stop()

    # --------------------------- Lifecycle -------------------------- #
    async def _ensure_api(self) -> StatcordAPI:
        if self._api is None:
            if self._session is None:
                self._session = aiohttp.ClientSession()
                logging.debug("🔗 HTTP session created")
            self._api = StatcordAPI(self._session, self._key, self.options.base_url)
        return self._api

    async def close(self) -> None:
        """Stop the auto-poster and close the session if the client created it."""
        await self.stop_autopost()
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logging.debug("🔌 HTTP session closed")
        if self._owns_session:
            self._session = None
            self._api = None

    async def __aenter__(self) -> StatsClient:
        await self._ensure_api()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()


__all__ = ["StatsClient"]
