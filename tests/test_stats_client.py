"""Stats submission tests for StatsClient.

Covers payload assembly, response-driven reset, event signalling and input
validation against a fake aiohttp session.
"""

from __future__ import annotations

import pytest

from statcord_client import StatsClient
from statcord_client.errors import InvalidArgument, RemoteError, TransportFailure
from statcord_client.logging_config import error_aggregator
from statcord_client.models import StatsPayload

from tests.fixtures.api_responses import (
    TEST_BOT_ID,
    TEST_KEY,
    POST_STATS_BAD_REQUEST,
    POST_STATS_RATE_LIMITED,
    POST_STATS_SERVER_ERROR,
    POST_STATS_SUCCESS,
)
from tests.fixtures.http_fakes import FakeMetricsProvider, FakeResponse, connection_error


def _record_usage(client: StatsClient) -> None:
    client.record_command("ping", "u1")
    client.record_command("ping", "u2")
    client.record_command("help", "u1")
    client.set_custom_field(1, 7)


def _accumulator_state(client: StatsClient) -> tuple:
    return (
        client.active_users,
        client.commands_run,
        client.popular_commands,
        client.custom_fields,
    )


class TestStatsClientConstruction:
    """Test class for StatsClient construction and identity."""

    def test_key_is_read_only_and_hidden_from_repr(self, make_client):
        client = make_client()

        assert client.key == TEST_KEY
        with pytest.raises(AttributeError):
            client.key = "other"  # type: ignore[misc]
        assert TEST_KEY not in repr(client)
        assert TEST_BOT_ID in repr(client)

    @pytest.mark.parametrize("key", ["", None, 123])
    def test_invalid_key_rejected(self, key):
        with pytest.raises(InvalidArgument):
            StatsClient(key, TEST_BOT_ID, metrics_provider=FakeMetricsProvider())  # type: ignore[arg-type]

    def test_non_string_bot_id_rejected(self):
        with pytest.raises(InvalidArgument):
            StatsClient(TEST_KEY, 685166801394335819, metrics_provider=FakeMetricsProvider())  # type: ignore[arg-type]

    def test_invalid_options_rejected(self):
        with pytest.raises(InvalidArgument):
            StatsClient(TEST_KEY, TEST_BOT_ID, {"autopost_interval": 1}, metrics_provider=FakeMetricsProvider())


class TestStatsClientSubmit:
    """Test class for StatsClient.submit_stats."""

    @pytest.mark.asyncio
    async def test_success_resets_accumulators_and_emits_post_stats(self, make_client, fake_session):
        """Test 200 resets all accumulators and emits the exact payload sent."""
        # Arrange
        client = make_client()
        _record_usage(client)
        emitted: list[StatsPayload] = []
        errors: list[Exception] = []
        client.on("post_stats", emitted.append)
        client.on("error", errors.append)
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))

        # Act
        result = await client.submit_stats(12, 3400)

        # Assert
        assert result.ok is True
        assert errors == []
        assert len(emitted) == 1
        method, url, meta = fake_session.requests[0]
        assert (method, url) == ("POST", "https://api.statcord.com/v3/stats")
        assert meta["json"] == {**emitted[0].model_dump(), "key": TEST_KEY}
        assert emitted[0] is result.payload
        assert _accumulator_state(client) == ([], 0, {}, {1: "0", 2: "0"})

    @pytest.mark.asyncio
    async def test_payload_fields_are_strings(self, make_client, fake_session):
        """Test the JSON body layout and string conversion of numbers."""
        client = make_client()
        _record_usage(client)
        client.set_custom_field(2, "beta")
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))

        await client.submit_stats(12.0, 3400)

        body = fake_session.requests[0][2]["json"]
        assert body == {
            "id": TEST_BOT_ID,
            "servers": "12",
            "users": "3400",
            "active": ["u1", "u2"],
            "commands": "3",
            "popular": [{"name": "ping", "count": "2"}, {"name": "help", "count": "1"}],
            "memactive": "0",
            "memload": "0",
            "cpuload": "0",
            "bandwidth": "0",
            "custom1": "7",
            "custom2": "beta",
            "key": TEST_KEY,
        }

    @pytest.mark.asyncio
    async def test_payload_only_carries_top_five_commands(self, make_client, fake_session):
        client = make_client()
        for i, name in enumerate(["a", "b", "c", "d", "e", "f", "g"]):
            for _ in range(i + 1):
                client.record_command(name, "u1")
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))

        await client.submit_stats(1, 1)

        body = fake_session.requests[0][2]["json"]
        assert [p["name"] for p in body["popular"]] == ["g", "f", "e", "d", "c"]
        assert body["commands"] == str(sum(range(1, 8)))

    @pytest.mark.asyncio
    async def test_metrics_included_when_enabled(self, fake_session):
        """Test sampled metrics land in the payload when their flags are set."""
        provider = FakeMetricsProvider(rx_totals=[10_000, 10_750], load=41.7, active=4_000, total=16_000)
        client = StatsClient(
            TEST_KEY,
            TEST_BOT_ID,
            {
                "post_cpu_statistics": True,
                "post_memory_statistics": True,
                "post_network_statistics": True,
            },
            session=fake_session,  # type: ignore[arg-type]
            metrics_provider=provider,
        )
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))

        await client.submit_stats(1, 1)
        await client.submit_stats(1, 1)

        first = fake_session.requests[0][2]["json"]
        second = fake_session.requests[1][2]["json"]
        assert (first["cpuload"], first["memactive"], first["memload"], first["bandwidth"]) == (
            "42",
            "4000",
            "25",
            "0",
        )
        assert second["bandwidth"] == "750"
        assert client.bandwidth_baseline == 10_750

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, body",
        [
            (500, POST_STATS_SERVER_ERROR),
            (502, {}),
            (400, POST_STATS_BAD_REQUEST),
            (429, POST_STATS_RATE_LIMITED),
        ],
    )
    async def test_failure_keeps_accumulators_and_emits_error(self, make_client, fake_session, status, body):
        """Test 4xx/5xx keep state untouched and emit a RemoteError."""
        # Arrange
        client = make_client()
        _record_usage(client)
        before = _accumulator_state(client)
        errors: list[RemoteError] = []
        posted: list[StatsPayload] = []
        client.on("error", errors.append)
        client.on("post_stats", posted.append)
        fake_session.queue(FakeResponse(status, body))

        # Act
        result = await client.submit_stats(5, 10)

        # Assert
        assert result.ok is False
        assert result.status == status
        assert posted == []
        assert len(errors) == 1
        assert isinstance(errors[0], RemoteError)
        assert errors[0].status == status
        assert errors[0].body == body
        assert result.error is errors[0]
        assert _accumulator_state(client) == before

    @pytest.mark.asyncio
    async def test_failed_round_data_is_resent_next_round(self, make_client, fake_session):
        """Test accumulated data survives a failure and is included in the retry round."""
        client = make_client()
        client.record_command("ping", "u1")
        fake_session.queue(FakeResponse(500, POST_STATS_SERVER_ERROR))
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))

        await client.submit_stats(1, 1)
        client.record_command("ping", "u2")
        await client.submit_stats(1, 1)

        second = fake_session.requests[1][2]["json"]
        assert second["commands"] == "2"
        assert second["active"] == ["u1", "u2"]
        assert client.commands_run == 0

    @pytest.mark.asyncio
    async def test_unrecognised_status_is_an_error_without_reset(self, make_client, fake_session):
        """Test statuses outside 200/400/429/5xx still signal an error."""
        client = make_client()
        _record_usage(client)
        errors: list[RemoteError] = []
        client.on("error", errors.append)
        fake_session.queue(FakeResponse(418, {}))

        result = await client.submit_stats(5, 10)

        assert result.ok is False
        assert errors and errors[0].status == 418
        assert "Unexpected" in str(errors[0])
        assert client.commands_run == 3

    @pytest.mark.asyncio
    async def test_http_failure_without_listener_does_not_raise(self, make_client, fake_session):
        """Test fire-and-forget: no error listener, no exception."""
        client = make_client()
        fake_session.queue(FakeResponse(500, POST_STATS_SERVER_ERROR))

        result = await client.submit_stats(5, 10)

        assert result.status == 500
        assert error_aggregator.get_error_summary()["remote"]["total_count"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "guilds, users",
        [("5", 10), (5, "10"), (None, 10), (True, 10), ([5], 10), (float("nan"), 10), (5, float("inf"))],
    )
    async def test_non_numeric_counts_raise_invalid_argument(self, make_client, fake_session, guilds, users):
        """Test counts must be numbers; nothing is sent on invalid input."""
        client = make_client()

        with pytest.raises(InvalidArgument):
            await client.submit_stats(guilds, users)

        assert fake_session.requests == []

    @pytest.mark.asyncio
    async def test_non_numeric_optional_metric_raises_invalid_argument(self, make_client):
        client = make_client(post_cpu_statistics=True)

        with pytest.raises(InvalidArgument):
            await client.submit_stats(5, 10, cpuload="high")

    @pytest.mark.asyncio
    async def test_missing_bot_id_raises_invalid_argument(self, fake_session, metrics_provider):
        client = StatsClient(TEST_KEY, session=fake_session, metrics_provider=metrics_provider)  # type: ignore[arg-type]

        with pytest.raises(InvalidArgument):
            await client.submit_stats(5, 10)

    @pytest.mark.asyncio
    async def test_transport_failure_propagates_and_keeps_state(self, make_client, fake_session):
        """Test no response at all raises TransportFailure and emits nothing."""
        client = make_client()
        _record_usage(client)
        before = _accumulator_state(client)
        errors: list[Exception] = []
        client.on("error", errors.append)
        fake_session.queue(connection_error())

        with pytest.raises(TransportFailure):
            await client.submit_stats(5, 10)

        assert errors == []
        assert _accumulator_state(client) == before

    @pytest.mark.asyncio
    async def test_sampling_failure_aborts_before_posting(self, fake_session):
        """Test a metrics provider error aborts the round without any HTTP call."""
        provider = FakeMetricsProvider(fail_on="current_load")
        client = StatsClient(
            TEST_KEY,
            TEST_BOT_ID,
            {"post_cpu_statistics": True},
            session=fake_session,  # type: ignore[arg-type]
            metrics_provider=provider,
        )
        client.record_command("ping", "u1")

        with pytest.raises(TransportFailure):
            await client.submit_stats(5, 10)

        assert fake_session.requests == []
        assert client.commands_run == 1

    @pytest.mark.asyncio
    async def test_async_listener_awaited_before_return(self, make_client, fake_session):
        client = make_client()
        seen = []

        async def on_post(payload):
            seen.append(payload.servers)

        client.once("post_stats", on_post)
        fake_session.queue(FakeResponse(200, POST_STATS_SUCCESS))

        await client.submit_stats(9, 10)

        assert seen == ["9"]


class TestStatsClientLifecycle:
    """Test class for session ownership and context manager behaviour."""

    @pytest.mark.asyncio
    async def test_caller_session_left_open(self, make_client, fake_session):
        client = make_client()

        async with client:
            pass

        assert fake_session.closed is False

    @pytest.mark.asyncio
    async def test_owned_session_closed(self, metrics_provider):
        client = StatsClient(TEST_KEY, TEST_BOT_ID, metrics_provider=metrics_provider)

        async with client as entered:
            session = entered._session
            assert session is not None
            assert not session.closed

        assert session.closed
        assert client._session is None
