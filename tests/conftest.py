import pytest

from statcord_client import StatsClient
from statcord_client.logging_config import error_aggregator
from tests.fixtures.api_responses import TEST_BOT_ID, TEST_KEY
from tests.fixtures.http_fakes import FakeMetricsProvider, FakeSession


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Keep structured error counts from leaking between tests."""
    error_aggregator.clear()
    yield
    error_aggregator.clear()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def metrics_provider() -> FakeMetricsProvider:
    return FakeMetricsProvider()


@pytest.fixture
def make_client(fake_session, metrics_provider):
    """Factory building a StatsClient wired to the fake session and provider."""

    def _make(**options) -> StatsClient:
        return StatsClient(
            TEST_KEY,
            TEST_BOT_ID,
            options,
            session=fake_session,  # type: ignore[arg-type]
            metrics_provider=metrics_provider,
        )

    return _make
