"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.main import app, wire_components
from tests.fakes import FakeChainGateway


@pytest.fixture
def chain() -> FakeChainGateway:
    return FakeChainGateway(balances={7: 3, 8: 10}, approved=False)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        TX_RETRY_DELAY_MS=0,
        BATCH_RATE_LIMIT_MAX_REQUESTS=2,
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
async def client(chain: FakeChainGateway, test_settings: Settings) -> AsyncClient:
    """Async HTTP client against the app wired to the in-memory chain.

    ASGITransport does not run the lifespan, so no RPC endpoint is contacted.
    """
    wire_components(app, chain, test_settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
