from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.rate_limit import limiter
from core.retry import RetryConfig
from geo.cache import ProviderCache
from geo.directions import DirectionsClient
from geo.tolls import TollClient, TollReport
from geo.weather import WeatherClient, WeatherReport
from pricing.rate_cards import RateCardRepository
from pricing.service import QuoteService


@pytest.fixture(autouse=True)
def _fresh_rate_limiter():
    """Rate limit counters live on the module-level limiter; reset them per test."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key"}


@pytest.fixture
def directions_route() -> dict:
    return {
        "legs": [
            {
                "distance": {"value": 5000, "text": "5.0 km"},
                "duration": {"value": 540, "text": "9 mins"},
                "duration_in_traffic": {"value": 600, "text": "10 mins"},
            }
        ]
    }


@pytest.fixture
def mock_directions_client(directions_route):
    client = AsyncMock(spec=DirectionsClient)
    client.fetch_route.return_value = directions_route
    return client


@pytest.fixture
def mock_weather_client():
    client = AsyncMock(spec=WeatherClient)
    client.get_weather.return_value = WeatherReport(is_raining=False)
    return client


@pytest.fixture
def mock_toll_client():
    client = AsyncMock(spec=TollClient)
    client.get_tolls.return_value = TollReport()
    return client


@pytest.fixture
def mock_redis_client():
    client = AsyncMock()
    client.get.return_value = None
    client.ping.return_value = True
    return client


@pytest.fixture
def quote_service(
    rate_card_records, mock_directions_client, mock_weather_client, mock_toll_client
):
    return QuoteService(
        rate_cards=RateCardRepository.from_records(rate_card_records),
        directions_client=mock_directions_client,
        weather_client=mock_weather_client,
        toll_client=mock_toll_client,
        cache=ProviderCache(None),
        retry_config=RetryConfig(base_delay=0),
    )


@pytest.fixture
def test_client(quote_service, mock_redis_client):
    app = create_app(quote_service=quote_service, redis_client=mock_redis_client)
    return TestClient(app)
