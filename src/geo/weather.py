"""OpenWeatherMap client used for rain detection."""

from typing import Any

import httpx
from pydantic import BaseModel, Field

from core.exceptions import ConfigurationError, NetworkError, ServiceUnavailableError
from pricing.models import Coordinates


class WeatherReport(BaseModel):
    is_raining: bool = False
    temperature: float | None = None
    humidity: float | None = None
    descriptions: list[str] = Field(default_factory=list)


class WeatherServiceError(ServiceUnavailableError):
    pass


class WeatherTimeoutError(NetworkError):
    pass


def parse_weather(data: dict[str, Any]) -> WeatherReport:
    """Rain when any condition description mentions rain or a rain block is present."""
    descriptions = [
        str(w.get("description", "")).lower() for w in data.get("weather") or [] if w
    ]
    is_raining = any("rain" in d for d in descriptions) or bool(data.get("rain"))
    main = data.get("main") or {}
    return WeatherReport(
        is_raining=is_raining,
        temperature=main.get("temp"),
        humidity=main.get("humidity"),
        descriptions=descriptions,
    )


class WeatherClient:
    def __init__(self, api_key: str, base_url: str, timeout: float = 10.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_weather(self, location: Coordinates) -> WeatherReport:
        """Current weather at ``location``."""
        if not self.api_key:
            raise ConfigurationError("OpenWeather API key is required")

        params = {
            "lat": location.latitude,
            "lon": location.longitude,
            "appid": self.api_key,
            "units": "metric",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            raise WeatherTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.NetworkError as e:
            raise WeatherServiceError(f"Network error: {e}") from e

        if response.status_code != 200:
            raise WeatherServiceError(f"Weather API error: {response.status_code}")

        return parse_weather(response.json())
