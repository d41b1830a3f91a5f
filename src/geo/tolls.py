"""Google Routes client used to detect tolls on a trip."""

from typing import Any

import httpx
from pydantic import BaseModel

from core.exceptions import ConfigurationError, NetworkError, ServiceUnavailableError
from pricing.models import Coordinates, parse_numeric

FIELD_MASK = "routes.distanceMeters,routes.duration,routes.travelAdvisory.tollInfo"


class TollReport(BaseModel):
    has_tolls: bool = False
    price: float = 0.0
    currency: str | None = None


class TollServiceError(ServiceUnavailableError):
    pass


class TollTimeoutError(NetworkError):
    pass


def _money_amount(money: dict[str, Any]) -> float:
    """Convert a google.type.Money dict (units as string, nanos as int) to float."""
    units = parse_numeric(money.get("units")) or 0.0
    nanos = parse_numeric(money.get("nanos")) or 0.0
    return units + nanos / 1e9


def parse_tolls(data: dict[str, Any]) -> TollReport:
    """Tolls are present when the first route reports a non-empty ``tollInfo``.

    The price is the first ``estimatedPrice`` entry; a route can report tolls
    without a price, in which case the price is 0.
    """
    routes = data.get("routes") or []
    if not routes:
        return TollReport()

    toll_info = (routes[0].get("travelAdvisory") or {}).get("tollInfo")
    if not toll_info:
        return TollReport()

    prices = toll_info.get("estimatedPrice") or []
    if not prices:
        return TollReport(has_tolls=True)

    first = prices[0]
    return TollReport(
        has_tolls=True,
        price=max(0.0, _money_amount(first)),
        currency=first.get("currencyCode"),
    )


class TollClient:
    def __init__(
        self, api_key: str, base_url: str, region_code: str = "IN", timeout: float = 30.0
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.region_code = region_code
        self.timeout = timeout

    async def get_tolls(self, origin: Coordinates, destination: Coordinates) -> TollReport:
        if not self.api_key:
            raise ConfigurationError("Google Maps API key is required")

        body = {
            "origin": {"location": {"latLng": origin.model_dump()}},
            "destination": {"location": {"latLng": destination.model_dump()}},
            "travelMode": "DRIVE",
            "extraComputations": ["TOLLS"],
            "regionCode": self.region_code,
            "computeAlternativeRoutes": True,
        }
        headers = {"X-Goog-Api-Key": self.api_key, "X-Goog-FieldMask": FIELD_MASK}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.base_url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise TollTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.NetworkError as e:
            raise TollServiceError(f"Network error: {e}") from e

        if response.status_code != 200:
            raise TollServiceError(f"Routes API error: {response.status_code}")

        return parse_tolls(response.json())
