"""Google Directions client: trip distance and traffic-aware duration."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from core.exceptions import (
    ConfigurationError,
    NetworkError,
    ServiceUnavailableError,
    ValidationError,
)
from pricing.models import Coordinates, parse_numeric

logger = logging.getLogger(__name__)


class RouteResponse(BaseModel):
    distance_meters: float
    duration_seconds: float
    duration_in_traffic_seconds: float
    has_traffic_data: bool = True

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    @property
    def duration_min(self) -> float:
        return self.duration_seconds / 60

    @property
    def traffic_duration_min(self) -> float:
        return self.duration_in_traffic_seconds / 60


class NoRouteFoundError(ValidationError):
    """No route found between coordinates. Inherits from ValidationError (non-retryable)."""

    pass


class InvalidRouteDataError(ValidationError):
    """Route payload has no usable distance/duration (non-retryable)."""

    pass


class DirectionsServiceError(ServiceUnavailableError):
    """Directions provider error (5xx or transient status). Retryable."""

    pass


class DirectionsTimeoutError(NetworkError):
    """Directions request timeout. Retryable."""

    pass


# Directions API statuses that may clear up on retry
_TRANSIENT_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


def parse_route(route: dict[str, Any]) -> RouteResponse:
    """Extract distance and durations from a route payload.

    Understands the Directions API shape (``legs[0].distance.value`` in
    meters, ``duration``/``duration_in_traffic`` in seconds) and the
    simplified ``{"distance": "12.3 km", "duration": "25 mins"}`` shape,
    which carries no traffic data.
    """
    legs = route.get("legs")
    if isinstance(legs, list) and legs:
        leg = legs[0]
        if not leg or "distance" not in leg or "duration" not in leg:
            raise InvalidRouteDataError("Invalid route leg data", details={"leg": leg})

        distance_m = float(leg["distance"]["value"])
        duration_s = float(leg["duration"]["value"])
        traffic = leg.get("duration_in_traffic")
        traffic_s = float(traffic["value"]) if traffic and traffic.get("value") else None

        return RouteResponse(
            distance_meters=distance_m,
            duration_seconds=duration_s,
            duration_in_traffic_seconds=traffic_s or duration_s,
            has_traffic_data=traffic_s is not None,
        )

    if route.get("distance") and route.get("duration"):
        distance_km = parse_numeric(route["distance"]) or 0.0
        duration_min = parse_numeric(route["duration"]) or 0.0
        return RouteResponse(
            distance_meters=distance_km * 1000,
            duration_seconds=duration_min * 60,
            duration_in_traffic_seconds=duration_min * 60,
            has_traffic_data=False,
        )

    raise InvalidRouteDataError("Invalid route data format")


class DirectionsClient:
    def __init__(self, api_key: str, base_url: str, timeout: float = 30.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch_route(self, origin: Coordinates, destination: Coordinates) -> dict[str, Any]:
        """Fetch the first route between two points as returned by the API."""
        if not self.api_key:
            raise ConfigurationError("Google Maps API key is required")

        params = {
            "origin": origin.as_key(),
            "destination": destination.as_key(),
            "key": self.api_key,
            "traffic_model": "best_guess",
            "departure_time": "now",
            "alternatives": "true",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            raise DirectionsTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.NetworkError as e:
            raise DirectionsServiceError(f"Network error: {e}") from e

        if response.status_code >= 500:
            raise DirectionsServiceError(f"Directions server error: {response.status_code}")

        data = response.json()
        status = data.get("status", "OK")

        if status in _NO_ROUTE_STATUSES:
            raise NoRouteFoundError(
                "No route found between coordinates",
                details={"origin": origin.as_key(), "destination": destination.as_key()},
            )
        if status in _TRANSIENT_STATUSES:
            raise DirectionsServiceError(f"Directions API status {status}")
        if status != "OK":
            raise InvalidRouteDataError(
                f"Directions API rejected the request: {status}",
                details={"error_message": data.get("error_message")},
            )

        routes = data.get("routes") or []
        if not routes:
            raise NoRouteFoundError("No routes found")

        route: dict[str, Any] = routes[0]
        if not route.get("legs"):
            raise InvalidRouteDataError("Invalid route structure")
        return route
