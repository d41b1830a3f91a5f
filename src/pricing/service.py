"""Quote orchestration: providers in, sorted fare quotes out."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any

from opentelemetry import metrics

from core.exceptions import DirectionsUnavailableError, NoEligibleVehiclesError
from core.retry import RetryConfig, with_retry
from geo.cache import ProviderCache, directions_key, tolls_key, weather_key
from geo.directions import DirectionsClient, RouteResponse, parse_route
from geo.tolls import TollClient, TollReport
from geo.weather import WeatherClient, WeatherReport
from pricing.estimator import FareEstimator, round_money
from pricing.models import (
    Coordinates,
    FareEstimate,
    QuoteRequest,
    RouteConditions,
    RouteInfo,
    TripContext,
)
from pricing.night import DEFAULT_TIMEZONE, NIGHT_END_HOUR, NIGHT_START_HOUR, resolve_night_time
from pricing.rate_cards import RateCardRepository

logger = logging.getLogger(__name__)

meter = metrics.get_meter("fare_estimator")

provider_failures_counter = meter.create_counter(
    name="fare_provider_failures_total",
    description="Provider lookups that failed and were degraded or rejected",
    unit="1",
)


class QuoteService:
    """Prices a rider's trip for every eligible vehicle class.

    Directions, weather and tolls are fetched concurrently. Only directions
    is required: weather and toll failures degrade to "no rain" and
    "no toll".
    """

    def __init__(
        self,
        rate_cards: RateCardRepository,
        directions_client: DirectionsClient,
        weather_client: WeatherClient,
        toll_client: TollClient,
        cache: ProviderCache,
        estimator: FareEstimator | None = None,
        retry_config: RetryConfig | None = None,
        default_timezone: str = DEFAULT_TIMEZONE,
        night_start_hour: int = NIGHT_START_HOUR,
        night_end_hour: int = NIGHT_END_HOUR,
        directions_ttl: int = 900,
        weather_ttl: int = 600,
        tolls_ttl: int = 900,
    ) -> None:
        self.rate_cards = rate_cards
        self._directions = directions_client
        self._weather = weather_client
        self._tolls = toll_client
        self._cache = cache
        self._estimator = estimator or FareEstimator()
        self._retry_config = retry_config or RetryConfig()
        self._default_timezone = default_timezone
        self._night_window = (night_start_hour, night_end_hour)
        self._ttls = {"directions": directions_ttl, "weather": weather_ttl, "tolls": tolls_ttl}

    async def estimate(self, request: QuoteRequest, now: datetime | None = None) -> FareEstimate:
        start = time.perf_counter()

        cards = self.rate_cards.get_active(request.vehicle_ids or None)
        if not cards:
            message = (
                "No active vehicles found for the specified vehicle IDs"
                if request.vehicle_ids
                else "No active vehicles found"
            )
            raise NoEligibleVehiclesError(message, details={"vehicle_ids": request.vehicle_ids})

        is_night, detection = resolve_night_time(
            request.is_night_time,
            request.timezone or self._default_timezone,
            now,
            *self._night_window,
        )

        directions_result, weather_result, tolls_result = await asyncio.gather(
            self._fetch_directions(request.origin, request.destination),
            self._fetch_weather(request.origin),
            self._fetch_tolls(request.origin, request.destination),
            return_exceptions=True,
        )

        route = self._require_route(directions_result)
        weather = self._degrade(weather_result, "weather", WeatherReport())
        tolls = self._degrade(tolls_result, "tolls", TollReport())

        trip = TripContext(
            origin=request.origin,
            destination=request.destination,
            distance_km=route.distance_km,
            duration_min=route.duration_min,
            traffic_duration_min=route.traffic_duration_min,
            waiting_time_min=request.waiting_time_in_minutes,
            rain=weather.is_raining,
            tolls_present=tolls.has_tolls,
            toll_price=tolls.price if tolls.has_tolls else 0.0,
            is_night_time=is_night,
        )

        quotes = self._estimator.estimate(trip, cards)

        elapsed = time.perf_counter() - start
        logger.info(
            f"Priced trip: distance={trip.distance_km:.2f}km "
            f"duration={trip.duration_min:.1f}min traffic={trip.traffic_duration_min:.1f}min "
            f"rain={'YES' if trip.rain else 'NO'} tolls={'YES' if trip.tolls_present else 'NO'} "
            f"toll_price={trip.toll_price if trip.tolls_present else 'NO_TOLLS'} "
            f"time={'NIGHT' if is_night else 'DAY'} ({detection}) "
            f"vehicles={len(quotes)} elapsed={elapsed:.3f}s"
        )

        return FareEstimate(
            route_info=RouteInfo(
                distance_in_km=round_money(trip.distance_km),
                duration_in_minutes=round_money(trip.traffic_duration_min),
                conditions=RouteConditions(
                    rain=trip.rain,
                    tolls=trip.tolls_present,
                    is_night_time=is_night,
                    time_detection=detection,
                ),
            ),
            vehicle_prices=quotes,
        )

    def cache_stats(self) -> dict[str, float | int]:
        return self._cache.get_cache_stats()

    async def _fetch_directions(
        self, origin: Coordinates, destination: Coordinates
    ) -> RouteResponse:
        async def fetch() -> dict[str, Any]:
            return await with_retry(
                lambda: self._directions.fetch_route(origin, destination),
                self._retry_config,
                provider="directions",
            )

        route = await self._cache.get_or_fetch(
            directions_key(origin, destination), self._ttls["directions"], fetch
        )
        return parse_route(route)

    async def _fetch_weather(self, origin: Coordinates) -> WeatherReport:
        async def fetch() -> dict[str, Any]:
            report = await self._weather.get_weather(origin)
            return report.model_dump()

        data = await self._cache.get_or_fetch(weather_key(origin), self._ttls["weather"], fetch)
        return WeatherReport.model_validate(data)

    async def _fetch_tolls(self, origin: Coordinates, destination: Coordinates) -> TollReport:
        async def fetch() -> dict[str, Any]:
            report = await self._tolls.get_tolls(origin, destination)
            return report.model_dump()

        data = await self._cache.get_or_fetch(
            tolls_key(origin, destination), self._ttls["tolls"], fetch
        )
        return TollReport.model_validate(data)

    def _require_route(self, result: RouteResponse | BaseException) -> RouteResponse:
        if isinstance(result, RouteResponse):
            return result
        if not isinstance(result, Exception):
            raise result

        provider_failures_counter.add(1, {"provider": "directions"})
        logger.error(f"Directions fetch failed: {result}")
        raise DirectionsUnavailableError(
            "Unable to fetch directions", details={"reason": str(result)}
        ) from result

    def _degrade(self, result: Any, provider: str, default: Any) -> Any:
        if not isinstance(result, BaseException):
            return result
        if not isinstance(result, Exception):
            raise result

        provider_failures_counter.add(1, {"provider": provider})
        logger.warning(f"{provider.capitalize()} fetch failed, assuming none: {result}")
        return default
