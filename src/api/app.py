"""FastAPI application factory for the fare estimator."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from slowapi.errors import RateLimitExceeded

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from pricing.service import QuoteService

from api.middleware.correlation import (
    GENERIC_ERROR_MESSAGE,
    CorrelationMiddleware,
    error_response,
)
from api.models.health import DetailedHealthResponse, ServiceHealth
from api.rate_limit import limiter, rate_limit_exceeded_handler
from api.routes import fares, vehicles
from core.exceptions import FareEstimatorError
from settings import get_settings

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FareEstimatorError)
    async def fare_error_handler(request: Request, exc: FareEstimatorError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"Error calculating ride price: {exc.message}", exc_info=exc)
            return error_response(request, exc.status_code, GENERIC_ERROR_MESSAGE)

        logger.info(f"Rejected request ({exc.status_code}): {exc.message}")
        return error_response(request, exc.status_code, exc.message)


def create_app(quote_service: QuoteService, redis_client: Redis | None = None) -> FastAPI:
    """Create FastAPI application with injected dependencies.

    Args:
        quote_service: QuoteService wired to the providers and rate cards
        redis_client: Async Redis client backing the provider cache (optional)
    """
    app = FastAPI(
        title="Fare Estimator API",
        version="1.0.0",
        description="Ride price estimates per vehicle class",
    )

    # Traces for inbound requests and outbound provider calls
    FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    _register_exception_handlers(app)

    app.state.quote_service = quote_service
    app.state.redis_client = redis_client

    settings = get_settings()
    origins = settings.cors.origins.split(",")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationMiddleware)

    app.include_router(fares.router, prefix="/fares", tags=["fares"])
    app.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring (unauthenticated for infrastructure)."""
        return {"status": "ok"}

    def _determine_status(
        latency_ms: float | None,
        threshold_degraded: float = 100,
        threshold_unhealthy: float = 500,
    ) -> Literal["healthy", "degraded", "unhealthy"]:
        """Determine dependency status based on latency thresholds."""
        if latency_ms is None:
            return "unhealthy"
        if latency_ms < threshold_degraded:
            return "healthy"
        if latency_ms < threshold_unhealthy:
            return "degraded"
        return "unhealthy"

    @app.get("/health/detailed", response_model=DetailedHealthResponse)
    async def detailed_health_check() -> DetailedHealthResponse:
        """Redis reachability and rate card availability."""

        async def check_redis() -> ServiceHealth:
            client: Any = app.state.redis_client
            if client is None:
                # The cache is optional; pricing still works without it
                return ServiceHealth(status="degraded", message="Cache disabled")
            try:
                start = time.perf_counter()
                await client.ping()
                latency_ms = (time.perf_counter() - start) * 1000
                return ServiceHealth(
                    status=_determine_status(latency_ms),
                    latency_ms=round(latency_ms, 2),
                    message="Connected",
                )
            except Exception as e:
                return ServiceHealth(
                    status="degraded",
                    latency_ms=None,
                    message=f"Connection failed: {str(e)[:50]}",
                )

        def check_rate_cards() -> ServiceHealth:
            active = len(app.state.quote_service.rate_cards.get_active())
            if active == 0:
                return ServiceHealth(status="unhealthy", message="No active vehicles")
            return ServiceHealth(status="healthy", message=f"{active} active vehicles")

        redis_health = await check_redis()
        rate_card_health = check_rate_cards()

        statuses = [redis_health.status, rate_card_health.status]
        overall: Literal["healthy", "degraded", "unhealthy"]
        if all(s == "healthy" for s in statuses):
            overall = "healthy"
        elif any(s == "unhealthy" for s in statuses):
            overall = "unhealthy"
        else:
            overall = "degraded"

        return DetailedHealthResponse(
            overall_status=overall,
            redis=redis_health,
            rate_cards=rate_card_health,
            cache_stats=app.state.quote_service.cache_stats(),
            timestamp=datetime.now(UTC).isoformat(),
        )

    return app
