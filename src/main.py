"""
Fare Estimator - service entry point

Wires the provider clients, the Redis response cache and the rate card
store into a QuoteService and serves it over FastAPI.
"""

import logging
import os

import uvicorn
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from redis.asyncio import Redis

from api.app import create_app
from core.retry import RetryConfig
from geo.cache import ProviderCache
from geo.directions import DirectionsClient
from geo.tolls import TollClient
from geo.weather import WeatherClient
from pricing.rate_cards import RateCardRepository
from pricing.service import QuoteService
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def init_otel_sdk() -> None:
    """Initialize OpenTelemetry SDK for metrics and traces.

    Only runs when OTEL_EXPORTER_OTLP_ENDPOINT is set; otherwise the API's
    meters and tracers stay no-ops.
    """
    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not otlp_endpoint:
        logger.info("OTEL_EXPORTER_OTLP_ENDPOINT not set, telemetry export disabled")
        return

    resource = Resource.create(
        {
            "service.name": "fare-estimator",
            "service.version": "1.0.0",
            "deployment.environment": os.getenv("DEPLOYMENT_ENV", "local"),
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(trace_provider)
    logger.info("OpenTelemetry tracing initialized (endpoint=%s)", otlp_endpoint)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint, insecure=True),
        export_interval_millis=15_000,
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[metric_reader]))
    logger.info("OpenTelemetry metrics initialized")


def create_async_redis_client(settings: Settings) -> "Redis | None":
    """Create async Redis client for the provider cache."""
    if not settings.cache.enabled:
        return None
    return Redis(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        password=settings.redis.password or None,
        ssl=settings.redis.ssl,
        decode_responses=True,
    )


def build_quote_service(settings: Settings, redis_client: "Redis | None") -> QuoteService:
    """Assemble the QuoteService from settings."""
    maps = settings.google_maps
    est = settings.estimator

    return QuoteService(
        rate_cards=RateCardRepository.from_file(est.rate_cards_path),
        directions_client=DirectionsClient(maps.api_key, maps.directions_url, maps.timeout),
        weather_client=WeatherClient(
            settings.weather.api_key, settings.weather.base_url, settings.weather.timeout
        ),
        toll_client=TollClient(maps.api_key, maps.routes_url, maps.region_code, maps.timeout),
        cache=ProviderCache(redis_client, enabled=settings.cache.enabled),
        retry_config=RetryConfig.for_directions(est),
        default_timezone=est.default_timezone,
        night_start_hour=est.night_start_hour,
        night_end_hour=est.night_end_hour,
        directions_ttl=settings.cache.directions_ttl_seconds,
        weather_ttl=settings.cache.weather_ttl_seconds,
        tolls_ttl=settings.cache.tolls_ttl_seconds,
    )


def main() -> None:
    """Main entry point - initializes and runs the service."""
    from fare_logging import setup_logging

    settings = get_settings()

    setup_logging(
        level=settings.estimator.log_level,
        json_output=settings.estimator.log_format == "json",
        environment=settings.estimator.environment,
    )

    # Providers must exist before the app is instrumented
    init_otel_sdk()

    redis_client = create_async_redis_client(settings)
    quote_service = build_quote_service(settings, redis_client)
    app = create_app(quote_service=quote_service, redis_client=redis_client)

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting fare estimator on port {port}")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level=settings.estimator.log_level.lower(),
    )


if __name__ == "__main__":
    main()
