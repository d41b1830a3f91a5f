"""Rate limiting configuration using slowapi."""

from opentelemetry import metrics
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

FARE_ESTIMATE_LIMIT = "60/minute"
VEHICLES_LIMIT = "100/minute"

meter = metrics.get_meter("fare_estimator")

rate_limit_hits = meter.create_counter(
    name="api_rate_limit_hits_total",
    description="Total API requests rejected by rate limiting",
    unit="1",
)


def get_api_key_or_ip(request: Request) -> str:
    """Rate limit by API key if present, otherwise by IP."""
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"key:{api_key}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=get_api_key_or_ip)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 handler in the service's error envelope, with a Retry-After header."""
    rate_limit_hits.add(
        1,
        {"endpoint": request.url.path, "method": request.method},
    )

    retry_after = "60"
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit:
        window_map = {"second": 1, "minute": 60, "hour": 3600, "day": 86400}
        limit_text = str(view_rate_limit)
        for unit, seconds in window_map.items():
            if unit in limit_text:
                retry_after = str(seconds)
                break

    response = JSONResponse(
        status_code=429,
        content={"success": False, "message": f"Rate limit exceeded: {exc.detail}"},
    )
    response.headers["retry-after"] = retry_after
    return response
