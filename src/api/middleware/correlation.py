"""Per-request correlation ID and timing middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from api.models.fares import ErrorResponse
from core.correlation import new_correlation_id, with_correlation

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
GENERIC_ERROR_MESSAGE = "Failed to calculate the ride price"


def elapsed_since(request: Request) -> str:
    """Seconds since the request entered the middleware, as ``"0.123s"``."""
    start = getattr(request.state, "start_time", None)
    if start is None:
        return "0.000s"
    return f"{time.perf_counter() - start:.3f}s"


def error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(message=message, execution_time=elapsed_since(request))
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation ID and reports its duration.

    Unhandled errors are answered here with the generic 500 envelope so that
    they carry the same headers as every other response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.start_time = time.perf_counter()
        correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()

        with with_correlation(correlation_id):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(f"Unexpected error handling {request.method} {request.url.path}")
                response = error_response(request, 500, GENERIC_ERROR_MESSAGE)

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Response-Time"] = elapsed_since(request)
        return response
