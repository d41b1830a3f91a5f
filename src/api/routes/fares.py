from typing import Annotated

from fastapi import APIRouter, Depends, Request

from api.auth import verify_api_key
from api.dependencies import get_quote_service
from api.middleware.correlation import elapsed_since
from api.models.fares import ErrorResponse, FareEstimateResponse
from api.rate_limit import FARE_ESTIMATE_LIMIT, limiter
from pricing.models import QuoteRequest
from pricing.service import QuoteService

router = APIRouter(dependencies=[Depends(verify_api_key)])

QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]


@router.post(
    "/estimate",
    response_model=FareEstimateResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@limiter.limit(FARE_ESTIMATE_LIMIT)
async def estimate_fares(
    request: Request, body: QuoteRequest, service: QuoteServiceDep
) -> FareEstimateResponse:
    """Price a trip for every active vehicle class, cheapest first."""
    estimate = await service.estimate(body)
    return FareEstimateResponse(
        route_info=estimate.route_info,
        vehicle_prices=estimate.vehicle_prices,
        execution_time=elapsed_since(request),
    )
