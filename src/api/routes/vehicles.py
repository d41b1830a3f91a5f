from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from api.auth import verify_api_key
from api.dependencies import get_rate_card_repository
from api.models.fares import VehicleResponse, VehiclesResponse
from api.rate_limit import VEHICLES_LIMIT, limiter
from pricing.rate_cards import RateCardRepository

router = APIRouter(dependencies=[Depends(verify_api_key)])

RateCardsDep = Annotated[RateCardRepository, Depends(get_rate_card_repository)]


@router.get("", response_model=VehiclesResponse)
@limiter.limit(VEHICLES_LIMIT)
def list_vehicles(
    request: Request,
    rate_cards: RateCardsDep,
    include_inactive: bool = Query(default=False),
) -> VehiclesResponse:
    """List vehicle classes, flagging rate cards with missing pricing fields."""
    cards = rate_cards.all() if include_inactive else rate_cards.get_active()
    return VehiclesResponse(vehicles=[VehicleResponse.from_rate_card(c) for c in cards])


@router.get("/{vehicle_id}", response_model=VehicleResponse)
@limiter.limit(VEHICLES_LIMIT)
def get_vehicle(request: Request, vehicle_id: str, rate_cards: RateCardsDep) -> VehicleResponse:
    return VehicleResponse.from_rate_card(rate_cards.get(vehicle_id))
