from pydantic import Field

from pricing.models import CamelModel, FareQuote, RouteInfo, VehicleRateCard


class FareEstimateResponse(CamelModel):
    success: bool = True
    message: str = "Ride prices calculated successfully for all vehicles"
    route_info: RouteInfo
    vehicle_prices: list[FareQuote]
    execution_time: str


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    execution_time: str | None = None


class VehicleResponse(CamelModel):
    vehicle_id: str
    name: str
    vehicle_type: str | None = None
    image_url: str | None = None
    toll_extra: bool
    missing_rate_fields: list[str] = Field(default_factory=list)

    @classmethod
    def from_rate_card(cls, card: VehicleRateCard) -> "VehicleResponse":
        return cls(
            vehicle_id=card.vehicle_id,
            name=card.name,
            vehicle_type=card.vehicle_type,
            image_url=card.image_url,
            toll_extra=card.toll_extra,
            missing_rate_fields=card.missing_pricing_fields,
        )


class VehiclesResponse(CamelModel):
    success: bool = True
    vehicles: list[VehicleResponse]
