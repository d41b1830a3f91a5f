"""Pricing domain models: trip context, vehicle rate cards and fare quotes."""

import re
from typing import Any, Literal

from pydantic import AliasChoices, AliasPath, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PRICING_FIELDS = (
    "base_fare",
    "base_km",
    "per_km",
    "per_min",
    "night_percent",
    "min_fare",
    "waiting_charge_per_min",
    "fuel_surcharge_per_km",
)

# Fields whose absence is reported at WARNING level; the rest are optional extras
CORE_PRICING_FIELDS = ("base_fare", "per_km", "per_min")

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def parse_numeric(value: Any) -> float | None:
    """Coerce a numeric-ish value to float.

    Strings such as ``"12.5 km"`` yield their first number. Anything that
    carries no number yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        match = _NUMBER_PATTERN.search(value)
        return float(match.group(0)) if match else None
    return None


class CamelModel(BaseModel):
    """Base for models exchanged with the mobile apps (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def as_key(self) -> str:
        return f"{self.latitude},{self.longitude}"


class QuoteRequest(CamelModel):
    """A rider's request for prices between two points."""

    origin: Coordinates
    destination: Coordinates
    waiting_time_in_minutes: float = Field(default=0.0, ge=0)
    vehicle_ids: list[str] = Field(default_factory=list)
    is_night_time: bool | None = None
    timezone: str | None = None


class TripContext(BaseModel):
    """Everything the estimator needs to know about one trip.

    Built from provider responses before pricing; never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    origin: Coordinates | None = None
    destination: Coordinates | None = None
    distance_km: float
    duration_min: float
    traffic_duration_min: float
    waiting_time_min: float = Field(default=0.0, ge=0)
    rain: bool = False
    tolls_present: bool = False
    toll_price: float = Field(default=0.0, ge=0)
    is_night_time: bool = False


class VehicleRateCard(BaseModel):
    """Static pricing parameters for one vehicle class.

    Accepts both snake_case keys and the keys used by the ride suggestion
    documents (``_id``, ``baseFare``, ``perKM``, ``icons_image.url`` ...).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vehicle_id: str = Field(validation_alias=AliasChoices("vehicle_id", "vehicleId", "_id", "id"))
    name: str = "Unknown Vehicle"
    vehicle_type: str | None = Field(
        default=None, validation_alias=AliasChoices("vehicle_type", "vehicleType")
    )
    image_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("image_url", "imageUrl", AliasPath("icons_image", "url")),
    )
    status: bool = False

    base_fare: float | None = Field(
        default=None, validation_alias=AliasChoices("base_fare", "baseFare")
    )
    base_km: float | None = Field(default=None, validation_alias=AliasChoices("base_km", "baseKM"))
    per_km: float | None = Field(default=None, validation_alias=AliasChoices("per_km", "perKM"))
    per_min: float | None = Field(default=None, validation_alias=AliasChoices("per_min", "perMin"))
    night_percent: float | None = Field(
        default=None, validation_alias=AliasChoices("night_percent", "nightPercent")
    )
    min_fare: float | None = Field(
        default=None, validation_alias=AliasChoices("min_fare", "minFare")
    )
    waiting_charge_per_min: float | None = Field(
        default=None,
        validation_alias=AliasChoices("waiting_charge_per_min", "waitingChargePerMin"),
    )
    fuel_surcharge_per_km: float | None = Field(
        default=None,
        validation_alias=AliasChoices("fuel_surcharge_per_km", "fuelSurchargePerKM"),
    )
    toll_extra: bool = Field(default=False, validation_alias=AliasChoices("toll_extra", "tollExtra"))

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def coerce_vehicle_id(cls, v: Any) -> str:
        if isinstance(v, dict) and "$oid" in v:
            return str(v["$oid"])
        return str(v)

    @field_validator(*PRICING_FIELDS, mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> float | None:
        return parse_numeric(v)

    @property
    def missing_pricing_fields(self) -> list[str]:
        return [name for name in PRICING_FIELDS if getattr(self, name) is None]

    @property
    def is_complete(self) -> bool:
        return not self.missing_pricing_fields

    def rate(self, field_name: str) -> float:
        """Pricing value for ``field_name``, 0 when the card does not define it."""
        value = getattr(self, field_name)
        return 0.0 if value is None else value


class FareBreakdown(CamelModel):
    """Detailed breakdown of fare components."""

    base_fare: float = Field(ge=0)
    distance_cost: float = Field(ge=0)
    time_cost: float = Field(ge=0)
    waiting_time_cost: float = Field(ge=0)
    night_surcharge: float = Field(ge=0)
    fuel_surcharge: float = Field(ge=0)
    toll_cost: float = Field(ge=0)


class FareQuote(CamelModel):
    vehicle_id: str
    vehicle_name: str
    vehicle_type: str | None = None
    vehicle_image: str | None = None
    total_price: float = Field(ge=0)
    distance_in_km: float
    duration_in_minutes: float
    pricing: FareBreakdown
    missing_rate_fields: list[str] = Field(default_factory=list)


class RouteConditions(CamelModel):
    rain: bool
    tolls: bool
    is_night_time: bool
    time_detection: Literal["manual", "auto-detected"] = "auto-detected"


class RouteInfo(CamelModel):
    distance_in_km: float
    duration_in_minutes: float
    conditions: RouteConditions


class FareEstimate(CamelModel):
    route_info: RouteInfo
    vehicle_prices: list[FareQuote]
