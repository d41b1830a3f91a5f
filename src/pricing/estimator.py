"""Per-vehicle fare estimation over a priced trip."""

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from opentelemetry import metrics

from core.exceptions import InvalidTripGeometryError, NoEligibleVehiclesError
from fare_logging import log_vehicle_context
from pricing.models import (
    CORE_PRICING_FIELDS,
    FareBreakdown,
    FareQuote,
    TripContext,
    VehicleRateCard,
)

logger = logging.getLogger(__name__)

meter = metrics.get_meter("fare_estimator")

quotes_counter = meter.create_counter(
    name="fare_quotes_total",
    description="Total fare quotes produced",
    unit="1",
)
incomplete_rate_cards_counter = meter.create_counter(
    name="fare_incomplete_rate_cards_total",
    description="Rate cards priced with one or more missing fields defaulted to 0",
    unit="1",
)


def round_money(value: float) -> float:
    """Round half-up to 2 decimal places."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def validate_trip(trip: TripContext) -> None:
    if trip.distance_km <= 0 or trip.traffic_duration_min <= 0:
        raise InvalidTripGeometryError(
            "Invalid route data: distance or duration is zero or negative",
            details={
                "distance_km": trip.distance_km,
                "traffic_duration_min": trip.traffic_duration_min,
            },
        )


class FareEstimator:
    """Prices a trip for each vehicle class.

    Pure calculator: no I/O, no state between calls. Every fare component is
    clamped at zero before summation and the total never drops below the
    vehicle's minimum fare.
    """

    def quote(self, trip: TripContext, card: VehicleRateCard) -> FareQuote:
        base_fare = max(0.0, card.rate("base_fare"))

        chargeable_distance = max(0.0, trip.distance_km - card.rate("base_km"))
        distance_cost = max(0.0, chargeable_distance * card.rate("per_km"))
        time_cost = max(0.0, trip.traffic_duration_min * card.rate("per_min"))
        waiting_cost = max(0.0, trip.waiting_time_min * card.rate("waiting_charge_per_min"))

        night_surcharge = 0.0
        if trip.is_night_time:
            night_surcharge = max(
                0.0, (base_fare + distance_cost) * card.rate("night_percent") / 100
            )

        fuel_surcharge = max(0.0, trip.distance_km * card.rate("fuel_surcharge_per_km"))
        toll_cost = trip.toll_price if trip.tolls_present and card.toll_extra else 0.0

        raw_total = (
            base_fare
            + distance_cost
            + time_cost
            + waiting_cost
            + night_surcharge
            + fuel_surcharge
            + toll_cost
        )
        total_price = max(raw_total, card.rate("min_fare"))

        return FareQuote(
            vehicle_id=card.vehicle_id,
            vehicle_name=card.name,
            vehicle_type=card.vehicle_type,
            vehicle_image=card.image_url,
            total_price=round_money(total_price),
            distance_in_km=round_money(trip.distance_km),
            duration_in_minutes=round_money(trip.traffic_duration_min),
            pricing=FareBreakdown(
                base_fare=round_money(base_fare),
                distance_cost=round_money(distance_cost),
                time_cost=round_money(time_cost),
                waiting_time_cost=round_money(waiting_cost),
                night_surcharge=round_money(night_surcharge),
                fuel_surcharge=round_money(fuel_surcharge),
                toll_cost=round_money(toll_cost),
            ),
            missing_rate_fields=card.missing_pricing_fields,
        )

    def estimate(
        self, trip: TripContext, cards: Iterable[VehicleRateCard]
    ) -> list[FareQuote]:
        """Quote every active card and return the quotes cheapest first.

        Equal totals keep the order the cards were given in.
        """
        validate_trip(trip)

        active = [card for card in cards if card.status]
        if not active:
            raise NoEligibleVehiclesError("No active vehicles found")

        quotes = []
        for card in active:
            with log_vehicle_context(card.vehicle_id):
                self._flag_incomplete(card)
                quotes.append(self.quote(trip, card))

        quotes_counter.add(len(quotes))
        # list.sort is stable
        quotes.sort(key=lambda q: q.total_price)
        return quotes

    def _flag_incomplete(self, card: VehicleRateCard) -> None:
        if card.is_complete:
            return

        missing = card.missing_pricing_fields
        incomplete_rate_cards_counter.add(1, {"vehicle_type": card.vehicle_type or "unknown"})
        if any(name in missing for name in CORE_PRICING_FIELDS):
            logger.warning(
                f"Vehicle {card.vehicle_id} has incomplete pricing data, "
                f"defaulting to 0: {', '.join(missing)}"
            )
        else:
            logger.info(
                f"Vehicle {card.vehicle_id} rate card missing optional fields: {', '.join(missing)}"
            )
