import logging

import pytest

from core.exceptions import InvalidTripGeometryError, NoEligibleVehiclesError
from pricing.estimator import FareEstimator, round_money, validate_trip
from pricing.models import FareQuote, VehicleRateCard


@pytest.fixture
def estimator() -> FareEstimator:
    return FareEstimator()


@pytest.mark.unit
class TestQuote:
    def test_basic_calculation(self, estimator, make_trip, make_card):
        quote = estimator.quote(make_trip(distance_km=5.0, traffic_duration_min=10.0), make_card())

        assert isinstance(quote, FareQuote)
        assert quote.pricing.base_fare == pytest.approx(50.0)
        assert quote.pricing.distance_cost == pytest.approx(30.0)
        assert quote.pricing.time_cost == pytest.approx(10.0)
        assert quote.pricing.waiting_time_cost == 0
        assert quote.pricing.night_surcharge == 0
        assert quote.pricing.fuel_surcharge == 0
        assert quote.pricing.toll_cost == 0
        assert quote.total_price == pytest.approx(90.0)

    def test_distance_within_base_km_is_free(self, estimator, make_trip, make_card):
        quote = estimator.quote(make_trip(distance_km=1.0, traffic_duration_min=10.0), make_card())

        assert quote.pricing.distance_cost == 0
        assert quote.pricing.time_cost == pytest.approx(10.0)
        assert quote.total_price == pytest.approx(60.0)

    def test_minimum_fare_enforced(self, estimator, make_trip, make_card):
        quote = estimator.quote(make_trip(distance_km=1.0, traffic_duration_min=1.0), make_card())

        assert quote.pricing.time_cost == pytest.approx(1.0)
        assert quote.total_price == pytest.approx(60.0)

    def test_night_surcharge_on_base_and_distance(self, estimator, make_trip, make_card):
        card = make_card(night_percent=20)
        quote = estimator.quote(make_trip(is_night_time=True), card)

        # (50 + 30) * 20%
        assert quote.pricing.night_surcharge == pytest.approx(16.0)
        assert quote.total_price == pytest.approx(106.0)

    def test_no_night_surcharge_during_day(self, estimator, make_trip, make_card):
        quote = estimator.quote(make_trip(is_night_time=False), make_card(night_percent=50))

        assert quote.pricing.night_surcharge == 0
        assert quote.total_price == pytest.approx(90.0)

    def test_toll_passed_through_when_vehicle_allows(self, estimator, make_trip, make_card):
        trip = make_trip(tolls_present=True, toll_price=45.0)
        quote = estimator.quote(trip, make_card(toll_extra=True))

        assert quote.pricing.toll_cost == pytest.approx(45.0)
        assert quote.total_price == pytest.approx(135.0)

    def test_toll_ignored_when_vehicle_has_no_toll_extra(self, estimator, make_trip, make_card):
        trip = make_trip(tolls_present=True, toll_price=45.0)
        quote = estimator.quote(trip, make_card(toll_extra=False))

        assert quote.pricing.toll_cost == 0
        assert quote.total_price == pytest.approx(90.0)

    def test_toll_ignored_when_route_has_no_tolls(self, estimator, make_trip, make_card):
        trip = make_trip(tolls_present=False, toll_price=45.0)
        quote = estimator.quote(trip, make_card(toll_extra=True))

        assert quote.pricing.toll_cost == 0

    def test_waiting_charge(self, estimator, make_trip, make_card):
        trip = make_trip(waiting_time_min=5.0)
        quote = estimator.quote(trip, make_card(waiting_charge_per_min=2))

        assert quote.pricing.waiting_time_cost == pytest.approx(10.0)
        assert quote.total_price == pytest.approx(100.0)

    def test_fuel_surcharge_uses_full_distance(self, estimator, make_trip, make_card):
        quote = estimator.quote(make_trip(), make_card(fuel_surcharge_per_km=1.5))

        assert quote.pricing.fuel_surcharge == pytest.approx(7.5)
        assert quote.total_price == pytest.approx(97.5)

    def test_missing_fields_price_as_zero(self, estimator, make_trip, make_card):
        card = make_card(
            per_km=None, per_min=None, min_fare=None, base_km=None, night_percent=None
        )
        quote = estimator.quote(make_trip(is_night_time=True), card)

        assert quote.pricing.distance_cost == 0
        assert quote.pricing.time_cost == 0
        assert quote.pricing.night_surcharge == 0
        assert quote.total_price == pytest.approx(50.0)
        assert set(quote.missing_rate_fields) == {
            "per_km",
            "per_min",
            "min_fare",
            "base_km",
            "night_percent",
        }

    def test_negative_rates_clamped_to_zero(self, estimator, make_trip, make_card):
        card = make_card(per_km=-10, per_min=-1, min_fare=0)
        quote = estimator.quote(make_trip(), card)

        assert quote.pricing.distance_cost == 0
        assert quote.pricing.time_cost == 0
        assert quote.total_price == pytest.approx(50.0)

    def test_negative_string_rates_clamped_like_numbers(self, estimator, make_trip):
        numeric = VehicleRateCard.model_validate(
            {"_id": "a", "status": True, "baseFare": 50, "perKM": -5, "perMin": 1}
        )
        stored = VehicleRateCard.model_validate(
            {"_id": "b", "status": True, "baseFare": "50", "perKM": "-5", "perMin": "1"}
        )

        assert stored.per_km == -5.0
        assert estimator.quote(make_trip(), stored).total_price == pytest.approx(60.0)
        assert (
            estimator.quote(make_trip(), stored).total_price
            == estimator.quote(make_trip(), numeric).total_price
        )

    def test_values_rounded_to_two_decimals(self, estimator, make_trip, make_card):
        card = make_card(per_km=3.333, per_min=0.3333)
        trip = make_trip(distance_km=5.0, traffic_duration_min=10.0)
        quote = estimator.quote(trip, card)

        assert quote.pricing.distance_cost == 10.0
        assert quote.pricing.time_cost == 3.33
        assert quote.total_price == 63.33

    def test_distance_and_duration_echoed_back(self, estimator, make_trip, make_card):
        trip = make_trip(distance_km=12.3456, duration_min=20.0, traffic_duration_min=25.555)
        quote = estimator.quote(trip, make_card())

        assert quote.distance_in_km == 12.35
        assert quote.duration_in_minutes == 25.56

    def test_vehicle_identity_copied(self, estimator, make_trip, make_card):
        card = make_card(vehicle_id="sedan", name="Cab Sedan", vehicle_type="Sedan",
                         image_url="https://cdn.example.com/sedan.png")
        quote = estimator.quote(make_trip(), card)

        assert quote.vehicle_id == "sedan"
        assert quote.vehicle_name == "Cab Sedan"
        assert quote.vehicle_type == "Sedan"
        assert quote.vehicle_image == "https://cdn.example.com/sedan.png"


@pytest.mark.unit
class TestPricingProperties:
    @pytest.mark.parametrize("distance", [0.1, 1.0, 2.0, 5.0, 25.0])
    def test_total_never_below_min_fare(self, estimator, make_trip, make_card, distance):
        card = make_card(min_fare=150)
        quote = estimator.quote(make_trip(distance_km=distance), card)

        assert quote.total_price >= 150

    def test_total_non_decreasing_in_distance(self, estimator, make_trip, make_card):
        card = make_card(night_percent=15, fuel_surcharge_per_km=0.75)
        distances = [0.5, 1.0, 1.99, 2.0, 2.01, 3.0, 7.5, 15.0, 60.0]

        totals = [
            estimator.quote(make_trip(distance_km=d, is_night_time=True), card).total_price
            for d in distances
        ]

        assert totals == sorted(totals)

    def test_deterministic(self, estimator, make_trip, make_card):
        trip = make_trip(is_night_time=True, waiting_time_min=3)
        card = make_card(night_percent=10, waiting_charge_per_min=1.5)

        assert estimator.quote(trip, card) == estimator.quote(trip, card)


@pytest.mark.unit
class TestEstimate:
    def test_sorted_ascending_by_total(self, estimator, make_trip, make_card):
        cards = [
            make_card(vehicle_id="sedan", base_fare=80),
            make_card(vehicle_id="bike", base_fare=10, min_fare=20),
            make_card(vehicle_id="mini", base_fare=50),
        ]

        quotes = estimator.estimate(make_trip(), cards)

        assert [q.vehicle_id for q in quotes] == ["bike", "mini", "sedan"]
        prices = [q.total_price for q in quotes]
        assert prices == sorted(prices)

    def test_equal_prices_keep_input_order(self, estimator, make_trip, make_card):
        cards = [
            make_card(vehicle_id="first"),
            make_card(vehicle_id="cheap", base_fare=20),
            make_card(vehicle_id="second"),
            make_card(vehicle_id="third"),
        ]

        quotes = estimator.estimate(make_trip(), cards)

        assert [q.vehicle_id for q in quotes] == ["cheap", "first", "second", "third"]

    def test_inactive_cards_excluded(self, estimator, make_trip, make_card):
        cards = [make_card(vehicle_id="on"), make_card(vehicle_id="off", status=False)]

        quotes = estimator.estimate(make_trip(), cards)

        assert [q.vehicle_id for q in quotes] == ["on"]

    def test_no_active_cards_raises(self, estimator, make_trip, make_card):
        with pytest.raises(NoEligibleVehiclesError):
            estimator.estimate(make_trip(), [make_card(status=False)])

    def test_empty_card_list_raises(self, estimator, make_trip):
        with pytest.raises(NoEligibleVehiclesError):
            estimator.estimate(make_trip(), [])

    @pytest.mark.parametrize(
        "distance, duration",
        [(0.0, 10.0), (-1.0, 10.0), (5.0, 0.0), (5.0, -3.0)],
    )
    def test_invalid_geometry_rejected(self, estimator, make_trip, make_card, distance, duration):
        trip = make_trip(distance_km=distance, traffic_duration_min=duration)

        with pytest.raises(InvalidTripGeometryError):
            estimator.estimate(trip, [make_card()])

    def test_incomplete_card_logged(self, estimator, make_trip, make_card, caplog):
        with caplog.at_level(logging.WARNING, logger="pricing.estimator"):
            quotes = estimator.estimate(make_trip(), [make_card(vehicle_id="broken", per_km=None)])

        assert quotes[0].missing_rate_fields == ["per_km"]
        assert "broken" in caplog.text
        assert "incomplete pricing data" in caplog.text

    def test_complete_card_not_logged(self, estimator, make_trip, make_card, caplog):
        with caplog.at_level(logging.WARNING, logger="pricing.estimator"):
            estimator.estimate(make_trip(), [make_card()])

        assert caplog.text == ""


@pytest.mark.unit
class TestHelpers:
    def test_round_money_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(0.125) == 0.13
        assert round_money(10.0) == 10.0

    def test_validate_trip_accepts_positive_geometry(self, make_trip):
        validate_trip(make_trip(distance_km=0.01, traffic_duration_min=0.01))

    def test_validate_trip_details(self, make_trip):
        with pytest.raises(InvalidTripGeometryError) as exc_info:
            validate_trip(make_trip(distance_km=0.0))

        assert exc_info.value.details["distance_km"] == 0.0
