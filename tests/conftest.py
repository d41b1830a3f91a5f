import os

# APISettings has no default key (services must fail without secrets).
# Provide a test value so Settings() can be constructed in tests.
os.environ.setdefault("API_KEY", "test-api-key")

import pytest

from pricing.models import Coordinates, TripContext, VehicleRateCard


@pytest.fixture
def origin() -> Coordinates:
    return Coordinates(latitude=28.6139, longitude=77.2090)


@pytest.fixture
def destination() -> Coordinates:
    return Coordinates(latitude=28.5355, longitude=77.3910)


@pytest.fixture
def make_trip():
    """Factory for trip contexts with sensible defaults."""

    def _make_trip(**overrides) -> TripContext:
        values = {
            "distance_km": 5.0,
            "duration_min": 10.0,
            "traffic_duration_min": 10.0,
            "waiting_time_min": 0.0,
            "rain": False,
            "tolls_present": False,
            "toll_price": 0.0,
            "is_night_time": False,
        }
        values.update(overrides)
        return TripContext(**values)

    return _make_trip


@pytest.fixture
def make_card():
    """Factory for rate cards; defaults to the worked pricing example."""

    def _make_card(**overrides) -> VehicleRateCard:
        values = {
            "vehicle_id": "mini",
            "name": "Cab Mini",
            "vehicle_type": "Mini",
            "status": True,
            "base_fare": 50,
            "base_km": 2,
            "per_km": 10,
            "per_min": 1,
            "night_percent": 0,
            "min_fare": 60,
            "waiting_charge_per_min": 0,
            "fuel_surcharge_per_km": 0,
            "toll_extra": False,
        }
        values.update(overrides)
        return VehicleRateCard(**values)

    return _make_card


@pytest.fixture
def rate_card_records() -> list[dict]:
    """Rate cards as stored by the ride suggestion documents."""
    return [
        {
            "_id": "bike",
            "name": "Bike",
            "vehicleType": "Bike",
            "status": True,
            "icons_image": {"url": "https://cdn.example.com/bike.png"},
            "baseFare": 25,
            "baseKM": 2,
            "perKM": 8,
            "perMin": 1,
            "nightPercent": 20,
            "minFare": 30,
            "tollExtra": False,
            "waitingChargePerMin": 1,
            "fuelSurchargePerKM": 0,
        },
        {
            "_id": "sedan",
            "name": "Cab Sedan",
            "vehicleType": "Sedan",
            "status": True,
            "baseFare": 70,
            "baseKM": 2,
            "perKM": 17,
            "perMin": 2.5,
            "nightPercent": 25,
            "minFare": 110,
            "tollExtra": True,
            "waitingChargePerMin": 2.5,
            "fuelSurchargePerKM": 1.5,
        },
        {
            "_id": "suv",
            "name": "Cab SUV",
            "vehicleType": "SUV",
            "status": False,
            "baseFare": 100,
            "baseKM": 2,
            "perKM": 22,
            "perMin": 3,
            "nightPercent": 25,
            "minFare": 150,
            "tollExtra": True,
            "waitingChargePerMin": 3,
            "fuelSurchargePerKM": 2,
        },
    ]
