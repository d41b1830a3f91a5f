"""Pydantic models for API requests and responses."""

from api.models.fares import (
    ErrorResponse,
    FareEstimateResponse,
    VehicleResponse,
    VehiclesResponse,
)
from api.models.health import DetailedHealthResponse, ServiceHealth
