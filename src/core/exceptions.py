"""Error hierarchy for the fare estimator.

Transient errors are retried by ``core.retry``; permanent errors surface to
the caller. Each family carries the HTTP status the API answers with.
"""

from typing import Any


class FareEstimatorError(Exception):
    """Base exception for all fare estimator errors."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(FareEstimatorError):
    """A provider call that may succeed if tried again."""


class NetworkError(TransientError):
    """Timeout or dropped connection talking to a provider."""


class ServiceUnavailableError(TransientError):
    """Provider answered with a 5xx or a rate/quota status."""


class PermanentError(FareEstimatorError):
    """Retrying will not change the outcome."""


class ValidationError(PermanentError):
    """The request or a provider payload cannot be priced."""

    status_code = 400


class NotFoundError(PermanentError):
    status_code = 404


class ConfigurationError(PermanentError):
    """Missing API key, unreadable rate card file and the like."""


class InvalidTripGeometryError(ValidationError):
    """Trip distance or traffic duration is zero or negative."""


class DirectionsUnavailableError(ValidationError):
    """No route geometry could be obtained, so the trip has no price."""


class NoEligibleVehiclesError(NotFoundError):
    """No active rate card matched the request."""
