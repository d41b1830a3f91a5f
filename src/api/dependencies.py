"""FastAPI dependency injection providers."""

from typing import Any

from fastapi import Request


def get_quote_service(request: Request) -> Any:
    """Retrieve QuoteService from app state."""
    return request.app.state.quote_service


def get_rate_card_repository(request: Request) -> Any:
    """Retrieve RateCardRepository from app state."""
    return request.app.state.quote_service.rate_cards
