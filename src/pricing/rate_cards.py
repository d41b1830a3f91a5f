"""Read-only store of vehicle rate cards."""

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ConfigurationError, NotFoundError
from pricing.models import VehicleRateCard

logger = logging.getLogger(__name__)


class RateCardRepository:
    """Looks up rate cards by id and active status.

    Cards keep the order they were loaded in, which is the tie-break order
    for equally priced quotes.
    """

    def __init__(self, cards: Iterable[VehicleRateCard]):
        self._cards: list[VehicleRateCard] = list(cards)
        self._by_id = {card.vehicle_id: card for card in self._cards}

    @classmethod
    def from_records(cls, records: Sequence[dict[str, Any]]) -> "RateCardRepository":
        """Build from raw documents, skipping entries that cannot be parsed at all."""
        cards = []
        for index, record in enumerate(records):
            try:
                cards.append(VehicleRateCard.model_validate(record))
            except PydanticValidationError as e:
                logger.error(f"Skipping unreadable rate card at index {index}: {e}")
        return cls(cards)

    @classmethod
    def from_file(cls, path: str | Path) -> "RateCardRepository":
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Rate card file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Rate card file is not valid JSON: {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("vehicles", [])
        if not isinstance(data, list):
            raise ConfigurationError(f"Rate card file must hold a list of vehicles: {path}")

        repo = cls.from_records(data)
        logger.info(f"Loaded {len(repo)} rate cards from {path}")
        return repo

    def __len__(self) -> int:
        return len(self._cards)

    def all(self) -> list[VehicleRateCard]:
        return list(self._cards)

    def get(self, vehicle_id: str) -> VehicleRateCard:
        try:
            return self._by_id[vehicle_id]
        except KeyError:
            raise NotFoundError(
                f"Vehicle {vehicle_id} not found", details={"vehicle_id": vehicle_id}
            ) from None

    def get_active(self, vehicle_ids: Sequence[str] | None = None) -> list[VehicleRateCard]:
        """Active cards, restricted to ``vehicle_ids`` when given, in store order."""
        if vehicle_ids:
            wanted = set(vehicle_ids)
            return [c for c in self._cards if c.status and c.vehicle_id in wanted]
        return [c for c in self._cards if c.status]
