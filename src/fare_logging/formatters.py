"""Log formatters for JSON and human-readable output."""

import json
import logging
from datetime import UTC, datetime

SERVICE_NAME = "fare-estimator"

# Fields set by log_context / CorrelationFilter that are worth surfacing
CONTEXT_FIELDS = ("correlation_id", "vehicle_id", "provider")


def _context_of(record: logging.LogRecord, fields: tuple[str, ...]) -> dict[str, object]:
    return {name: getattr(record, name) for name in fields if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, timestamped when the record was created."""

    def __init__(self, environment: str = "development"):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "env": self.environment,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_of(record, CONTEXT_FIELDS),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevFormatter(logging.Formatter):
    """Human-readable lines; vehicle and provider context is appended in brackets."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] [corr=%(correlation_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        line = super().format(record)

        context = _context_of(record, ("vehicle_id", "provider"))
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line
