"""Log filters for PII masking."""

import logging
import re


class PIIFilter(logging.Filter):
    """Masks PII (emails, phone numbers, API keys in URLs) in log messages."""

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
    PHONE_PATTERN = re.compile(r"(?<![\d.])\d{3}[-\s]?\d{3}[-\s]?\d{4}(?![\d.])")
    KEY_PATTERN = re.compile(r"((?:key|appid)=)[^&\s]+")

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            msg = record.msg
            if "@" in msg:
                msg = self.EMAIL_PATTERN.sub("[EMAIL]", msg)
            if "=" in msg:
                msg = self.KEY_PATTERN.sub(r"\1[REDACTED]", msg)
            if any(c.isdigit() for c in msg):
                msg = self.PHONE_PATTERN.sub("[PHONE]", msg)
            record.msg = msg
        return True
