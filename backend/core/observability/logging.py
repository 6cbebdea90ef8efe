"""JSON structured logging with mandatory fields and PII redaction."""
import json
import logging
import re
import sys
import threading
from datetime import datetime, timezone
from typing import Optional

from backend.core.config import settings

# Thread-local storage for context
_context = threading.local()

_RESERVED_ATTRS = frozenset(
    (
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
        'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'message', 'taskName',
    )
)


class JSONFormatter(logging.Formatter):
    """JSON formatter with mandatory fields and PII redaction."""

    def __init__(self):
        super().__init__()
        # PII patterns
        self.iban_pattern = re.compile(r'\b([A-Z]{2}\d{2}(?: ?[A-Z0-9]){11,30})\b')
        self.reference_pattern = re.compile(r'\b(\d{27})\b')
        self.email_pattern = re.compile(r'(\b\S+@\S+\.\S+\b)')

    def _redact_pii(self, text: str) -> str:
        """Redact PII from text."""
        if not isinstance(text, str):
            return text

        text = self.iban_pattern.sub(self._mask_iban, text)
        text = self.reference_pattern.sub(self._mask_reference, text)
        text = self.email_pattern.sub(self._mask_email, text)
        return text

    def _mask_iban(self, match) -> str:
        """Mask IBAN: show country code, mask the rest."""
        iban = match.group(1).replace(" ", "")
        return iban[:2] + "**" + "*" * (len(iban) - 4)

    def _mask_reference(self, match) -> str:
        """Mask QR reference: keep the last 4 digits for support lookups."""
        reference = match.group(1)
        return "*" * (len(reference) - 4) + reference[-4:]

    def _mask_email(self, match) -> str:
        """Mask email: show first char of user, keep domain."""
        email = match.group(1)
        if "@" not in email:
            return email
        user, domain = email.split("@", 1)
        if len(user) <= 1:
            masked_user = "*"
        else:
            masked_user = user[0] + "*" * (len(user) - 1)
        return f"{masked_user}@{domain}"

    def format(self, record):
        """Format log record as JSON with mandatory fields and PII redaction."""
        trace_id = getattr(_context, 'trace_id', None) or 'unknown'

        message = record.getMessage()
        log_entry = {
            'trace_id': trace_id,
            'level': record.levelname.lower(),
            'logger': record.name,
            'msg': self._redact_pii(message),
            'ts_utc': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }

        if record.exc_info:
            log_entry['exc_info'] = self.formatException(record.exc_info)

        # Extra fields (with PII redaction)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if isinstance(value, str):
                value = self._redact_pii(value)
            log_entry[key] = value

        return json.dumps(log_entry, default=str)


def set_trace_id(trace_id: Optional[str]) -> None:
    """Set trace ID for current thread context."""
    _context.trace_id = trace_id


def init_logging(level: Optional[str] = None) -> None:
    """Initialize JSON logging on stderr (stdout carries the payload)."""
    logger = logging.getLogger()
    level_name = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get logger with JSON formatting."""
    return logging.getLogger(name)
