"""Tests for Settings → QRBillConfig and the JSON log formatter."""

from __future__ import annotations

import json
import logging
from decimal import Decimal

from backend.core.config import Settings
from backend.core.observability import init_observability
from backend.core.observability.logging import JSONFormatter, set_trace_id


def make_record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="tools.qrbill.generate",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_settings_defaults_disable_tax() -> None:
    config = Settings().to_qrbill_config()

    assert config.tax_enabled is False
    assert config.default_tax_rate == Decimal("8.1")
    assert config.currency == "CHF"
    assert config.home_country == "CH"


def test_settings_read_environment(monkeypatch) -> None:
    # Arrange
    monkeypatch.setenv("QRBILL_TAX_ENABLED", "true")
    monkeypatch.setenv("QRBILL_DEFAULT_TAX_RATE", "2.6")
    monkeypatch.setenv("QRBILL_CURRENCY", "eur")

    # Act
    config = Settings().to_qrbill_config()

    # Assert
    assert config.tax_enabled is True
    assert config.default_tax_rate == Decimal("2.6")
    assert config.currency == "EUR"


def test_formatter_emits_mandatory_fields() -> None:
    set_trace_id("trace-123")
    try:
        entry = json.loads(JSONFormatter().format(make_record("qr-bill generated", document_id="RE-2026-007")))
    finally:
        set_trace_id(None)

    assert entry["trace_id"] == "trace-123"
    assert "tenant_id" not in entry
    assert entry["level"] == "info"
    assert entry["logger"] == "tools.qrbill.generate"
    assert entry["msg"] == "qr-bill generated"
    assert entry["document_id"] == "RE-2026-007"
    assert entry["ts_utc"].endswith("Z")


def test_formatter_redacts_accounts_references_and_emails() -> None:
    record = make_record(
        "payment to CH4431999123000889012 ref 210000000003139471430009017 from info@freiluftchuchi.ch",
        account="CH44 3199 9123 0008 8901 2",
    )

    entry = json.loads(JSONFormatter().format(record))

    assert "CH4431999123000889012" not in entry["msg"]
    assert "CH**" in entry["msg"]
    assert "***********************9017" in entry["msg"]
    assert "210000000003139471430009017" not in entry["msg"]
    assert "i***@freiluftchuchi.ch" in entry["msg"]
    assert entry["account"].startswith("CH**")
    assert "3199" not in entry["account"]


def test_init_observability_binds_trace_id(restore_root_logger: logging.Logger) -> None:
    trace_id = init_observability(trace_id="cli-run-1", level="warning")

    root = restore_root_logger
    assert trace_id == "cli-run-1"
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JSONFormatter)


def test_root_logger_carries_no_json_handler_from_earlier_tests() -> None:
    root = logging.getLogger()

    assert not any(isinstance(handler.formatter, JSONFormatter) for handler in root.handlers)
