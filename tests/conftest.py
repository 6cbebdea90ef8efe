import logging
import socket
from decimal import Decimal

import pytest

from agents.qrbill import Address, QRBillConfig
from backend.core.observability.logging import JSONFormatter, set_trace_id


@pytest.fixture(autouse=True, scope="session")
def egress_guard():
    """The QR-bill core is offline; any outbound connection is a bug."""

    real_getaddrinfo = socket.getaddrinfo
    real_create_connection = socket.create_connection

    def guard_getaddrinfo(host, *args, **kwargs):
        raise RuntimeError(f"Egress blocked: getaddrinfo({host!r})")

    def guard_create_connection(address, *args, **kwargs):
        raise RuntimeError(f"Egress blocked: create_connection({address!r})")

    socket.getaddrinfo = guard_getaddrinfo  # type: ignore[assignment]
    socket.create_connection = guard_create_connection  # type: ignore[assignment]

    yield

    socket.getaddrinfo = real_getaddrinfo  # type: ignore[assignment]
    socket.create_connection = real_create_connection  # type: ignore[assignment]


@pytest.fixture
def config() -> QRBillConfig:
    return QRBillConfig(
        tax_enabled=True,
        default_tax_rate=Decimal("7.7"),
        currency="CHF",
        home_country="CH",
    )


@pytest.fixture
def creditor() -> Address:
    return Address(
        name="Freiluftchuchi GmbH",
        street="Bahnhofstrasse",
        house_number="12",
        postal_code="8001",
        city="Zürich",
        country_code="CH",
    )


@pytest.fixture
def debtor() -> Address:
    return Address(
        name="Müller AG",
        street="Rue du Marché",
        house_number="3a",
        postal_code="1204",
        city="Genève",
        country_code="CH",
    )


@pytest.fixture(autouse=True)
def restore_root_logger():
    """CLI runs install a JSON handler on the root logger; drop it again."""

    root = logging.getLogger()
    level = root.level

    yield root

    for handler in root.handlers[:]:
        if isinstance(handler.formatter, JSONFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    set_trace_id(None)
