"""Tests for tools.qrbill.generate: request file to payload CLI."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from agents.qrbill import QRBillConfig
from backend.core.config import Settings
from tools.qrbill.generate import main, parse_args, render_request
from tools.qrbill.request import BillRequest, load_request


REQUEST_YAML = """\
document_id: RE-2026-007
creditor_account: CH38 3003 4123 4567 8901 2
creditor:
  name: Freiluftchuchi GmbH
  street: Bahnhofstrasse
  house_number: 12
  postal_code: 8001
  city: Zürich
  country: Schweiz
debtor:
  name: Müller AG
  street: Rue du Marché
  house_number: 3a
  postal_code: 1204
  city: Genève
items:
  - description: Beratung
    quantity: 2
    unit_price: "100.00"
  - description: Spesen
    quantity: 1
    unit_price: "50.00"
discount:
  type: percent
  value: 10
"""


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        QRBILL_TAX_ENABLED=True,
        QRBILL_DEFAULT_TAX_RATE=Decimal("7.7"),
        QRBILL_CURRENCY="chf",
        QRBILL_HOME_COUNTRY="ch",
    )


@pytest.fixture
def request_file(tmp_path: Path) -> Path:
    path = tmp_path / "re-2026-007.yaml"
    path.write_text(REQUEST_YAML, encoding="utf-8")
    return path


def test_load_request_coerces_yaml_scalars(request_file: Path) -> None:
    # Act
    request = load_request(request_file)

    # Assert
    assert request.creditor.house_number == "12"
    assert request.creditor.postal_code == "8001"
    assert request.creditor_account == "CH38 3003 4123 4567 8901 2"
    assert len(request.line_items()) == 2
    assert request.discount_spec().percent == Decimal("10")


def test_load_request_accepts_json(tmp_path: Path) -> None:
    path = tmp_path / "request.json"
    path.write_text(
        json.dumps(
            {
                "document_id": "RE-2026-008",
                "creditor_account": "CH3808888123456789012",
                "creditor": {"name": "Freiluftchuchi GmbH", "postal_code": "8001", "city": "Zürich"},
                "items": [{"quantity": "1", "unit_price": "80.00"}],
            }
        ),
        encoding="utf-8",
    )

    request = load_request(path)

    assert request.debtor is None
    assert request.discount_spec() is None


def test_load_request_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_request(path)


def test_request_model_rejects_negative_quantities() -> None:
    with pytest.raises(ValidationError):
        BillRequest.model_validate(
            {
                "document_id": "X",
                "creditor_account": "CH3808888123456789012",
                "creditor": {"name": "A", "postal_code": "8001", "city": "Zürich"},
                "items": [{"quantity": -1, "unit_price": 10}],
            }
        )


def test_render_request_returns_totals_and_payload(request_file: Path, config: QRBillConfig) -> None:
    # Act
    result = render_request(load_request(request_file), config)

    # Assert
    assert result["account"] == "CH38 3003 4123 4567 8901 2"
    assert result["account_kind"] == "qr_iban"
    assert result["reference_type"] == "QRR"
    assert result["reference"] == "00000 00000 00000 00002 02600 73"
    assert result["amount"] == "242.35"
    assert result["totals"]["tax_amount"] == "17.33"
    assert result["totals"]["line_taxes"] == ["13.86", "3.47"]
    lines = result["payload"].split("\r\n")
    assert lines[10] == "CH"
    assert lines[26] == "CH"
    assert lines[29] == "Rechnung RE-2026-007"


def test_render_request_sanitizes_on_request(request_file: Path, config: QRBillConfig) -> None:
    request = load_request(request_file)
    request.debtor.name = "Müller\tAG “Zürich”"

    result = render_request(request, config, sanitize=True, message_label="Faktura")

    lines = result["payload"].split("\r\n")
    assert lines[21] == "Müller AG Zürich"
    assert lines[29] == "Faktura RE-2026-007"


def test_parse_args_requires_input() -> None:
    with pytest.raises(SystemExit):
        parse_args([])


def test_main_writes_payload_file(request_file: Path, tmp_path: Path, app_settings: Settings) -> None:
    # Arrange
    output = tmp_path / "out" / "payload.txt"

    # Act
    main(["--input", str(request_file), "--output", str(output)], app_settings=app_settings)

    # Assert
    payload = output.read_bytes().decode("utf-8")
    assert payload.startswith("SPC\r\n0200\r\n1\r\nCH3830034123456789012\r\n")
    assert payload.endswith("\r\nEPD\r\n")
    assert "\r\n242.35\r\nCHF\r\n" in payload


def test_main_prints_json(request_file: Path, app_settings: Settings, capsys) -> None:
    main(["--input", str(request_file), "--json"], app_settings=app_settings)

    result = json.loads(capsys.readouterr().out)
    assert result["currency"] == "CHF"
    assert result["totals"]["payable_amount"] == "242.35"


def test_main_exits_with_error_kind(tmp_path: Path, app_settings: Settings) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(REQUEST_YAML.replace("name: Müller AG", "name: Müller “AG”"), encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["--input", str(path)], app_settings=app_settings)

    assert str(exc_info.value.code).startswith("UnsupportedCharacter:")


def test_main_rejects_missing_file(tmp_path: Path, app_settings: Settings) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--input", str(tmp_path / "missing.yaml")], app_settings=app_settings)

    assert "Invalid request" in str(exc_info.value.code)
