"""Swiss Payment Code (SPC 0200): Payload-Assembler und -Parser.

Der Assembler validiert alle Felder (Pflichtfelder, Zeichensatz, Längen,
Betrag, Währung, Referenzart) und liefert entweder einen vollständigen
Payload-String oder wirft einen ``QRBillError``. Texte werden nie still
ersetzt; wer bereinigen will, ruft vorher ``sanitize_text`` auf.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .account import classify_account
from .dto import (
    Account,
    Address,
    AccountKind,
    CreditorReference,
    NoReference,
    QRBill,
    QRReference,
    Reference,
    quantize_money,
)
from .errors import (
    AmountOutOfRange,
    FieldTooLong,
    IncompleteAddress,
    InvalidPayload,
    ReferenceMismatch,
    UnsupportedCharacter,
    UnsupportedCurrency,
)
from .reference import verify_reference


QR_TYPE = "SPC"
VERSION = "0200"
CODING_TYPE = "1"
ADDRESS_TYPE_STRUCTURED = "S"
TRAILER = "EPD"
LINE_SEPARATOR = "\r\n"

SUPPORTED_CURRENCIES = ("CHF", "EUR")
MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999.99")

ADDRESS_LIMITS = {
    "name": 70,
    "street": 70,
    "house_number": 16,
    "postal_code": 16,
    "city": 35,
}
REQUIRED_ADDRESS_FIELDS = ("name", "postal_code", "city", "country_code")
ADDITIONAL_INFORMATION_LIMIT = 140

MIN_LINES = 31
MAX_LINES = 34

_COUNTRY_CODE = re.compile(r"[A-Z]{2}")
_AMOUNT = re.compile(r"[0-9]{1,9}\.[0-9]{2}")
_CONTROL_OR_FOREIGN = re.compile(r"[^\x20-\x7E\xA0-\xFF]")
_WHITESPACE = re.compile(r"\s+")


def is_allowed_char(char: str) -> bool:
    code = ord(char)
    return 0x20 <= code <= 0x7E or 0xA0 <= code <= 0xFF


def sanitize_text(text: Optional[str]) -> str:
    """Explizite Bereinigung vor der Übergabe an den Assembler.

    Steuerzeichen und Zeichen ausserhalb Latin-1 werden zu Leerzeichen,
    Mehrfach-Leerzeichen zusammengefasst, Ränder getrimmt.
    """

    if not text:
        return ""
    cleaned = _CONTROL_OR_FOREIGN.sub(" ", text)
    return _WHITESPACE.sub(" ", cleaned).strip()


def _check_characters(field: str, value: str) -> None:
    for char in value:
        if not is_allowed_char(char):
            raise UnsupportedCharacter(field, char)


def _check_length(field: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise FieldTooLong(field, limit)


def _address_lines(address: Optional[Address], role: str) -> List[Tuple[str, str]]:
    if address is None:
        return [(f"{role}.address_type", "")] + [
            (f"{role}.{name}", "") for name in ("name", "street", "house_number", "postal_code", "city", "country_code")
        ]

    # Zeichensatz auf dem Rohwert prüfen, erst danach Leerzeichen trimmen
    values = {}
    for name in (*ADDRESS_LIMITS, "country_code"):
        raw = getattr(address, name) or ""
        _check_characters(f"{role}.{name}", raw)
        values[name] = raw.strip(" ")

    for name in REQUIRED_ADDRESS_FIELDS:
        if not values[name]:
            raise IncompleteAddress(role, name)
    country = values["country_code"].upper()
    if not _COUNTRY_CODE.fullmatch(country):
        raise IncompleteAddress(role, "country_code")

    fields: List[Tuple[str, str]] = [(f"{role}.address_type", ADDRESS_TYPE_STRUCTURED)]
    for name, limit in ADDRESS_LIMITS.items():
        _check_length(f"{role}.{name}", values[name], limit)
        fields.append((f"{role}.{name}", values[name]))
    fields.append((f"{role}.country_code", country))
    return fields


def _format_amount(amount: Optional[Decimal]) -> str:
    if amount is None:
        return ""
    value = quantize_money(amount)
    if value < MIN_AMOUNT or value > MAX_AMOUNT:
        raise AmountOutOfRange(f"Amount must be within {MIN_AMOUNT} and {MAX_AMOUNT}, got {value}")
    return f"{value:.2f}"


def _check_currency(currency: str) -> str:
    if currency not in SUPPORTED_CURRENCIES:
        raise UnsupportedCurrency(currency)
    return currency


def check_reference_pairing(account: Account, reference: Reference) -> None:
    """QR-IBAN verlangt QRR; QRR und normale IBAN schliessen sich aus."""

    if account.kind is AccountKind.QR_IBAN and not isinstance(reference, QRReference):
        raise ReferenceMismatch("QR-IBAN requires a 27-digit QR reference")
    if account.kind is AccountKind.ORDINARY and isinstance(reference, QRReference):
        raise ReferenceMismatch("QR reference can only be used with a QR-IBAN")


def _reference_value(reference: Reference) -> str:
    if isinstance(reference, NoReference):
        return ""
    return "".join(reference.value.split()).upper()


def assemble_payload(bill: QRBill) -> str:
    check_reference_pairing(bill.account, bill.reference)
    verify_reference(bill.reference)

    fields: List[Tuple[str, str]] = [
        ("qr_type", QR_TYPE),
        ("version", VERSION),
        ("coding_type", CODING_TYPE),
        ("account", bill.account.iban),
    ]
    fields.extend(_address_lines(bill.creditor, "creditor"))
    fields.extend(_address_lines(bill.ultimate_creditor, "ultimate_creditor"))
    fields.append(("amount", _format_amount(bill.amount)))
    fields.append(("currency", _check_currency(bill.currency)))
    fields.extend(_address_lines(bill.debtor, "debtor"))
    fields.append(("reference_type", bill.reference.type_code))
    fields.append(("reference", _reference_value(bill.reference)))

    message = bill.message or ""
    billing_information = bill.billing_information or ""
    _check_characters("message", message)
    _check_characters("billing_information", billing_information)
    _check_length("message", message, ADDITIONAL_INFORMATION_LIMIT)
    if len(message) + len(billing_information) > ADDITIONAL_INFORMATION_LIMIT:
        raise FieldTooLong("billing_information", ADDITIONAL_INFORMATION_LIMIT)

    fields.append(("message", message))
    fields.append(("trailer", TRAILER))
    fields.append(("billing_information", billing_information))

    return LINE_SEPARATOR.join(value for _, value in fields)


def _parse_address(block: Sequence[str], role: str) -> Optional[Address]:
    address_type, name, street, house_number, postal_code, city, country = block
    if not address_type:
        if any(block):
            raise InvalidPayload(f"{role}: address fields present without address type")
        return None
    if address_type != ADDRESS_TYPE_STRUCTURED:
        raise InvalidPayload(f"{role}: unsupported address type '{address_type}'")
    return Address(
        name=name,
        street=street,
        house_number=house_number,
        postal_code=postal_code,
        city=city,
        country_code=country,
    )


def _parse_reference(type_code: str, value: str) -> Reference:
    if type_code == NoReference.type_code:
        if value:
            raise InvalidPayload("reference must be empty for type NON")
        return NoReference()
    if type_code == QRReference.type_code:
        return QRReference(value)
    if type_code == CreditorReference.type_code:
        return CreditorReference(value)
    raise InvalidPayload(f"unknown reference type '{type_code}'")


def parse_payload(text: str) -> QRBill:
    """Dekodiert einen SPC-Payload (CRLF oder LF) zurück in ein ``QRBill``.

    Akzeptiert auch SCOR-Referenzen, die der Generator selbst nie erzeugt,
    und ignoriert optionale Alternativverfahren nach der Rechnungsinformation.
    """

    lines = text.replace("\r\n", "\n").split("\n")
    if len(lines) < MIN_LINES or len(lines) > MAX_LINES:
        raise InvalidPayload(f"expected {MIN_LINES}-{MAX_LINES} lines, got {len(lines)}")
    if lines[0] != QR_TYPE:
        raise InvalidPayload(f"unexpected QR type '{lines[0]}'")
    if lines[1] != VERSION:
        raise InvalidPayload(f"unsupported version '{lines[1]}'")
    if lines[2] != CODING_TYPE:
        raise InvalidPayload(f"unsupported coding type '{lines[2]}'")
    if lines[30] != TRAILER:
        raise InvalidPayload("trailer 'EPD' missing")

    account = classify_account(lines[3])
    creditor = _parse_address(lines[4:11], "creditor")
    if creditor is None:
        raise InvalidPayload("creditor address missing")
    ultimate_creditor = _parse_address(lines[11:18], "ultimate_creditor")

    amount: Optional[Decimal] = None
    if lines[18]:
        if not _AMOUNT.fullmatch(lines[18]):
            raise InvalidPayload(f"invalid amount '{lines[18]}'")
        amount = Decimal(lines[18])
        if amount < MIN_AMOUNT or amount > MAX_AMOUNT:
            raise InvalidPayload(f"amount {amount} outside {MIN_AMOUNT}-{MAX_AMOUNT}")
    if lines[19] not in SUPPORTED_CURRENCIES:
        raise InvalidPayload(f"unsupported currency '{lines[19]}'")

    debtor = _parse_address(lines[20:27], "debtor")
    reference = _parse_reference(lines[27], lines[28])
    check_reference_pairing(account, reference)
    verify_reference(reference)

    return QRBill(
        account=account,
        creditor=creditor,
        ultimate_creditor=ultimate_creditor,
        amount=amount,
        currency=lines[19],
        debtor=debtor,
        reference=reference,
        message=lines[29],
        billing_information=lines[31] if len(lines) > 31 else "",
    )
