"""Anzeigeformate für Layout/Druck (Empfangsschein, Zahlteil, Positionen)."""

from __future__ import annotations

from typing import Optional

from .account import format_account
from .dto import CreditorReference, DecimalLike, NoReference, QRReference, Reference, quantize_money


HOME_COUNTRY_ALIASES = {
    "SCHWEIZ": "CH",
    "SUISSE": "CH",
    "SVIZZERA": "CH",
    "SWITZERLAND": "CH",
    "LIECHTENSTEIN": "LI",
}


def _group(value: str, size: int) -> str:
    return " ".join(value[i : i + size] for i in range(0, len(value), size))


def format_reference(reference: Reference | str) -> str:
    """QRR in Fünferblöcken, SCOR in Viererblöcken (von links)."""

    if isinstance(reference, NoReference):
        return ""
    if isinstance(reference, QRReference):
        return _group(reference.value, 5)
    if isinstance(reference, CreditorReference):
        return _group("".join(reference.value.split()), 4)
    compact = "".join(reference.split())
    return _group(compact, 4 if compact.upper().startswith("RF") else 5)


def format_amount(amount: DecimalLike) -> str:
    """``1234.5`` → ``1'234.50`` (Apostroph als Tausendertrennzeichen)."""

    return f"{quantize_money(amount):,.2f}".replace(",", "'")


def format_street_line(street: Optional[str], house_number: Optional[str]) -> str:
    street = (street or "").strip()
    if not street:
        return ""
    house_number = (house_number or "").strip()
    return f"{street} {house_number}" if house_number else street


def format_locality_line(postal_code: str, city: str, country_code: str = "", home_country: str = "") -> str:
    """PLZ + Ort; ausländische Adressen mit Länderpräfix (``DE-10115 Berlin``)."""

    locality = f"{postal_code.strip()} {city.strip()}".strip()
    country = country_code.strip().upper()
    if country and home_country and country != home_country.upper():
        return f"{country}-{locality}"
    return locality


def resolve_country_code(raw: Optional[str], home_country: str) -> str:
    """Bestimmt den ISO-Ländercode; leer → Heimatland des Rechnungsstellers."""

    value = (raw or "").strip()
    if not value:
        return home_country.upper()
    alias = HOME_COUNTRY_ALIASES.get(value.upper())
    if alias:
        return alias
    return value[:2].upper()


__all__ = [
    "format_account",
    "format_reference",
    "format_amount",
    "format_street_line",
    "format_locality_line",
    "resolve_country_code",
]
