"""QR-Referenz (27 Ziffern, Modulo 10 rekursiv) und SCOR-Prüfung."""

from __future__ import annotations

import re
from typing import Sequence

from stdnum import iso11649
from stdnum.exceptions import ValidationError

from .dto import Account, AccountKind, CreditorReference, NoReference, QRReference, Reference
from .errors import ChecksumMismatch, ReferenceTooLong


REFERENCE_BODY_LENGTH = 26
QR_REFERENCE_LENGTH = 27

# Übergangstabelle des Prüfziffern-Automaten: MOD10_TABLE[carry][digit] -> carry
MOD10_TABLE: Sequence[Sequence[int]] = (
    (0, 9, 4, 6, 8, 2, 7, 1, 3, 5),
    (9, 4, 6, 8, 2, 7, 1, 3, 5, 0),
    (4, 6, 8, 2, 7, 1, 3, 5, 0, 9),
    (6, 8, 2, 7, 1, 3, 5, 0, 9, 4),
    (8, 2, 7, 1, 3, 5, 0, 9, 4, 6),
    (2, 7, 1, 3, 5, 0, 9, 4, 6, 8),
    (7, 1, 3, 5, 0, 9, 4, 6, 8, 2),
    (1, 3, 5, 0, 9, 4, 6, 8, 2, 7),
    (3, 5, 0, 9, 4, 6, 8, 2, 7, 1),
    (5, 0, 9, 4, 6, 8, 2, 7, 1, 3),
)
CHECK_DIGIT_COMPLEMENT: Sequence[int] = (0, 9, 8, 7, 6, 5, 4, 3, 2, 1)

_NON_DIGITS = re.compile(r"[^0-9]")
_DIGITS = re.compile(r"[0-9]+")
_SCOR_PATTERN = re.compile(r"^RF[0-9]{2}[A-Z0-9]{1,21}$")


def _run_automaton(digits: str) -> int:
    carry = 0
    for char in digits:
        carry = MOD10_TABLE[carry][int(char)]
    return carry


def compute_check_digit(digits: str) -> int:
    if not _DIGITS.fullmatch(digits):
        raise ValueError(f"Only digits allowed, got {digits!r}")
    return CHECK_DIGIT_COMPLEMENT[_run_automaton(digits)]


def build_qr_reference(document_id: str) -> str:
    """Erzeugt die 27-stellige QR-Referenz aus einer beliebigen Belegnummer."""

    digits = _NON_DIGITS.sub("", document_id or "")
    if len(digits) > REFERENCE_BODY_LENGTH:
        raise ReferenceTooLong(document_id, len(digits))
    body = digits.rjust(REFERENCE_BODY_LENGTH, "0")
    return f"{body}{compute_check_digit(body)}"


def generate_reference(account: Account, document_id: str) -> Reference:
    """QR-IBAN → ``QRReference``; normale IBAN → ``NoReference``.

    Bei normalen Konten wird keine Prüfziffer berechnet, die Belegnummer
    landet stattdessen in der unstrukturierten Mitteilung (``build_message``).
    """

    if account.kind is not AccountKind.QR_IBAN:
        return NoReference()
    return QRReference(build_qr_reference(document_id))


def verify_qr_reference(value: str) -> None:
    compact = "".join(value.split())
    if len(compact) != QR_REFERENCE_LENGTH or not _DIGITS.fullmatch(compact):
        raise ChecksumMismatch(value, "QR reference must consist of exactly 27 digits")
    if _run_automaton(compact) != 0:
        raise ChecksumMismatch(value)


def is_valid_qr_reference(value: str) -> bool:
    try:
        verify_qr_reference(value)
    except ChecksumMismatch:
        return False
    return True


def verify_creditor_reference(value: str) -> None:
    """Prüft eine ISO-11649-Referenz (``RF`` + 2 Prüfziffern, max. 25 Zeichen)."""

    compact = "".join(value.split()).upper()
    if not _SCOR_PATTERN.match(compact):
        raise ChecksumMismatch(value, "creditor reference must match RFnn + 1-21 alphanumerics")
    try:
        iso11649.validate(compact)
    except ValidationError as exc:
        raise ChecksumMismatch(value, str(exc)) from exc


def verify_reference(reference: Reference) -> None:
    if isinstance(reference, QRReference):
        verify_qr_reference(reference.value)
    elif isinstance(reference, CreditorReference):
        verify_creditor_reference(reference.value)


def build_message(document_id: str, label: str = "Rechnung") -> str:
    document_id = (document_id or "").strip()
    if not document_id:
        return ""
    return f"{label} {document_id}" if label else document_id
