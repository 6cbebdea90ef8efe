"""Kontoklassifizierung (IBAN vs. QR-IBAN) und Anzeigeformat."""

from __future__ import annotations

import re

from stdnum import iban as stdnum_iban
from stdnum.exceptions import ValidationError

from .dto import Account, AccountKind
from .errors import InvalidAccountFormat


IBAN_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{1,30}$")

QR_IID_RANGE = range(30000, 32000)


def normalize_account(raw: str) -> str:
    return "".join(raw.split()).upper()


def _validate(iban: str, raw: str) -> None:
    # nur Leerraum als Trenner; stdnum.compact würde auch Bindestriche entfernen
    if not IBAN_PATTERN.match(iban):
        raise InvalidAccountFormat(raw, "does not match IBAN grammar")
    try:
        stdnum_iban.validate(iban)
    except ValidationError as exc:
        raise InvalidAccountFormat(raw, str(exc)) from exc


def classify_account(raw: str) -> Account:
    """Validiert eine IBAN und bestimmt die Kontoart.

    Die Institutskennung (IID) steht an Position 5–9. Liegt sie numerisch im
    Band 30000–31999, handelt es sich um eine QR-IBAN, die zwingend eine
    QR-Referenz verlangt. Alle anderen gültigen Konten sind ``ORDINARY``.
    """

    iban = normalize_account(raw or "")
    _validate(iban, raw)

    iid = iban[4:9]
    kind = AccountKind.ORDINARY
    if len(iid) == 5 and iid.isdigit() and int(iid) in QR_IID_RANGE:
        kind = AccountKind.QR_IBAN
    return Account(iban=iban, kind=kind)


def is_qr_iban(raw: str) -> bool:
    try:
        return classify_account(raw).kind is AccountKind.QR_IBAN
    except InvalidAccountFormat:
        return False


def format_account(iban: str) -> str:
    """Gruppiert in Viererblöcke (nur Anzeige, nie maschinell weiterverwenden)."""

    compact = normalize_account(iban)
    return " ".join(compact[i : i + 4] for i in range(0, len(compact), 4))
