"""Fehlerhierarchie für QR-Rechnung (Konto, Referenz, Payload, Totals)."""

from __future__ import annotations


class QRBillError(ValueError):
    pass


class InvalidAccountFormat(QRBillError):
    def __init__(self, account: str, reason: str) -> None:
        super().__init__(f"Invalid account '{account}': {reason}")
        self.account = account
        self.reason = reason


class ReferenceTooLong(QRBillError):
    def __init__(self, document_id: str, digit_count: int) -> None:
        super().__init__(
            f"Document id '{document_id}' yields {digit_count} digits, at most 26 allowed"
        )
        self.document_id = document_id
        self.digit_count = digit_count


class ReferenceMismatch(QRBillError):
    """Kontoart und Referenzart passen nicht zusammen (QR-IBAN ⇔ QRR)."""


class ChecksumMismatch(QRBillError):
    def __init__(self, reference: str, reason: str = "check digit does not verify") -> None:
        super().__init__(f"Reference '{reference}': {reason}")
        self.reference = reference


class UnsupportedCharacter(QRBillError):
    def __init__(self, field: str, char: str) -> None:
        super().__init__(f"Field '{field}' contains unsupported character {char!r} (U+{ord(char):04X})")
        self.field = field
        self.char = char


class IncompleteAddress(QRBillError):
    def __init__(self, role: str, field: str) -> None:
        super().__init__(f"{role} address: '{field}' is required")
        self.role = role
        self.field = field


class FieldTooLong(QRBillError):
    def __init__(self, field: str, limit: int) -> None:
        super().__init__(f"Field '{field}' exceeds {limit} characters")
        self.field = field
        self.limit = limit


class DiscountOutOfRange(QRBillError):
    pass


class AmountOutOfRange(QRBillError):
    pass


class UnsupportedCurrency(QRBillError):
    def __init__(self, currency: str) -> None:
        super().__init__(f"Currency '{currency}' not supported (CHF or EUR)")
        self.currency = currency


class InvalidPayload(QRBillError):
    pass
