"""Swiss QR-Rechnung: Kontoklassifizierung, QR-Referenz, SPC-Payload, Totals."""

from .account import classify_account, format_account, is_qr_iban
from .bill import build_qr_bill, render_payload
from .display import (
    format_amount,
    format_locality_line,
    format_reference,
    format_street_line,
    resolve_country_code,
)
from .dto import (
    Account,
    AccountKind,
    Address,
    CreditorReference,
    DiscountSpec,
    FixedDiscount,
    LineItem,
    NoReference,
    PercentDiscount,
    QRBill,
    QRBillConfig,
    QRReference,
    Reference,
    TotalsResult,
)
from .errors import (
    AmountOutOfRange,
    ChecksumMismatch,
    DiscountOutOfRange,
    FieldTooLong,
    IncompleteAddress,
    InvalidAccountFormat,
    InvalidPayload,
    QRBillError,
    ReferenceMismatch,
    ReferenceTooLong,
    UnsupportedCharacter,
    UnsupportedCurrency,
)
from .payload import assemble_payload, parse_payload, sanitize_text
from .reference import (
    build_message,
    compute_check_digit,
    generate_reference,
    is_valid_qr_reference,
    verify_creditor_reference,
    verify_qr_reference,
)
from .totals import compute_totals, swiss_round

__all__ = [
    "classify_account",
    "format_account",
    "is_qr_iban",
    "build_qr_bill",
    "render_payload",
    "format_amount",
    "format_locality_line",
    "format_reference",
    "format_street_line",
    "resolve_country_code",
    "Account",
    "AccountKind",
    "Address",
    "CreditorReference",
    "DiscountSpec",
    "FixedDiscount",
    "LineItem",
    "NoReference",
    "PercentDiscount",
    "QRBill",
    "QRBillConfig",
    "QRReference",
    "Reference",
    "TotalsResult",
    "AmountOutOfRange",
    "ChecksumMismatch",
    "DiscountOutOfRange",
    "FieldTooLong",
    "IncompleteAddress",
    "InvalidAccountFormat",
    "InvalidPayload",
    "QRBillError",
    "ReferenceMismatch",
    "ReferenceTooLong",
    "UnsupportedCharacter",
    "UnsupportedCurrency",
    "assemble_payload",
    "parse_payload",
    "sanitize_text",
    "build_message",
    "compute_check_digit",
    "generate_reference",
    "is_valid_qr_reference",
    "verify_creditor_reference",
    "verify_qr_reference",
    "compute_totals",
    "swiss_round",
]
