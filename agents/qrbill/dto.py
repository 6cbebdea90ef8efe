"""Datentransferobjekte für QR-Rechnung und Totals.

Alle Strukturen sind unveränderlich (``frozen``) und nutzen ``Decimal``, damit
identische Eingaben identische Beträge liefern. Gerundet wird ausschliesslich
explizit über ``quantize_money`` bzw. ``swiss_round`` (Totals-Engine).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import DiscountOutOfRange


DecimalLike = Decimal | str | int | float

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: DecimalLike) -> Decimal:
    """Konvertiere Eingaben deterministisch in ``Decimal``.

    Floats werden zunächst in Strings umgewandelt, um binäre Rundungsfehler zu
    vermeiden.
    """

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError(f"Unsupported decimal input: {type(value)!r}")
    if isinstance(value, (int, str)):
        return Decimal(str(value))
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"Unsupported decimal input: {type(value)!r}")


def quantize_money(amount: DecimalLike) -> Decimal:
    """Rundet Beträge auf zwei Nachkommastellen (ROUND_HALF_UP)."""

    return to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class Address:
    name: str
    postal_code: str
    city: str
    country_code: str
    street: str = ""
    house_number: str = ""


class AccountKind(str, Enum):
    QR_IBAN = "qr_iban"
    ORDINARY = "ordinary"


@dataclass(frozen=True, slots=True)
class Account:
    iban: str
    kind: AccountKind

    @property
    def institution_id(self) -> str:
        return self.iban[4:9]

    @property
    def is_reference_capable(self) -> bool:
        return self.kind is AccountKind.QR_IBAN


@dataclass(frozen=True, slots=True)
class NoReference:
    type_code = "NON"

    @property
    def value(self) -> str:
        return ""


@dataclass(frozen=True, slots=True)
class QRReference:
    value: str
    type_code = "QRR"


@dataclass(frozen=True, slots=True)
class CreditorReference:
    value: str
    type_code = "SCOR"


Reference = Union[NoReference, QRReference, CreditorReference]


@dataclass(frozen=True, slots=True)
class PercentDiscount:
    percent: Decimal

    def __post_init__(self) -> None:
        percent = to_decimal(self.percent)
        if percent < ZERO or percent > HUNDRED:
            raise DiscountOutOfRange(f"Percent discount must be within 0-100, got {percent}")
        object.__setattr__(self, "percent", percent)


@dataclass(frozen=True, slots=True)
class FixedDiscount:
    amount: Decimal

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount)
        if amount < ZERO:
            raise DiscountOutOfRange(f"Fixed discount must not be negative, got {amount}")
        object.__setattr__(self, "amount", amount)


DiscountSpec = Union[PercentDiscount, FixedDiscount]


@dataclass(frozen=True, slots=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None

    def __post_init__(self) -> None:
        quantity = to_decimal(self.quantity)
        unit_price = to_decimal(self.unit_price)
        if quantity < ZERO:
            raise ValueError("quantity must not be negative")
        if unit_price < ZERO:
            raise ValueError("unit_price must not be negative")
        object.__setattr__(self, "quantity", quantity)
        object.__setattr__(self, "unit_price", unit_price)

        if self.discount_percent is not None:
            discount = to_decimal(self.discount_percent)
            if discount < ZERO or discount > HUNDRED:
                raise DiscountOutOfRange(
                    f"Line discount must be within 0-100, got {discount}"
                )
            object.__setattr__(self, "discount_percent", discount)

        if self.tax_rate is not None:
            rate = to_decimal(self.tax_rate)
            if rate < ZERO or rate > HUNDRED:
                raise ValueError(f"tax_rate must be within 0-100, got {rate}")
            object.__setattr__(self, "tax_rate", rate)


@dataclass(frozen=True, slots=True)
class QRBillConfig:
    """Mandantenkonfiguration; wird explizit übergeben, nie global gelesen."""

    tax_enabled: bool
    default_tax_rate: Decimal
    currency: str
    home_country: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_tax_rate", to_decimal(self.default_tax_rate))


@dataclass(frozen=True, slots=True)
class TotalsResult:
    subtotal: Decimal
    discount_amount: Decimal
    net_after_discount: Decimal
    tax_amount: Decimal
    grand_total: Decimal
    payable_amount: Decimal
    line_nets: Tuple[Decimal, ...] = field(default_factory=tuple)
    line_taxes: Tuple[Decimal, ...] = field(default_factory=tuple)

    def quantized(self) -> "TotalsResult":
        """Zwei-Nachkommastellen-Sicht für Persistenz und Ausdruck."""

        return TotalsResult(
            subtotal=quantize_money(self.subtotal),
            discount_amount=quantize_money(self.discount_amount),
            net_after_discount=quantize_money(self.net_after_discount),
            tax_amount=quantize_money(self.tax_amount),
            grand_total=quantize_money(self.grand_total),
            payable_amount=quantize_money(self.payable_amount),
            line_nets=tuple(quantize_money(value) for value in self.line_nets),
            line_taxes=tuple(quantize_money(value) for value in self.line_taxes),
        )


@dataclass(frozen=True, slots=True)
class QRBill:
    account: Account
    creditor: Address
    currency: str
    amount: Optional[Decimal] = None
    debtor: Optional[Address] = None
    reference: Reference = field(default_factory=NoReference)
    message: str = ""
    billing_information: str = ""
    ultimate_creditor: Optional[Address] = None

    def __post_init__(self) -> None:
        if self.amount is not None:
            object.__setattr__(self, "amount", to_decimal(self.amount))
