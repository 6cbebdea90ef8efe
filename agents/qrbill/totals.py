"""Totals-Engine: Zwischentotal, Rabatt, MWST, Gesamttotal, 5-Rappen-Rundung.

Die Reihenfolge ist fix und prüfungsrelevant:

1. Positionen: ``brutto = menge × preis``, ``netto = brutto × (1 − rabatt%/100)``
2. Zwischentotal = Σ netto
3. Gesamtrabatt (Prozent oder Fixbetrag), begrenzt auf [0, Zwischentotal]
4. Netto nach Rabatt
5. MWST je Position auf Netto × Rabattfaktor, Summe = MWST-Betrag
6. Gesamttotal = Netto nach Rabatt + MWST
7. Zahlbetrag = Gesamttotal auf 0.05 gerundet (ROUND_HALF_UP)

Es wird mit exakten ``Decimal``-Werten gerechnet; auf zwei Stellen wird erst
über ``TotalsResult.quantized()`` gerundet.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from .dto import (
    HUNDRED,
    ZERO,
    DecimalLike,
    DiscountSpec,
    FixedDiscount,
    LineItem,
    PercentDiscount,
    QRBillConfig,
    TotalsResult,
    to_decimal,
)


ONE = Decimal("1")
ROUNDING_STEPS_PER_UNIT = Decimal("20")


def swiss_round(amount: DecimalLike) -> Decimal:
    """Rundet auf 0.05 (5 Rappen), Hälften werden aufgerundet."""

    value = to_decimal(amount)
    steps = (value * ROUNDING_STEPS_PER_UNIT).quantize(ONE, rounding=ROUND_HALF_UP)
    return (steps / ROUNDING_STEPS_PER_UNIT).quantize(Decimal("0.01"))


def line_gross(item: LineItem) -> Decimal:
    return item.quantity * item.unit_price


def line_net(item: LineItem) -> Decimal:
    gross = line_gross(item)
    if not item.discount_percent:
        return gross
    return gross * (ONE - item.discount_percent / HUNDRED)


def discount_amount(subtotal: Decimal, discount: Optional[DiscountSpec]) -> Decimal:
    if discount is None:
        return ZERO
    if isinstance(discount, PercentDiscount):
        amount = subtotal * discount.percent / HUNDRED
    elif isinstance(discount, FixedDiscount):
        amount = discount.amount
    else:
        raise TypeError(f"Unsupported discount spec: {type(discount)!r}")
    return max(ZERO, min(amount, subtotal))


def compute_totals(
    items: Iterable[LineItem],
    discount: Optional[DiscountSpec],
    config: QRBillConfig,
) -> TotalsResult:
    line_items = list(items)
    nets: List[Decimal] = [line_net(item) for item in line_items]
    subtotal = sum(nets, ZERO)

    discount_value = discount_amount(subtotal, discount)
    net_after_discount = subtotal - discount_value

    if config.tax_enabled:
        factor = ONE if subtotal == ZERO else net_after_discount / subtotal
        taxes = []
        for item, net in zip(line_items, nets):
            rate = item.tax_rate if item.tax_rate is not None else config.default_tax_rate
            taxes.append(net * rate / HUNDRED * factor)
    else:
        taxes = [ZERO for _ in line_items]
    tax_amount = sum(taxes, ZERO)

    grand_total = net_after_discount + tax_amount
    return TotalsResult(
        subtotal=subtotal,
        discount_amount=discount_value,
        net_after_discount=net_after_discount,
        tax_amount=tax_amount,
        grand_total=grand_total,
        payable_amount=swiss_round(grand_total),
        line_nets=tuple(nets),
        line_taxes=tuple(taxes),
    )
