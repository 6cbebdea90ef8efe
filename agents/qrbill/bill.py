"""Verkettet Klassifizierung, Referenz, Totals und Payload für einen Beleg."""

from __future__ import annotations

from typing import Optional

from .account import classify_account
from .dto import Address, QRBill, QRBillConfig, TotalsResult
from .payload import assemble_payload
from .reference import build_message, generate_reference


def build_qr_bill(
    *,
    config: QRBillConfig,
    creditor_account: str,
    creditor: Address,
    debtor: Optional[Address],
    document_id: str,
    totals: Optional[TotalsResult],
    message: Optional[str] = None,
    billing_information: str = "",
) -> QRBill:
    account = classify_account(creditor_account)
    reference = generate_reference(account, document_id)
    return QRBill(
        account=account,
        creditor=creditor,
        amount=totals.payable_amount if totals is not None else None,
        currency=config.currency,
        debtor=debtor,
        reference=reference,
        message=build_message(document_id) if message is None else message,
        billing_information=billing_information,
    )


def render_payload(**kwargs) -> str:
    """Kurzform: ``assemble_payload(build_qr_bill(...))``."""

    return assemble_payload(build_qr_bill(**kwargs))
