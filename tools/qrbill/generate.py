"""QR-Rechnung CLI: Auftrag (YAML/JSON) → Totals + SPC-Payload."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from agents.qrbill import (
    QRBillConfig,
    QRBillError,
    assemble_payload,
    build_message,
    build_qr_bill,
    compute_totals,
    format_account,
    format_amount,
    format_reference,
    sanitize_text,
)
from backend.core.config import Settings, settings as default_settings
from backend.core.observability import init_observability
from backend.core.observability.logging import get_logger
from tools.qrbill.request import BillRequest, load_request


logger = get_logger("tools.qrbill.generate")


def render_request(
    request: BillRequest,
    config: QRBillConfig,
    *,
    sanitize: bool = False,
    message_label: str = "Rechnung",
) -> dict:
    totals = compute_totals(request.line_items(), request.discount_spec(), config)

    message = request.message
    if message is None:
        message = build_message(request.document_id, message_label)
    billing_information = request.billing_information
    if sanitize:
        message = sanitize_text(message)
        billing_information = sanitize_text(billing_information)

    bill = build_qr_bill(
        config=config,
        creditor_account=request.creditor_account,
        creditor=request.creditor.to_address(config.home_country, sanitize=sanitize),
        debtor=request.debtor.to_address(config.home_country, sanitize=sanitize) if request.debtor else None,
        document_id=request.document_id,
        totals=totals,
        message=message,
        billing_information=billing_information,
    )
    payload = assemble_payload(bill)
    rounded = totals.quantized()

    return {
        "document_id": request.document_id,
        "account": format_account(bill.account.iban),
        "account_kind": bill.account.kind.value,
        "reference_type": bill.reference.type_code,
        "reference": format_reference(bill.reference),
        "currency": bill.currency,
        "amount": format_amount(totals.payable_amount),
        "totals": {
            "subtotal": str(rounded.subtotal),
            "discount_amount": str(rounded.discount_amount),
            "net_after_discount": str(rounded.net_after_discount),
            "tax_amount": str(rounded.tax_amount),
            "grand_total": str(rounded.grand_total),
            "payable_amount": str(rounded.payable_amount),
            "line_nets": [str(value) for value in rounded.line_nets],
            "line_taxes": [str(value) for value in rounded.line_taxes],
        },
        "payload": payload,
    }


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Swiss QR-bill payloads")
    parser.add_argument("--input", type=Path, required=True, help="Auftrag als YAML oder JSON")
    parser.add_argument("--output", type=Path, help="Payload in Datei schreiben statt stdout")
    parser.add_argument(
        "--sanitize",
        action="store_true",
        help="Texte vor der Validierung bereinigen (Steuerzeichen, Nicht-Latin-1)",
    )
    parser.add_argument("--json", action="store_true", help="Ergebnis inkl. Totals als JSON ausgeben")
    parser.add_argument("--verbose", action="store_true", help="Zusätzliche Logs")
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None, *, app_settings: Optional[Settings] = None) -> None:
    args = parse_args(argv)
    app_settings = app_settings or default_settings
    init_observability(level="DEBUG" if args.verbose else app_settings.log_level)
    config = app_settings.to_qrbill_config()

    try:
        request = load_request(args.input)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("request rejected", extra={"input": str(args.input), "error": str(exc)})
        raise SystemExit(f"Invalid request {args.input}: {exc}") from exc

    try:
        result = render_request(
            request,
            config,
            sanitize=args.sanitize,
            message_label=app_settings.QRBILL_MESSAGE_LABEL,
        )
    except QRBillError as exc:
        logger.error(
            "qr-bill rejected",
            extra={"document_id": request.document_id, "error_kind": type(exc).__name__, "error": str(exc)},
        )
        raise SystemExit(f"{type(exc).__name__}: {exc}") from exc

    logger.info(
        "qr-bill generated",
        extra={
            "document_id": result["document_id"],
            "account": result["account"],
            "reference_type": result["reference_type"],
            "amount": result["amount"],
        },
    )

    output = json.dumps(result, indent=2, ensure_ascii=False) if args.json else result["payload"]
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output, encoding="utf-8", newline="")
        logger.debug("payload written", extra={"path": str(args.output)})
    else:
        print(output)


if __name__ == "__main__":  # pragma: no cover
    main()
