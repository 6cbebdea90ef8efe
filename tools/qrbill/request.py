"""Pydantic-Modelle für QR-Rechnungsaufträge (YAML/JSON) und DTO-Konvertierung."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from agents.qrbill import (
    Address,
    DiscountSpec,
    FixedDiscount,
    LineItem,
    PercentDiscount,
    resolve_country_code,
    sanitize_text,
)


class AddressModel(BaseModel):
    name: str
    street: str = ""
    house_number: str = ""
    postal_code: str
    city: str
    country: Optional[str] = Field(default=None, description="ISO code or country name; empty = home country")

    @field_validator("house_number", "postal_code", mode="before")
    @classmethod
    def _stringify(cls, value):
        # YAML liest Hausnummern und PLZ gerne als int
        return "" if value is None else str(value)

    def to_address(self, home_country: str, *, sanitize: bool = False) -> Address:
        clean = sanitize_text if sanitize else (lambda value: value)
        return Address(
            name=clean(self.name),
            street=clean(self.street),
            house_number=clean(self.house_number),
            postal_code=clean(self.postal_code),
            city=clean(self.city),
            country_code=resolve_country_code(self.country, home_country),
        )


class LineItemModel(BaseModel):
    description: str = ""
    quantity: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)

    def to_line_item(self) -> LineItem:
        return LineItem(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount_percent=self.discount_percent,
            tax_rate=self.tax_rate,
        )


class DiscountModel(BaseModel):
    type: Literal["percent", "fixed"] = "percent"
    value: Decimal = Field(default=Decimal("0"), ge=0)

    def to_spec(self) -> Optional[DiscountSpec]:
        if self.value == 0:
            return None
        if self.type == "percent":
            return PercentDiscount(self.value)
        return FixedDiscount(self.value)


class BillRequest(BaseModel):
    document_id: str
    creditor_account: str
    creditor: AddressModel
    debtor: Optional[AddressModel] = None
    items: List[LineItemModel] = Field(default_factory=list)
    discount: Optional[DiscountModel] = None
    message: Optional[str] = None
    billing_information: str = ""

    @field_validator("document_id", "creditor_account", mode="before")
    @classmethod
    def _strip(cls, value):
        return str(value).strip()

    def line_items(self) -> List[LineItem]:
        return [item.to_line_item() for item in self.items]

    def discount_spec(self) -> Optional[DiscountSpec]:
        return self.discount.to_spec() if self.discount else None


def load_request(path: Path) -> BillRequest:
    """Lädt einen Auftrag aus ``.yaml``/``.yml`` oder ``.json``."""

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: request document must be a mapping")
    return BillRequest.model_validate(raw)
