from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docgen.totals import to_number, to_optional_number


DocumentKind = Literal["quotation", "invoice", "challan"]
OutputFormat = Literal["pdf", "word"]

QuotationStatus = Literal["draft", "sent", "accepted", "rejected"]
InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]
ChallanStatus = Literal["pending", "in_transit", "delivered"]


class LineItem(BaseModel):
    """A single line on a quotation, invoice or delivery challan."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    quantity: float = 0.0
    unit: Optional[str] = None          # challans only, e.g. "pcs", "box"
    unit_price: Optional[float] = None  # quotations / invoices only
    total: Optional[float] = None       # quantity * unit_price

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value):
        return to_number(value)

    @field_validator("unit_price", "total", mode="before")
    @classmethod
    def _coerce_money(cls, value):
        return to_optional_number(value)


class _BusinessDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    document_number: str
    customer_name: str
    customer_address: Optional[str] = None
    items: List[LineItem] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: datetime


class _PricedDocument(_BusinessDocument):
    """
    Shared shape of quotations and invoices.

    Stored totals are kept for reference only; rendering always re-derives
    them from the line items (see docgen.totals.resolve_document_totals).
    """
    customer_email: Optional[str] = None
    subtotal: float = 0.0
    tax_rate: Optional[float] = None    # percent, e.g. 20 for 20% VAT
    tax_amount: float = 0.0
    total: float = 0.0

    @field_validator("subtotal", "tax_amount", "total", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return to_number(value)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value):
        return to_optional_number(value)


class Quotation(_PricedDocument):
    status: QuotationStatus = "draft"


class Invoice(_PricedDocument):
    status: InvoiceStatus = "draft"

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"


class DeliveryChallan(_BusinessDocument):
    """Goods-movement note: quantities and units, no prices."""
    delivery_address: Optional[str] = None
    status: ChallanStatus = "pending"


BusinessRecord = Union[Quotation, Invoice, DeliveryChallan]

RECORD_TYPES = {
    "quotation": Quotation,
    "invoice": Invoice,
    "challan": DeliveryChallan,
}


def load_record(kind: str, data: dict) -> BusinessRecord:
    """Validate a stored payload into the record type for *kind*."""
    try:
        model = RECORD_TYPES[kind]
    except KeyError:
        raise ValueError(f"Unknown document kind: {kind!r}") from None
    return model.model_validate(data)
