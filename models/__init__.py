from .document import (
    LineItem, Quotation, Invoice, DeliveryChallan,
    BusinessRecord, DocumentKind, OutputFormat, RECORD_TYPES, load_record,
)
from .business import Business, RenderOptions

__all__ = [
    "LineItem", "Quotation", "Invoice", "DeliveryChallan",
    "BusinessRecord", "DocumentKind", "OutputFormat", "RECORD_TYPES", "load_record",
    "Business", "RenderOptions",
]
