"""
Display formatting shared by the PDF and DOCX renderers.
"""
import re
from datetime import datetime
from typing import Optional

CURRENCY_SYMBOL = "£"
DEFAULT_PRIMARY_COLOR = "#1e40af"
PAID_COLOR = "#10b981"
MUTED_COLOR = "#808080"
BAND_COLOR = "#f3f4f6"          # title band, zebra rows, totals panel

TITLES = {
    "quotation": "QUOTATION",
    "invoice":   "INVOICE",
    "challan":   "DELIVERY CHALLAN",
}

# Column sets as (header, width fraction, right-aligned)
PRICED_COLUMNS = (
    ("Item",       0.40, False),
    ("Quantity",   0.15, True),
    ("Unit Price", 0.20, True),
    ("Total",      0.25, True),
)
CHALLAN_COLUMNS = (
    ("Item",     0.50, False),
    ("Quantity", 0.25, True),
    ("Unit",     0.25, False),
)

_HEX_COLOR = re.compile(r"^[0-9a-fA-F]{3}$|^[0-9a-fA-F]{6}$")


def document_title(kind: str) -> str:
    return TITLES[kind]


def table_columns(kind: str) -> tuple:
    return CHALLAN_COLUMNS if kind == "challan" else PRICED_COLUMNS


def format_currency(amount: float) -> str:
    """£ prefix, exactly two decimals, no thousands separator: £1234.50"""
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def format_tax_rate(rate: float) -> str:
    return f"{rate:.2f}%"


def format_quantity(quantity: float) -> str:
    """Whole quantities print as integers (2), fractional ones as-is (2.5)."""
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}"


def format_date(value: datetime) -> str:
    """UK long date, e.g. 05 March 2024."""
    return value.strftime("%d %B %Y")


def normalize_hex_color(value: Optional[str]) -> str:
    """
    Return *value* as a lowercase '#rrggbb' string.

    Accepts '#rgb' / '#rrggbb' with or without the leading '#'.  Anything
    else falls back to DEFAULT_PRIMARY_COLOR.
    """
    if not value:
        return DEFAULT_PRIMARY_COLOR
    clean = value.strip().lstrip("#")
    if not _HEX_COLOR.match(clean):
        return DEFAULT_PRIMARY_COLOR
    if len(clean) == 3:
        clean = "".join(c * 2 for c in clean)
    return f"#{clean.lower()}"


def document_filename(kind: str, document_number: str, extension: str) -> str:
    """Suggested download name: <kind>-<documentNumber>.<ext>, path-safe."""
    safe_number = re.sub(r"[^\w\-.]", "_", document_number).strip("_") or "document"
    return f"{kind}-{safe_number}.{extension}"


_LINE_BREAKS = re.compile(r"[\x0b\x0c]")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0e-\x1f]")


def clean_text(value: Optional[str]) -> str:
    """
    Make free text safe for both output formats.

    Vertical tab and form feed (Word's soft line and page breaks in pasted
    text) become newlines; other C0 control characters, which XML cannot
    carry, are removed.
    """
    if not value:
        return ""
    return _CONTROL_CHARS.sub("", _LINE_BREAKS.sub("\n", value))
