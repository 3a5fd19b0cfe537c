"""
Numeric normalization for document rendering.

Persisted records carry money and tax-rate fields as decimal text while
in-transit payloads carry numbers.  Everything that ends up on a rendered
document goes through this module so that the PDF and DOCX renderers (and
any other display) agree on a single definition of "the true total".

  to_number               decimal text / number / None  ->  float, never raises
  resolve_line_total      stored line total, or quantity * unit price
  resolve_document_totals subtotal, tax and grand total re-derived from lines
"""
import math
import re
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

DEFAULT_TAX_RATE = 20.0     # UK standard VAT, used when no rate is stored

# Leading numeric prefix, the way parseFloat reads "12.50", " 3 ", "7kg"
_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


class ResolvedTotals(NamedTuple):
    subtotal: float
    tax_rate: float         # percent
    tax_amount: float
    total: float


def to_number(value) -> float:
    """
    Coerce *value* to a finite float.

    Numbers pass through, strings are read up to the first non-numeric
    character, and anything absent or unparseable becomes 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return 0.0
        number = float(match.group(0))
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_optional_number(value) -> Optional[float]:
    """Like to_number, but absent or unparseable input stays None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not _LEADING_NUMBER.match(value):
        return None
    return to_number(value)


def resolve_line_total(item) -> float:
    """
    Return the line total for *item*.

    A stored non-zero total wins.  Otherwise the total is re-derived from
    quantity and unit price when both are present and non-negative, and is
    0.0 when it cannot be derived.
    """
    stored = to_number(item.total)
    if stored:
        return stored
    if item.unit_price is None or item.quantity is None:
        return 0.0
    quantity = to_number(item.quantity)
    unit_price = to_number(item.unit_price)
    if quantity < 0 or unit_price < 0:
        return 0.0
    return quantity * unit_price


def resolve_tax_rate(stored_tax_rate) -> float:
    """Stored rate as a percentage, or DEFAULT_TAX_RATE when none is stored."""
    rate = to_optional_number(stored_tax_rate)
    return DEFAULT_TAX_RATE if rate is None else rate


def resolve_document_totals(
    items: Iterable,
    stored_subtotal=None,
    stored_tax_rate: Optional[float] = None,
) -> ResolvedTotals:
    """
    Re-derive subtotal, tax and total for a quotation or invoice.

    The subtotal is the sum of resolved line totals when that sum is
    positive, falling back to *stored_subtotal* otherwise.  Tax and total
    are always computed from the resolved subtotal, never read from storage.
    """
    line_sum = sum(resolve_line_total(item) for item in items)
    subtotal = line_sum if line_sum > 0 else to_number(stored_subtotal)
    tax_rate = resolve_tax_rate(stored_tax_rate)
    tax_amount = subtotal * tax_rate / 100
    return ResolvedTotals(
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )
