"""
Unit tests for numeric normalization and total derivation.
"""
import pytest

from docgen.totals import (
    DEFAULT_TAX_RATE,
    resolve_document_totals,
    resolve_line_total,
    resolve_tax_rate,
    to_number,
    to_optional_number,
)
from models import LineItem


@pytest.mark.unit
class TestToNumber:
    """Tests for to_number."""

    @pytest.mark.parametrize("value,expected", [
        (12, 12.0),
        (3.25, 3.25),
        ("10.00", 10.0),
        (" 7.5 ", 7.5),
        ("-2", -2.0),
        ("12kg", 12.0),
        (".5", 0.5),
        ("1e2", 100.0),
    ])
    def test_parses_numbers_and_decimal_text(self, value, expected):
        """Test that numbers and numeric text prefixes are read."""
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "£10", [], {}, True, float("nan"), float("inf")])
    def test_unparseable_becomes_zero(self, value):
        """Test that absent or unparseable values become 0.0 without raising."""
        assert to_number(value) == 0.0


@pytest.mark.unit
class TestToOptionalNumber:
    """Tests for to_optional_number."""

    def test_absent_stays_none(self):
        assert to_optional_number(None) is None

    def test_unparseable_text_stays_none(self):
        assert to_optional_number("n/a") is None

    def test_zero_is_kept(self):
        """Test that an explicit zero is distinguishable from absent."""
        assert to_optional_number("0") == 0.0
        assert to_optional_number(0) == 0.0


@pytest.mark.unit
class TestResolveLineTotal:
    """Tests for resolve_line_total."""

    def test_stored_non_zero_total_wins(self):
        """Test that a stored non-zero total is used even if inconsistent."""
        item = LineItem(name="A", quantity=2, unit_price=10, total=99)
        assert resolve_line_total(item) == 99.0

    def test_zero_total_is_recomputed(self):
        """Test fallback to quantity times unit price when the stored total is zero."""
        item = LineItem(name="A", quantity=3, unit_price="4.00", total="0")
        assert resolve_line_total(item) == pytest.approx(12.0)

    def test_missing_total_is_recomputed(self):
        item = LineItem(name="A", quantity=1, unit_price=5.5)
        assert resolve_line_total(item) == pytest.approx(5.5)

    def test_missing_unit_price_gives_zero(self):
        item = LineItem(name="A", quantity=3)
        assert resolve_line_total(item) == 0.0

    def test_negative_inputs_give_zero(self):
        """Test that a negative quantity or price cannot be used for derivation."""
        assert resolve_line_total(LineItem(name="A", quantity=-1, unit_price=5)) == 0.0
        assert resolve_line_total(LineItem(name="A", quantity=1, unit_price=-5)) == 0.0


@pytest.mark.unit
class TestResolveTaxRate:
    """Tests for resolve_tax_rate."""

    def test_stored_rate_is_used(self):
        assert resolve_tax_rate("17.5") == 17.5

    def test_missing_rate_defaults(self):
        assert resolve_tax_rate(None) == DEFAULT_TAX_RATE

    def test_unparseable_rate_defaults(self):
        assert resolve_tax_rate("standard") == DEFAULT_TAX_RATE

    def test_explicit_zero_rate_is_honoured(self):
        """Test that a zero-rated document stays zero-rated."""
        assert resolve_tax_rate(0) == 0.0


@pytest.mark.unit
class TestResolveDocumentTotals:
    """Tests for resolve_document_totals."""

    def test_derived_totals_from_lines(self):
        """Test subtotal, tax and total derived from a mix of stored and zero line totals."""
        items = [
            LineItem(name="A", quantity=2, unit_price="10.00", total="20.00"),
            LineItem(name="B", quantity=1, unit_price="5.50", total="0"),
        ]
        totals = resolve_document_totals(items, stored_subtotal="0", stored_tax_rate="20")

        assert totals.subtotal == pytest.approx(25.50)
        assert totals.tax_rate == 20.0
        assert totals.tax_amount == pytest.approx(5.10)
        assert totals.total == pytest.approx(30.60)

    def test_falls_back_to_stored_subtotal(self):
        """Test that the stored subtotal is used when no line contributes."""
        totals = resolve_document_totals([LineItem(name="A", quantity=1)], stored_subtotal="50.00",
                                         stored_tax_rate=10)

        assert totals.subtotal == 50.0
        assert totals.tax_amount == pytest.approx(5.0)
        assert totals.total == pytest.approx(55.0)

    def test_no_items_and_no_subtotal(self):
        totals = resolve_document_totals([], None, None)

        assert totals.subtotal == 0.0
        assert totals.tax_rate == DEFAULT_TAX_RATE
        assert totals.total == 0.0

    def test_zero_rated(self):
        items = [LineItem(name="A", quantity=4, unit_price=2.5)]
        totals = resolve_document_totals(items, stored_tax_rate="0")

        assert totals.tax_amount == 0.0
        assert totals.total == pytest.approx(10.0)

    def test_total_is_subtotal_plus_tax(self):
        items = [LineItem(name="A", quantity=3, unit_price=3.33), LineItem(name="B", quantity=7, unit_price=1.1)]
        totals = resolve_document_totals(items, stored_tax_rate=17.5)

        assert totals.total == pytest.approx(totals.subtotal + totals.tax_amount)
        assert totals.tax_amount == pytest.approx(totals.subtotal * 0.175)
