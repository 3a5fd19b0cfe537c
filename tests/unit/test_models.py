"""
Unit tests for record and branding models.
"""
from typing import get_args

import pytest
from pydantic import ValidationError

from models import (
    Business,
    DeliveryChallan,
    DocumentKind,
    Invoice,
    LineItem,
    OutputFormat,
    Quotation,
    RenderOptions,
    load_record,
)


@pytest.mark.unit
class TestRecords:
    """Tests for record validation."""

    def test_decimal_text_is_normalised(self, quotation):
        """Test that stored decimal text becomes floats on load."""
        assert quotation.items[0].unit_price == 10.0
        assert quotation.items[1].total == 0.0
        assert quotation.items[1].quantity == 1.0
        assert quotation.tax_rate == 20.0
        assert quotation.subtotal == 0.0

    def test_missing_tax_rate_stays_none(self, quotation_payload):
        del quotation_payload["tax_rate"]
        assert Quotation.model_validate(quotation_payload).tax_rate is None

    def test_created_at_parsed(self, quotation):
        assert quotation.created_at.year == 2024
        assert quotation.created_at.month == 3
        assert quotation.created_at.day == 5

    def test_records_are_frozen(self, invoice):
        with pytest.raises(ValidationError):
            invoice.status = "draft"

    def test_invoice_is_paid(self, invoice, invoice_payload):
        assert invoice.is_paid
        invoice_payload["status"] = "sent"
        assert not Invoice.model_validate(invoice_payload).is_paid

    def test_unknown_status_rejected(self, challan_payload):
        challan_payload["status"] = "lost"
        with pytest.raises(ValidationError):
            DeliveryChallan.model_validate(challan_payload)

    def test_document_number_required(self, quotation_payload):
        del quotation_payload["document_number"]
        with pytest.raises(ValidationError):
            Quotation.model_validate(quotation_payload)

    def test_line_item_defaults(self):
        item = LineItem()
        assert item.name is None
        assert item.quantity == 0.0
        assert item.unit_price is None


@pytest.mark.unit
class TestLoadRecord:
    """Tests for load_record."""

    def test_loads_each_kind(self, quotation_payload, invoice_payload, challan_payload):
        assert isinstance(load_record("quotation", quotation_payload), Quotation)
        assert isinstance(load_record("invoice", invoice_payload), Invoice)
        assert isinstance(load_record("challan", challan_payload), DeliveryChallan)

    def test_unknown_kind(self, quotation_payload):
        with pytest.raises(ValueError, match="Unknown document kind"):
            load_record("receipt", quotation_payload)


@pytest.mark.unit
class TestBranding:
    """Tests for Business and RenderOptions."""

    def test_default_business_name(self):
        assert Business().business_name == "My Business"

    def test_full_address_skips_blank_parts(self):
        business = Business(address="1 High St", city="  ", postcode="BS1 1AA")
        assert business.full_address == "1 High St, BS1 1AA"

    def test_full_address_none_when_empty(self):
        assert Business().full_address is None

    def test_footer_line_priority(self):
        """Test footer text, then business name, then the stock thank-you line."""
        assert RenderOptions(footer_text="Custom", business_name="Acme").footer_line == "Custom"
        assert RenderOptions(business_name="Acme").footer_line == "Acme"
        assert RenderOptions().footer_line == "Thank you for your business!"

    def test_contact_line(self):
        assert RenderOptions(business_email="a@b.com", business_phone="0123").contact_line == "a@b.com | 0123"
        assert RenderOptions(business_phone="0123").contact_line == "0123"
        assert RenderOptions().contact_line is None

    def test_header_and_footer_default_on(self):
        options = RenderOptions()
        assert options.include_header
        assert options.include_footer


@pytest.mark.unit
class TestSelectors:
    """Tests that the kind and format literals match what dispatch accepts."""

    def test_document_kinds(self):
        from docgen.dispatch import DOCUMENT_KINDS
        assert get_args(DocumentKind) == DOCUMENT_KINDS

    def test_output_formats(self):
        from docgen.dispatch import OUTPUT_FORMATS
        assert get_args(OutputFormat) == OUTPUT_FORMATS
