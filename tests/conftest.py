"""
Pytest configuration and shared fixtures for the back-office document test suite.
"""
import io
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
os.chdir(PROJECT_ROOT)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    tmp_path = tempfile.mkdtemp(prefix="backoffice_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> "Config":
    """Provide a test configuration with isolated directories."""
    from config import Config

    config = Config()
    config.output_dir = temp_dir / "output"
    config.output_dir.mkdir(parents=True, exist_ok=True)
    config.db_path = temp_dir / "output" / "backoffice.db"
    return config


@pytest.fixture
def test_db(test_config) -> "Database":
    """Provide a test database instance."""
    from docgen.database import Database
    return Database(test_config.db_path)


@pytest.fixture
def quotation_payload() -> dict:
    """
    A quotation as the repository stores it: money as decimal text, one
    stale zero line total, and a stale stored subtotal.
    """
    return {
        "document_number": "QUO-2024-001",
        "customer_name": "Hartley & Sons Joinery",
        "customer_address": "14 Mill Lane, Leeds, LS1 4AB",
        "customer_email": "accounts@hartleyjoinery.co.uk",
        "items": [
            {"name": "Oak worktop", "quantity": 2, "unit_price": "10.00", "total": "20.00"},
            {"name": "Fitting kit", "quantity": "1", "unit_price": "5.50", "total": "0"},
        ],
        "subtotal": "0.00",
        "tax_rate": "20.00",
        "tax_amount": "0.00",
        "total": "0.00",
        "notes": "Valid for 30 days.",
        "status": "sent",
        "created_at": "2024-03-05T10:30:00Z",
    }


@pytest.fixture
def invoice_payload() -> dict:
    """A paid invoice with numeric (not text) money fields."""
    return {
        "document_number": "INV-2024-042",
        "customer_name": "Northwind Cafe Ltd",
        "customer_address": "2 Station Road, York, YO1 6HT",
        "customer_email": "owner@northwindcafe.co.uk",
        "items": [
            {"name": "Espresso machine service", "quantity": 1, "unit_price": 120.0, "total": 120.0},
            {"name": "Descaling tablets", "quantity": 3, "unit_price": 4.0, "total": 0},
        ],
        "subtotal": 132.0,
        "tax_rate": 20,
        "tax_amount": 26.4,
        "total": 158.4,
        "status": "paid",
        "created_at": "2024-11-21T09:00:00Z",
    }


@pytest.fixture
def challan_payload() -> dict:
    """A delivery challan: quantities and units only."""
    return {
        "document_number": "DC-0007",
        "customer_name": "Greenfield Builders",
        "customer_address": "Unit 5, Riverside Estate, Hull",
        "delivery_address": "Plot 12, Meadow View, Beverley",
        "items": [
            {"name": "Cement bags", "quantity": 40, "unit": "bags"},
            {"name": "Copper pipe", "quantity": 12.5, "unit": "m"},
            {"name": None, "quantity": 0},
        ],
        "notes": "Deliver via rear gate.",
        "status": "in_transit",
        "created_at": "2025-01-09T14:00:00Z",
    }


@pytest.fixture
def quotation(quotation_payload):
    from models import Quotation
    return Quotation.model_validate(quotation_payload)


@pytest.fixture
def invoice(invoice_payload):
    from models import Invoice
    return Invoice.model_validate(invoice_payload)


@pytest.fixture
def challan(challan_payload):
    from models import DeliveryChallan
    return DeliveryChallan.model_validate(challan_payload)


@pytest.fixture
def branded_options():
    from models import RenderOptions
    return RenderOptions(
        business_name="Brightside Supplies Ltd",
        business_address="8 Canal Street, Manchester, M1 3HE",
        business_email="hello@brightside.co.uk",
        business_phone="0161 555 0199",
        footer_text="Registered in England No. 01234567",
    )


@pytest.fixture
def pdf_text():
    """Return a callable extracting text from PDF bytes, one string per page."""
    import pdfplumber

    def extract(data: bytes) -> list[str]:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            # Characters in drawing order, which also keeps rotated text contiguous
            return ["".join(ch["text"] for ch in page.chars) for page in pdf.pages]

    return extract


@pytest.fixture
def docx_text():
    """Return a callable extracting body, table and footer text from .docx bytes."""
    from docx import Document

    def extract(data: bytes) -> str:
        doc = Document(io.BytesIO(data))
        lines = [p.text for p in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                lines.append(" | ".join(cell.text for cell in row.cells))
        for section in doc.sections:
            if not section.footer.is_linked_to_previous:
                lines.extend(p.text for p in section.footer.paragraphs)
        return "\n".join(lines)

    return extract


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API tests")
