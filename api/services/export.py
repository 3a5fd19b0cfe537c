"""
Gateway-side helpers for document export requests.
"""
from typing import Optional

from models import Business, RenderOptions

# URL collection name -> record kind
COLLECTIONS = {
    "quotations":        "quotation",
    "invoices":          "invoice",
    "delivery-challans": "challan",
}


def parse_flag(value: Optional[str]) -> bool:
    """Query-string boolean: true unless the literal string 'false'."""
    return value != "false"


def build_render_options(
    business: Business,
    include_header: bool = True,
    include_footer: bool = True,
    default_color: Optional[str] = None,
) -> RenderOptions:
    """
    Translate the caller's business profile into per-call render options.

    The business address is the profile's address, city and postcode joined
    with commas; blank parts are skipped.
    """
    return RenderOptions(
        include_header=include_header,
        include_footer=include_footer,
        business_name=business.business_name or None,
        business_address=business.full_address,
        business_email=business.email or None,
        business_phone=business.phone or None,
        footer_text=business.footer_text or None,
        primary_color=business.primary_color or default_color,
    )


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'
