from pydantic import BaseModel
from typing import Optional


class Business(BaseModel):
    """
    The caller's business profile, as edited on the settings page.
    Supplies the branding text that goes into document headers and footers.
    """
    business_name: str = "My Business"
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    footer_text: Optional[str] = None
    primary_color: Optional[str] = None     # hex, e.g. "#1e40af"

    @property
    def full_address(self) -> Optional[str]:
        """Address, city and postcode joined with commas; None when all blank."""
        parts = [p.strip() for p in (self.address, self.city, self.postcode) if p and p.strip()]
        return ", ".join(parts) or None


class RenderOptions(BaseModel):
    """Per-call rendering configuration. Never persisted."""
    include_header: bool = True
    include_footer: bool = True
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    business_email: Optional[str] = None
    business_phone: Optional[str] = None
    footer_text: Optional[str] = None
    primary_color: Optional[str] = None

    @property
    def footer_line(self) -> str:
        return self.footer_text or self.business_name or "Thank you for your business!"

    @property
    def contact_line(self) -> Optional[str]:
        parts = [p for p in (self.business_email, self.business_phone) if p]
        return " | ".join(parts) or None
