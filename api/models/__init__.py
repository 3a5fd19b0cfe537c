"""
Pydantic models for gateway API requests.
"""
from pydantic import BaseModel
from typing import Optional


class BusinessUpdate(BaseModel):
    business_name: str
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    footer_text: Optional[str] = None
    primary_color: Optional[str] = None


class DocumentCreated(BaseModel):
    id: str
    kind: str
    document_number: str
