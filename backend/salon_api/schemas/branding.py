from __future__ import annotations

from typing import Optional

from pydantic import Field

from salon_api.schemas.base import CamelModel


class BrandingRead(CamelModel):
    subdomain: Optional[str] = None
    location_id: str
    name: str
    logo: Optional[str] = None
    favicon: Optional[str] = None
    theme_color: str
    address: str
    membership: Optional[dict] = None


class SubdomainValidationRequest(CamelModel):
    subdomain: Optional[str] = Field(default=None, max_length=255)
    location_id: Optional[str] = None
