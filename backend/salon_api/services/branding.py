from __future__ import annotations

import re
from typing import Any, Optional

from sqlmodel import Session, select

from salon_api.core.config import settings
from salon_api.models import Location
from salon_api.models.location import DEFAULT_THEME_COLOR
from salon_api.schemas.branding import BrandingRead

SUBDOMAIN_RE = re.compile(r"^[a-z0-9][a-z0-9-]{1,18}[a-z0-9]$")
RESERVED_SUBDOMAINS = (
    "www", "api", "admin", "app", "mail", "ftp", "localhost", "staging", "dev", "test",
    # fixed branding routes
    "current", "manifest",
)

DEFAULT_ICON_192 = "/favicon_io/android-chrome-192x192.png"
DEFAULT_ICON_512 = "/favicon_io/android-chrome-512x512.png"


class SubdomainError(ValueError):
    """Subdomain rejected by format, reservation or uniqueness checks."""


def location_by_subdomain(session: Session, subdomain: str) -> Optional[Location]:
    statement = select(Location).where(
        Location.subdomain == subdomain.lower(),
        Location.is_active == True,  # noqa: E712
    )
    return session.exec(statement).first()


def location_by_location_id(session: Session, location_id: str) -> Optional[Location]:
    statement = select(Location).where(
        Location.location_id == location_id,
        Location.is_active == True,  # noqa: E712
    )
    return session.exec(statement).first()


def branding_payload(location: Location) -> dict[str, Any]:
    return BrandingRead(
        subdomain=location.subdomain,
        location_id=location.location_id,
        name=location.name,
        logo=location.logo,
        favicon=location.favicon or location.logo,
        theme_color=location.theme_color or DEFAULT_THEME_COLOR,
        address=location.address,
        membership=location.membership,
    ).to_json()


def build_manifest(location: Location) -> dict[str, Any]:
    """PWA manifest branded for a location."""
    small_icon = location.favicon or location.logo or DEFAULT_ICON_192
    large_icon = location.logo or DEFAULT_ICON_512
    return {
        "name": f"{location.name} - RadiantAI",
        "short_name": location.name,
        "description": f"Beauty and wellness management for {location.name}",
        "start_url": "/",
        "scope": "/",
        "display": "standalone",
        "orientation": "portrait-primary",
        "theme_color": location.theme_color or DEFAULT_THEME_COLOR,
        "background_color": "#ffffff",
        "icons": [
            {"src": small_icon, "sizes": "192x192", "type": "image/png", "purpose": "any maskable"},
            {"src": large_icon, "sizes": "512x512", "type": "image/png", "purpose": "any maskable"},
        ],
        "screenshots": [
            {"src": large_icon, "sizes": "512x512", "type": "image/png", "form_factor": "wide"},
            {"src": small_icon, "sizes": "192x192", "type": "image/png", "form_factor": "narrow"},
        ],
    }


def validate_subdomain(session: Session, subdomain: str | None, location_id: str | None = None) -> dict[str, str]:
    """Check a requested subdomain and return it cleaned with its preview URL.

    Raises SubdomainError with a user-facing message when it cannot be used.
    """
    if not subdomain:
        raise SubdomainError("Subdomain is required")

    clean = subdomain.lower().strip()
    if not SUBDOMAIN_RE.match(clean):
        raise SubdomainError(
            "Invalid subdomain format. Must be 3-20 characters, lowercase alphanumeric "
            "with hyphens, cannot start/end with hyphen."
        )

    if clean in RESERVED_SUBDOMAINS:
        raise SubdomainError("This subdomain is reserved and cannot be used.")

    statement = select(Location).where(Location.subdomain == clean)
    if location_id:
        statement = statement.where(Location.location_id != location_id)
    if session.exec(statement).first():
        raise SubdomainError("This subdomain is already taken. Please choose another.")

    return {"subdomain": clean, "previewUrl": f"https://{clean}.{settings.ROOT_DOMAIN}"}
