"""Subdomain-based tenant resolution."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request

LOOPBACK_HOSTS = ("localhost", "127.0.0.1")
IGNORED_SUBDOMAINS = ("www",)


def resolve_tenant(host: Optional[str], query_subdomain: Optional[str] = None) -> Optional[str]:
    """Derive the tenant identifier from a host header.

    ``spa1.cxrsystems.com`` resolves to ``spa1``. Loopback hosts take the
    tenant from the ``subdomain`` query parameter so local development can
    pick one. Bare domains and ``www`` have no tenant. Only the first label
    is ever considered, so ``a.b.cxrsystems.com`` resolves to ``a``.
    """
    if not host:
        return None

    hostname = host.split(":")[0]

    if hostname in LOOPBACK_HOSTS:
        return query_subdomain or None

    labels = hostname.split(".")
    if len(labels) > 2:
        candidate = labels[0]
        if candidate not in IGNORED_SUBDOMAINS:
            return candidate.lower()

    return None


def tenant_from_request(request: Request) -> Optional[str]:
    """Resolve the tenant of an incoming request."""
    return resolve_tenant(
        request.headers.get("host"),
        request.query_params.get("subdomain"),
    )


def get_tenant(request: Request) -> Optional[str]:
    """Dependency returning the tenant resolved for this request (or None)."""
    if hasattr(request.state, "tenant"):
        return request.state.tenant
    return tenant_from_request(request)


TenantDep = Annotated[Optional[str], Depends(get_tenant)]
