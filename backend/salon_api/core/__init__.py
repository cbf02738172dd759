from .config import settings
from .security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_token,
    verify_password,
)
from .tenancy import TenantDep, resolve_tenant

__all__ = [
    "settings",
    "create_access_token",
    "create_refresh_token",
    "get_password_hash",
    "verify_token",
    "verify_password",
    "TenantDep",
    "resolve_tenant",
]
