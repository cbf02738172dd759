"""Rate limiting configuration."""

from __future__ import annotations

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from salon_api.core.config import settings

logger = logging.getLogger(__name__)

# Redis storage lets several API instances share counters; memory:// is per process
storage_uri = settings.RATE_LIMIT_STORAGE_URI or "memory://"

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=storage_uri,
    default_limits=["1000/hour"],
)
logger.debug(f"Rate limiter configured with storage: {storage_uri}")
