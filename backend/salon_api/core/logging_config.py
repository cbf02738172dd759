"""Logging setup shared by the API process and Celery workers."""

from __future__ import annotations

import logging

from salon_api.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the root logger."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_salon_api", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._salon_api = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # pywebpush logs full request bodies at DEBUG
    logging.getLogger("pywebpush").setLevel(logging.WARNING)
