"""Queueing Celery tasks without failing the request."""

from __future__ import annotations

import logging
from typing import Any, Optional

from kombu.exceptions import OperationalError

logger = logging.getLogger(__name__)


def safe_celery_delay(task, *args, **kwargs) -> Optional[Any]:
    """
    Queue a Celery task, or log and return None when the broker is unreachable.

    Push fan-out is best effort, so a local setup without Redis keeps serving
    requests without background delivery.
    """
    try:
        result = task.delay(*args, **kwargs)
    except OperationalError as e:
        logger.warning(f"Failed to queue Celery task {task.name}: {e}. Continuing without background delivery.")
        return None

    logger.debug(f"Celery task {task.name} queued with ID: {result.id}")
    return result
