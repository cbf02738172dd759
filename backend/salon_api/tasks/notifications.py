"""Celery tasks for notifications."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlmodel import Session

from salon_api.celery_app import celery_app
from salon_api.db import engine
from salon_api.services.web_push import send_web_push_to_users

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_push_to_users_task(self, user_ids: list[str], payload: dict[str, Any]) -> dict:
    """
    Push one payload to every active subscription of the given users.

    Args:
        user_ids: Recipient user IDs
        payload: JSON payload for the service worker

    Returns:
        dict: Number of recipients and successful deliveries
    """
    try:
        with Session(engine) as session:
            sent = send_web_push_to_users(session, [UUID(user_id) for user_id in user_ids], payload)
    except Exception as exc:
        logger.error(f"Error sending push to {len(user_ids)} user(s): {exc}", exc_info=True)
        raise self.retry(exc=exc)

    logger.info(f"Push fan-out delivered {sent} message(s) to {len(user_ids)} user(s)")
    return {"success": True, "recipients": len(user_ids), "sent": sent}
