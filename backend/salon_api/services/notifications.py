from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, select

from salon_api.models import Notification, User
from salon_api.services.web_push import build_payload, send_web_push_to_users

logger = logging.getLogger(__name__)

SENDABLE_TYPES = ("individual", "broadcast", "admin", "enterprise")


def create_notification(
    session: Session,
    recipient_id: UUID,
    type: str,
    title: str,
    message: str,
    sender_id: UUID | None = None,
    priority: str = "normal",
    category: str = "general",
    meta: Optional[dict[str, Any]] = None,
) -> Notification:
    """Create a notification for a user."""
    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type,
        title=title,
        message=message,
        priority=priority,
        category=category,
        meta=meta or {},
    )
    session.add(notification)
    return notification


def create_system_notification(
    session: Session,
    recipient_id: UUID,
    title: str,
    message: str,
    priority: str = "normal",
    category: str = "system",
    meta: Optional[dict[str, Any]] = None,
    send_push: bool = True,
) -> Notification:
    """Store a system notification and push it to the recipient's devices."""
    notification = create_notification(
        session,
        recipient_id=recipient_id,
        type="system",
        title=title,
        message=message,
        priority=priority,
        category=category,
        meta=meta,
    )
    session.commit()
    session.refresh(notification)

    if send_push:
        payload = build_payload(
            title,
            message,
            tag="system-notification",
            data={"notificationId": str(notification.id), "category": category},
        )
        send_web_push_to_users(session, [recipient_id], payload)

    logger.info(f"System notification {notification.id} created for user {recipient_id}")
    return notification


def resolve_recipients(session: Session, type: str, user_ids: list[UUID] | None = None) -> list[User]:
    """Users addressed by a management notification of the given type."""
    statement = select(User).where(User.is_deleted == False)  # noqa: E712
    if type == "individual":
        if not user_ids:
            return []
        statement = statement.where(User.id.in_(user_ids))
    elif type in ("admin", "enterprise"):
        statement = statement.where(User.role == type)
    elif type != "broadcast":
        raise ValueError(f"Invalid notification type: {type}")
    return list(session.exec(statement).all())
