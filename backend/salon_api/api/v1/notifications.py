from __future__ import annotations

import logging
import math
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlmodel import Session, select

from salon_api.api.deps import AdminUser, CurrentUser
from salon_api.core.celery_utils import safe_celery_delay
from salon_api.core.config import settings
from salon_api.db import SessionDep
from salon_api.models import Notification, PushSubscription
from salon_api.schemas.base import success
from salon_api.schemas.notification import NotificationRead, NotificationSendRequest
from salon_api.schemas.push_subscription import (
    PushSubscribeRequest,
    PushSubscriptionRead,
    PushUnsubscribeRequest,
)
from salon_api.services.notifications import SENDABLE_TYPES, create_notification, resolve_recipients
from salon_api.services.web_push import active_subscriptions, build_payload, device_info, send_push_notification
from salon_api.tasks.notifications import send_push_to_users_task

logger = logging.getLogger(__name__)

router = APIRouter()


def _notification_json(notification: Notification) -> dict:
    return NotificationRead.model_validate(notification).to_json()


@router.get("/vapid-public-key", summary="VAPID public key for PushManager.subscribe()")
def get_vapid_public_key() -> dict:
    return success({"publicKey": settings.VAPID_PUBLIC_KEY})


@router.post("/push/subscribe", summary="Register a browser push subscription")
def subscribe_to_push(
    request: Request,
    payload: PushSubscribeRequest,
    session: SessionDep,
    current_user: CurrentUser,
) -> dict:
    subscription_info = payload.subscription
    if not subscription_info or not subscription_info.endpoint:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid subscription data")

    user_agent = request.headers.get("user-agent", "")
    device = device_info(user_agent)
    now = datetime.utcnow()

    subscription = session.exec(
        select(PushSubscription).where(
            PushSubscription.user_id == current_user.id,
            PushSubscription.endpoint == subscription_info.endpoint,
        )
    ).first()
    if subscription is None:
        subscription = PushSubscription(user_id=current_user.id, endpoint=subscription_info.endpoint)

    subscription.p256dh = subscription_info.keys.p256dh
    subscription.auth = subscription_info.keys.auth
    subscription.user_agent = user_agent[:500]
    subscription.device_platform = device["platform"]
    subscription.device_browser = device["browser"]
    subscription.is_active = True
    subscription.last_used_at = now
    subscription.updated_at = now
    session.add(subscription)
    session.commit()
    session.refresh(subscription)

    logger.info(f"Push subscription {subscription.id} registered for user {current_user.id}")
    return success({"subscriptionId": str(subscription.id)}, message="Push notification subscription successful")


@router.post("/push/unsubscribe", summary="Deactivate a browser push subscription")
def unsubscribe_from_push(
    payload: PushUnsubscribeRequest,
    session: SessionDep,
    current_user: CurrentUser,
) -> dict:
    subscription = session.exec(
        select(PushSubscription).where(
            PushSubscription.user_id == current_user.id,
            PushSubscription.endpoint == payload.endpoint,
        )
    ).first()
    if subscription:
        subscription.is_active = False
        subscription.updated_at = datetime.utcnow()
        session.add(subscription)
        session.commit()

    return success(message="Unsubscribed from push notifications")


@router.post("/push/test", summary="Send a test push to the caller's devices")
def test_push_notification(session: SessionDep, current_user: CurrentUser) -> dict:
    subscriptions = active_subscriptions(session, [current_user.id])
    if not subscriptions:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active push subscriptions found")

    payload = build_payload(
        "Test Notification",
        "Your push notifications are working perfectly!",
        tag="test-notification",
        data={"test": True},
    )
    successful = sum(1 for sub in subscriptions if send_push_notification(session, sub, payload))
    session.commit()

    total = len(subscriptions)
    return success(
        {"successful": successful, "total": total},
        message=f"Test notification sent to {successful}/{total} devices",
    )


@router.get("", summary="List notifications of the current user")
def list_notifications(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    unread_only: bool = Query(default=False, alias="unreadOnly"),
) -> dict:
    conditions = [Notification.recipient_id == current_user.id]
    if unread_only:
        conditions.append(Notification.is_read == False)  # noqa: E712

    notifications = session.exec(
        select(Notification)
        .where(*conditions)
        .order_by(Notification.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    total = session.exec(select(func.count()).select_from(Notification).where(*conditions)).one()
    unread = _unread_count(session, current_user.id)

    return success(
        {"notifications": [_notification_json(n) for n in notifications]},
        results=len(notifications),
        totalNotifications=total,
        unreadCount=unread,
        currentPage=page,
        totalPages=math.ceil(total / limit),
    )


def _unread_count(session: Session, user_id: UUID) -> int:
    return session.exec(
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_id == user_id, Notification.is_read == False)  # noqa: E712
    ).one()


@router.get("/unread-count", summary="Number of unread notifications")
def get_unread_count(session: SessionDep, current_user: CurrentUser) -> dict:
    return success({"unreadCount": _unread_count(session, current_user.id)})


@router.put("/mark-all-seen", summary="Mark every notification as read")
def mark_all_seen(session: SessionDep, current_user: CurrentUser) -> dict:
    unread = session.exec(
        select(Notification).where(
            Notification.recipient_id == current_user.id,
            Notification.is_read == False,  # noqa: E712
        )
    ).all()

    now = datetime.utcnow()
    for notification in unread:
        notification.is_read = True
        notification.read_at = now
        session.add(notification)
    session.commit()

    return success(
        {"modifiedCount": len(unread)},
        message=f"Marked {len(unread)} notifications as seen",
    )


@router.put("/{notification_id}/read", summary="Mark one notification as read")
def mark_as_read(notification_id: UUID, session: SessionDep, current_user: CurrentUser) -> dict:
    notification = session.get(Notification, notification_id)
    if not notification or notification.recipient_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    notification.is_read = True
    notification.read_at = datetime.utcnow()
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return success({"notification": _notification_json(notification)})


@router.delete("/read/all", summary="Delete every read notification")
def delete_read_notifications(session: SessionDep, current_user: CurrentUser) -> dict:
    read = session.exec(
        select(Notification).where(
            Notification.recipient_id == current_user.id,
            Notification.is_read == True,  # noqa: E712
        )
    ).all()
    for notification in read:
        session.delete(notification)
    session.commit()

    return success(
        {"deletedCount": len(read)},
        message=f"Deleted {len(read)} read notifications",
    )


@router.delete("/{notification_id}", summary="Delete one notification")
def delete_notification(notification_id: UUID, session: SessionDep, current_user: CurrentUser) -> dict:
    notification = session.get(Notification, notification_id)
    if not notification or notification.recipient_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    session.delete(notification)
    session.commit()
    return success(message="Notification deleted successfully")


@router.post("/send", summary="Send a notification to users (admin)")
def send_notifications(payload: NotificationSendRequest, session: SessionDep, current_user: AdminUser) -> dict:
    if not payload.message or not payload.subject:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message and subject are required")

    if payload.type not in SENDABLE_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid notification type")

    if payload.type == "individual" and not payload.user_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User IDs are required for individual notifications",
        )

    recipients = resolve_recipients(session, payload.type, payload.user_ids)
    if not recipients:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid recipients found")

    channels = payload.channels or ["app", "push"]
    notifications = [
        create_notification(
            session,
            recipient_id=recipient.id,
            type=payload.type,
            title=payload.subject,
            message=payload.message,
            sender_id=current_user.id,
            priority=payload.priority,
            category=payload.category,
            meta={"sentBy": current_user.name, "sentAt": datetime.utcnow().isoformat(), "channels": channels},
        )
        for recipient in recipients
    ]
    session.commit()

    notification_ids = [str(n.id) for n in notifications]
    recipient_ids = [str(r.id) for r in recipients]

    if "push" in channels:
        push_payload = build_payload(
            payload.subject,
            payload.message,
            data={"notificationId": notification_ids[0], "category": payload.category},
            requireInteraction=payload.priority in ("high", "urgent"),
            silent=payload.priority == "low",
        )
        safe_celery_delay(send_push_to_users_task, recipient_ids, push_payload)

    logger.info(f"Admin {current_user.id} sent {payload.type} notification to {len(recipients)} user(s)")
    return success(
        {"recipientCount": len(recipients), "notificationIds": notification_ids},
        message=f"Notifications sent to {len(recipients)} user(s)",
    )


@router.get("/push/subscriptions", summary="Active push subscriptions of the current user")
def list_push_subscriptions(session: SessionDep, current_user: CurrentUser) -> dict:
    subscriptions = active_subscriptions(session, [current_user.id])
    return success({"subscriptions": [PushSubscriptionRead.model_validate(s).to_json() for s in subscriptions]})
