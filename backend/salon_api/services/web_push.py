import json
import logging
from datetime import datetime
from typing import Any, Iterable, Optional
from uuid import UUID

from pywebpush import WebPushException, webpush
from sqlmodel import Session, select

from salon_api.core.config import settings
from salon_api.models.push_subscription import PushSubscription

logger = logging.getLogger(__name__)


def vapid_configured() -> bool:
    return bool(settings.VAPID_PRIVATE_KEY and settings.VAPID_PUBLIC_KEY)


def device_info(user_agent: str | None) -> dict[str, str]:
    """Coarse platform and browser of a subscribing client."""
    user_agent = user_agent or ""
    if "Chrome" in user_agent:
        browser = "Chrome"
    elif "Firefox" in user_agent:
        browser = "Firefox"
    elif "Safari" in user_agent:
        browser = "Safari"
    else:
        browser = "Unknown"
    return {"platform": "mobile" if "Mobile" in user_agent else "desktop", "browser": browser}


def build_payload(
    title: str,
    body: str,
    url: str = "/notifications",
    tag: str = "notification",
    data: Optional[dict[str, Any]] = None,
    **extra: Any,
) -> dict[str, Any]:
    """Notification payload read by the service worker."""
    payload = {
        "title": title,
        "body": body,
        "icon": "/icons/icon-192x192.png",
        "badge": "/icons/badge-72x72.png",
        "tag": tag,
        "data": {"url": url, "timestamp": datetime.utcnow().isoformat(), **(data or {})},
    }
    payload.update(extra)
    return payload


def send_push_notification(
    session: Session,
    subscription: PushSubscription,
    payload: dict[str, Any],
) -> bool:
    """
    Deliver one payload to one subscription.

    A rejection by the push service deactivates the subscription. Every
    failure is logged and never raised. Changes are added to the session,
    the caller commits.

    Returns:
        True when the push service accepted the message.
    """
    try:
        webpush(
            subscription_info={
                "endpoint": subscription.endpoint,
                "keys": {
                    "p256dh": subscription.p256dh,
                    "auth": subscription.auth,
                },
            },
            data=json.dumps(payload),
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_claims={"sub": settings.VAPID_CLAIMS_EMAIL},
        )
    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else None
        logger.error(
            f"Failed to send web push to user {subscription.user_id} "
            f"(status {status_code}): {e}"
        )
        subscription.is_active = False
        subscription.updated_at = datetime.utcnow()
        session.add(subscription)
        logger.info(f"Deactivated push subscription {subscription.id} for user {subscription.user_id}")
        return False
    except Exception as e:
        # Network errors and bad keys leave the subscription active
        logger.error(f"Error sending web push to user {subscription.user_id}: {e}")
        return False

    subscription.last_used_at = datetime.utcnow()
    session.add(subscription)
    logger.info(f"Web push sent to user {subscription.user_id}, endpoint: {subscription.endpoint[:50]}...")
    return True


def active_subscriptions(session: Session, user_ids: Iterable[UUID]) -> list[PushSubscription]:
    ids = list(user_ids)
    if not ids:
        return []
    statement = select(PushSubscription).where(
        PushSubscription.user_id.in_(ids),
        PushSubscription.is_active == True,  # noqa: E712
    )
    return list(session.exec(statement).all())


def send_web_push_to_users(
    session: Session,
    user_ids: Iterable[UUID],
    payload: dict[str, Any],
) -> int:
    """Send a payload to every active subscription of the given users.

    Returns the number of successful deliveries.
    """
    if not vapid_configured():
        logger.warning("VAPID keys not configured, skipping web push")
        return 0

    subscriptions = active_subscriptions(session, user_ids)
    if not subscriptions:
        logger.info("No active push subscriptions for recipients")
        return 0

    sent_count = sum(1 for subscription in subscriptions if send_push_notification(session, subscription, payload))
    session.commit()

    logger.info(f"Web push: sent {sent_count}/{len(subscriptions)}")
    return sent_count
