import json
from unittest.mock import MagicMock

import pytest
from pywebpush import WebPushException
from sqlalchemy.exc import IntegrityError

from salon_api.core.config import settings
from salon_api.models import PushSubscription
from salon_api.services.web_push import (
    build_payload,
    device_info,
    send_push_notification,
    send_web_push_to_users,
)


@pytest.fixture
def make_subscription(db):
    def _make_subscription(user, endpoint="https://push.example.com/abc", **fields) -> PushSubscription:
        subscription = PushSubscription(user_id=user.id, endpoint=endpoint, p256dh="p256dh-key", auth="auth", **fields)
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    return _make_subscription


def test_build_payload_defaults():
    payload = build_payload("Hello", "World", data={"notificationId": "n1"}, requireInteraction=True)

    assert payload["title"] == "Hello"
    assert payload["tag"] == "notification"
    assert payload["data"]["url"] == "/notifications"
    assert payload["data"]["notificationId"] == "n1"
    assert "timestamp" in payload["data"]
    assert payload["requireInteraction"] is True


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        ("Mozilla/5.0 (Linux; Android 14) Chrome/120.0 Mobile Safari/537.36", {"platform": "mobile", "browser": "Chrome"}),
        ("Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Firefox/121.0", {"platform": "desktop", "browser": "Firefox"}),
        ("Mozilla/5.0 (Macintosh) Version/17.0 Safari/605.1.15", {"platform": "desktop", "browser": "Safari"}),
        (None, {"platform": "desktop", "browser": "Unknown"}),
    ],
)
def test_device_info(user_agent, expected):
    assert device_info(user_agent) == expected


def test_successful_push_touches_subscription(db, make_user, make_subscription, push_mock):
    user = make_user()
    subscription = make_subscription(user)
    before = subscription.last_used_at

    assert send_push_notification(db, subscription, {"title": "Hi"}) is True
    db.commit()

    push_mock.assert_called_once()
    kwargs = push_mock.call_args.kwargs
    assert kwargs["subscription_info"] == {
        "endpoint": "https://push.example.com/abc",
        "keys": {"p256dh": "p256dh-key", "auth": "auth"},
    }
    assert json.loads(kwargs["data"]) == {"title": "Hi"}
    assert kwargs["vapid_claims"] == {"sub": settings.VAPID_CLAIMS_EMAIL}
    assert subscription.is_active is True
    assert subscription.last_used_at >= before


def test_failed_push_deactivates_subscription(db, make_user, make_subscription, push_mock):
    user = make_user()
    subscription = make_subscription(user)
    push_mock.side_effect = WebPushException("Gone", response=MagicMock(status_code=410))

    assert send_push_notification(db, subscription, {"title": "Hi"}) is False
    db.commit()
    db.refresh(subscription)

    assert subscription.is_active is False


def test_send_to_users_counts_successes(db, make_user, make_subscription, push_mock):
    alice, bob, carol = make_user(), make_user(), make_user()
    make_subscription(alice, endpoint="https://push.example.com/alice-1")
    make_subscription(alice, endpoint="https://push.example.com/alice-2")
    make_subscription(bob, endpoint="https://push.example.com/bob", is_active=False)
    make_subscription(carol, endpoint="https://push.example.com/carol")

    sent = send_web_push_to_users(db, [alice.id, bob.id], {"title": "Hi"})

    assert sent == 2
    endpoints = {c.kwargs["subscription_info"]["endpoint"] for c in push_mock.call_args_list}
    assert endpoints == {"https://push.example.com/alice-1", "https://push.example.com/alice-2"}


def test_send_to_users_skips_without_vapid_keys(db, make_user, make_subscription, push_mock, monkeypatch):
    user = make_user()
    make_subscription(user)
    monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "")

    assert send_web_push_to_users(db, [user.id], {"title": "Hi"}) == 0
    push_mock.assert_not_called()


def test_send_to_users_without_subscriptions(db, make_user, push_mock):
    assert send_web_push_to_users(db, [make_user().id], {"title": "Hi"}) == 0
    push_mock.assert_not_called()


def test_endpoint_is_unique_per_user(db, make_user, make_subscription):
    user = make_user()
    make_subscription(user)

    with pytest.raises(IntegrityError):
        make_subscription(user)
    db.rollback()

    # The same endpoint may belong to another user
    make_subscription(make_user())


@pytest.mark.parametrize("error", [ConnectionError("push service unreachable"), ValueError("bad p256dh key")])
def test_unexpected_push_error_is_swallowed(db, make_user, make_subscription, push_mock, error):
    user = make_user()
    subscription = make_subscription(user)
    push_mock.side_effect = error

    assert send_push_notification(db, subscription, {"title": "Hi"}) is False
    db.commit()
    db.refresh(subscription)

    assert subscription.is_active is True


def test_send_to_users_continues_after_unexpected_error(db, make_user, make_subscription, push_mock):
    user = make_user()
    make_subscription(user, endpoint="https://push.example.com/one")
    make_subscription(user, endpoint="https://push.example.com/two")
    push_mock.side_effect = [ConnectionError("push service unreachable"), None]

    assert send_web_push_to_users(db, [user.id], {"title": "Hi"}) == 1
    assert push_mock.call_count == 2
