from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from salon_api.core.config import settings
from salon_api.models import Notification, PointTransaction, Referral
from salon_api.services.referrals import complete_referral, leaderboard, process_referral, signup_reward
from tests.conftest import auth_headers


@pytest.mark.parametrize("tier, referrer_points", [("bronze", 200), ("gold", 300), ("platinum", 400), (None, 200)])
def test_signup_reward_scales_with_tier(tier, referrer_points):
    assert signup_reward(tier) == (referrer_points, 100)


class TestProcessReferral:
    def test_awards_both_sides(self, db, make_user, push_mock):
        referrer = make_user(name="Rita", referral_tier="gold")
        referred = make_user(name="Ned")

        result = process_referral(db, referred.id, referrer.referral_code.lower())

        assert result.success is True
        assert (result.referrer_points, result.referred_points) == (300, 100)
        db.refresh(referrer)
        db.refresh(referred)
        assert referrer.points == 100 + 300
        assert referred.points == 100 + 100
        assert referred.referred_by_id == referrer.id
        assert referrer.total_referrals == 1
        assert referrer.converted_referrals == 1
        assert referrer.referral_earnings == 300

        referral = db.exec(select(Referral)).one()
        assert referral.status == "completed"
        assert referral.referrer_awarded and referral.referred_awarded
        assert len(db.exec(select(PointTransaction)).all()) == 2

        notifications = db.exec(select(Notification)).all()
        assert {n.recipient_id for n in notifications} == {referrer.id, referred.id}
        assert all(n.category == "referral" for n in notifications)

    def test_invalid_code(self, db, make_user):
        assert process_referral(db, make_user().id, "ZZ0000").message == "Invalid referral code"

    def test_self_referral(self, db, make_user):
        user = make_user()
        assert process_referral(db, user.id, user.referral_code).message == "Cannot refer yourself"

    def test_already_referred(self, db, make_user, push_mock):
        first, second, referred = make_user(), make_user(), make_user()
        assert process_referral(db, referred.id, first.referral_code).success

        result = process_referral(db, referred.id, second.referral_code)
        assert result.success is False
        assert result.message == "User was already referred by someone else"

    def test_pending_when_not_auto_approved(self, db, make_user, monkeypatch):
        monkeypatch.setattr(settings, "REFERRAL_AUTO_APPROVE", False)
        referrer, referred = make_user(), make_user()

        assert process_referral(db, referred.id, referrer.referral_code).success
        referral = db.exec(select(Referral)).one()
        assert referral.status == "pending"
        db.refresh(referrer)
        assert referrer.points == 100


class TestCompleteReferral:
    def test_completing_twice_fails(self, db, make_user, monkeypatch):
        monkeypatch.setattr(settings, "REFERRAL_AUTO_APPROVE", False)
        referrer, referred = make_user(), make_user()
        process_referral(db, referred.id, referrer.referral_code)
        referral = db.exec(select(Referral)).one()

        complete_referral(db, referral)
        with pytest.raises(ValueError, match="already completed"):
            complete_referral(db, referral)

        db.refresh(referrer)
        assert referrer.points == 100 + 200

    def test_expired_referral(self, db, make_user):
        referrer, referred = make_user(), make_user()
        referral = Referral(
            referrer_id=referrer.id,
            referred_id=referred.id,
            referral_code=referrer.referral_code,
            referrer_points=200,
            referred_points=100,
            expires_at=datetime.utcnow() - timedelta(days=1),
        )
        db.add(referral)
        db.commit()

        with pytest.raises(ValueError, match="expired"):
            complete_referral(db, referral)
        assert referral.status == "expired"


def _completed(db, referrer, referred, days_ago=0, points=200):
    db.add(
        Referral(
            referrer_id=referrer.id,
            referred_id=referred.id,
            referral_code=referrer.referral_code,
            status="completed",
            referrer_points=points,
            completed_at=datetime.utcnow() - timedelta(days=days_ago),
        )
    )
    db.commit()


def test_leaderboard_orders_by_referrals_then_points(db, make_user):
    top, runner_up, old_timer = make_user(name="Top"), make_user(name="Runner"), make_user(name="Old")
    _completed(db, top, make_user())
    _completed(db, top, make_user())
    _completed(db, runner_up, make_user(), points=500)
    _completed(db, old_timer, make_user(), days_ago=60, points=900)

    board = leaderboard(db)
    assert [entry["name"] for entry in board] == ["Top", "Old", "Runner"]
    assert board[0]["totalReferrals"] == 2
    assert board[0]["totalPointsEarned"] == 400

    monthly = leaderboard(db, period="month")
    assert [entry["name"] for entry in monthly] == ["Top", "Runner"]


class TestReferralRoutes:
    def test_my_stats(self, client, db, make_user, push_mock):
        referrer, referred = make_user(name="Rita"), make_user(name="Ned")
        process_referral(db, referred.id, referrer.referral_code)

        stats = client.get("/api/referral/my-stats", headers=auth_headers(referrer)).json()["data"]["stats"]
        assert stats["referralCode"] == referrer.referral_code
        assert stats["totalReferrals"] == 1
        assert stats["referralBreakdown"] == {"pending": 0, "completed": 1, "expired": 0}
        assert stats["recentReferrals"][0]["user"]["name"] == "Ned"

        received = client.get("/api/referral/my-stats", headers=auth_headers(referred)).json()["data"]["stats"]
        assert received["referredBy"]["name"] == "Rita"
        assert received["receivedReferrals"][0]["user"]["name"] == "Rita"

    def test_leaderboard(self, client, db, make_user):
        top = make_user(name="Top")
        _completed(db, top, make_user())

        response = client.get("/api/referral/leaderboard", params={"period": "week"}, headers=auth_headers(top))

        data = response.json()["data"]
        assert data["period"] == "week"
        assert data["leaderboard"][0]["name"] == "Top"

    def test_leaderboard_rejects_unknown_period(self, client, make_user):
        response = client.get("/api/referral/leaderboard", params={"period": "decade"}, headers=auth_headers(make_user()))
        assert response.status_code == 422
