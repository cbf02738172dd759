from .user import User
from .location import Location
from .service import Service
from .user_reward import UserReward
from .booking import Booking
from .referral import Referral
from .point_transaction import PointTransaction
from .notification import Notification
from .push_subscription import PushSubscription

__all__ = [
    "Booking",
    "Location",
    "Notification",
    "PointTransaction",
    "PushSubscription",
    "Referral",
    "Service",
    "User",
    "UserReward",
]
