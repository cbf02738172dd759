from .availability import AvailabilityUpdate, BusinessHoursDay
from .base import CamelModel, success
from .booking import BookingCreate, BookingRate, BookingRead
from .branding import BrandingRead, SubdomainValidationRequest
from .notification import NotificationRead, NotificationSendRequest
from .pagination import pagination_block
from .push_subscription import (
    PushKeys,
    PushSubscribeRequest,
    PushSubscriptionInfo,
    PushSubscriptionRead,
    PushUnsubscribeRequest,
)
from .reward import PointTransactionRead, UserRewardRead
from .user import (
    RefreshTokenRequest,
    SpaUserRead,
    TokenPair,
    UserCreate,
    UserLogin,
    UserRead,
)

__all__ = [
    "AvailabilityUpdate",
    "BookingCreate",
    "BookingRate",
    "BookingRead",
    "BrandingRead",
    "BusinessHoursDay",
    "CamelModel",
    "NotificationRead",
    "NotificationSendRequest",
    "PointTransactionRead",
    "PushKeys",
    "PushSubscribeRequest",
    "PushSubscriptionInfo",
    "PushSubscriptionRead",
    "PushUnsubscribeRequest",
    "RefreshTokenRequest",
    "SpaUserRead",
    "TokenPair",
    "UserCreate",
    "UserLogin",
    "UserRead",
    "UserRewardRead",
    "pagination_block",
    "success",
]
