from fastapi import APIRouter

from salon_api.api.v1 import (
    auth,
    bookings,
    branding,
    dashboard,
    health,
    notifications,
    referral,
    rewards,
    spa_users,
    user_rewards,
)

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(branding.router, prefix="/branding", tags=["branding"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(referral.router, prefix="/referral", tags=["referral"])
api_router.include_router(rewards.router, prefix="/rewards", tags=["rewards"])
api_router.include_router(user_rewards.router, prefix="/user-rewards", tags=["user-rewards"])
api_router.include_router(spa_users.router, prefix="/spa-users", tags=["spa-users"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
