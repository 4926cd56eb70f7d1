"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from shiftbook.api.routes import admins, bookings, feed, shifts, stats

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(shifts.router)
api_router.include_router(bookings.router)
api_router.include_router(admins.router)
api_router.include_router(stats.router)
api_router.include_router(feed.router)
