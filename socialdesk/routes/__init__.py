from .approvals import router as approvals_router
from .brands import router as brands_router
from .posts import router as posts_router
from .schedule import router as schedule_router
from .schedules import router as schedules_router
from .oneup import router as oneup_router
from .websites import router as websites_router

__all__ = [
    "approvals_router",
    "brands_router",
    "posts_router",
    "schedule_router",
    "schedules_router",
    "oneup_router",
    "websites_router",
]
