"""API route modules."""
from .wellbeing import router as wellbeing_router
from .activities import router as activities_router
from .checkins import router as checkins_router
from .journal import router as journal_router
from .settings import router as settings_router

__all__ = [
    "activities_router",
    "wellbeing_router",
    "checkins_router",
    "journal_router",
    "settings_router",
]
