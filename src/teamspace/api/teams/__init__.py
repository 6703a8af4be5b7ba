"""Teams API module."""

from teamspace.api.teams.routes import router as teams_router

__all__ = [
    "teams_router",
]
