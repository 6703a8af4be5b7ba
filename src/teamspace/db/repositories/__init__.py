"""Repository layer for database operations."""

from teamspace.db.repositories.team_repository import TeamRepository

__all__ = [
    "TeamRepository",
]
