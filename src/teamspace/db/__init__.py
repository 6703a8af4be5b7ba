"""Database layer for TeamSpace."""

from teamspace.db.database import (
    close_db,
    get_db,
    get_engine,
    init_db,
    session_scope,
)
from teamspace.db.models import Base, TeamAdminDB, TeamDB, TeamMemberDB

__all__ = [
    "Base",
    "TeamAdminDB",
    "TeamDB",
    "TeamMemberDB",
    "close_db",
    "get_db",
    "get_engine",
    "init_db",
    "session_scope",
]
