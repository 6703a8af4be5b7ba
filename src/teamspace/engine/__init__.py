"""TeamSpace membership workflow engine."""

from teamspace.engine.dispatcher import Dispatcher, build_dispatcher
from teamspace.engine.invites import (
    DEFAULT_EXPIRY_HOURS,
    InviteToken,
    SecureTokenGenerator,
    compute_expiry,
    issue_invite,
)
from teamspace.engine.ports import Clock, TeamRepositoryPort, TokenGenerator

__all__ = [
    "Clock",
    "DEFAULT_EXPIRY_HOURS",
    "Dispatcher",
    "InviteToken",
    "SecureTokenGenerator",
    "TeamRepositoryPort",
    "TokenGenerator",
    "build_dispatcher",
    "compute_expiry",
    "issue_invite",
]
