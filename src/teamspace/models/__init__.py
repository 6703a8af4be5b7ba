"""Domain models for TeamSpace."""

from teamspace.models.team import (
    DEFAULT_MEMBER_ROLE,
    MemberStatus,
    Team,
    TeamMember,
    generate_id,
    utcnow,
)

__all__ = [
    "DEFAULT_MEMBER_ROLE",
    "MemberStatus",
    "Team",
    "TeamMember",
    "generate_id",
    "utcnow",
]
