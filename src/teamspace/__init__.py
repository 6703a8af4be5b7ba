"""TeamSpace - team membership and invite-token join workflow."""

__version__ = "0.1.0"

from teamspace.models.team import MemberStatus, Team, TeamMember

__all__ = [
    "MemberStatus",
    "Team",
    "TeamMember",
]
