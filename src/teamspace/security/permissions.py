"""Permission checking utilities for teams."""

import logging
from enum import StrEnum

from teamspace.errors import UnauthorizedError
from teamspace.models.team import Team

logger = logging.getLogger(__name__)


class Permission(StrEnum):
    """Permission levels on a team."""

    VIEWER = "viewer"
    ADMIN = "admin"


def check_team_permission(
    team: Team,
    user_id: str,
    required_permission: Permission = Permission.VIEWER,
) -> bool:
    """Check if a user has the required permission on a team.

    Args:
        team: The loaded team aggregate.
        user_id: The user ID to check permissions for.
        required_permission: The minimum required permission level.

    Returns:
        True if user has the required permission, False otherwise.
    """
    if team.is_admin(user_id):
        return True

    # Viewing is open to active and pending members; inactive ones lose access
    if required_permission == Permission.VIEWER:
        return team.is_visible_to(user_id)

    return False


def require_team_admin(team: Team, user_id: str, action: str) -> None:
    """Raise ``UnauthorizedError`` unless ``user_id`` administers ``team``.

    ``action`` completes the sentence "Only admins can ...".
    """
    if not check_team_permission(team, user_id, Permission.ADMIN):
        logger.warning("User %s denied: %s on team %s", user_id, action, team.id)
        raise UnauthorizedError(f"Only admins can {action}")
