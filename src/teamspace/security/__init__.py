"""Security module for authentication and authorization."""

from teamspace.security.identity import (
    BearerTokenResolver,
    ClientPrincipal,
    ClientPrincipalResolver,
    Identity,
    IdentityResolver,
    get_identity_resolver,
)
from teamspace.security.jwt import create_access_token, decode_token
from teamspace.security.permissions import Permission, check_team_permission, require_team_admin

__all__ = [
    "BearerTokenResolver",
    "ClientPrincipal",
    "ClientPrincipalResolver",
    "Identity",
    "IdentityResolver",
    "Permission",
    "check_team_permission",
    "create_access_token",
    "decode_token",
    "get_identity_resolver",
    "require_team_admin",
]
