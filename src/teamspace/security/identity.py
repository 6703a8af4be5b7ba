"""Resolve the calling user from an inbound HTTP request."""

import base64
import binascii
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.requests import Request

from teamspace.security.jwt import decode_token

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-MS-CLIENT-PRINCIPAL"
EMAIL_CLAIM = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress"
NAME_CLAIM = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/name"


class Identity(BaseModel):
    """The authenticated caller."""

    user_id: str
    display_name: str = ""
    email: str = ""
    claims: dict[str, str] = Field(default_factory=dict)


class ClientPrincipalClaim(BaseModel):
    typ: str | None = None
    val: str | None = None


class ClientPrincipal(BaseModel):
    """Identity document set by the hosting proxy, base64 JSON encoded."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str | None = Field(None, alias="userId")
    user_details: str | None = Field(None, alias="userDetails")
    identity_provider: str | None = Field(None, alias="identityProvider")
    claims: list[ClientPrincipalClaim] | None = None

    def claim(self, claim_type: str) -> str | None:
        for claim in self.claims or []:
            if claim.typ == claim_type:
                return claim.val
        return None

    def to_identity(self) -> Identity | None:
        if not self.user_id:
            return None
        claims = {c.typ: c.val for c in self.claims or [] if c.typ and c.val is not None}
        return Identity(
            user_id=self.user_id,
            display_name=self.user_details or "",
            email=self.claim(EMAIL_CLAIM) or "",
            claims=claims,
        )


DEVELOPMENT_PRINCIPAL = ClientPrincipal(
    user_id="dev-user-123",
    user_details="Development User",
    identity_provider="google",
    claims=[
        ClientPrincipalClaim(typ=EMAIL_CLAIM, val="dev@example.com"),
        ClientPrincipalClaim(typ=NAME_CLAIM, val="Development User"),
    ],
)


def encode_principal(principal: ClientPrincipal) -> str:
    """Encode a principal the way the hosting proxy does."""
    raw = principal.model_dump_json(by_alias=True, exclude_none=True)
    return base64.b64encode(raw.encode()).decode()


def decode_principal(header: str) -> ClientPrincipal | None:
    """Decode a principal header value, or None if it is malformed."""
    try:
        raw = base64.b64decode(header, validate=True)
        return ClientPrincipal.model_validate_json(raw)
    except (binascii.Error, ValueError, ValidationError):
        return None


class IdentityResolver(ABC):
    """Maps an inbound request to the calling user. None means unauthenticated."""

    def resolve(self, request: Request) -> Identity | None:
        return self.from_headers(request.headers)

    @abstractmethod
    def from_headers(self, headers: Mapping[str, str]) -> Identity | None:
        raise NotImplementedError


class ClientPrincipalResolver(IdentityResolver):
    """Reads the ``X-MS-CLIENT-PRINCIPAL`` header.

    With ``development=True`` a missing or unreadable header resolves to a
    fixed development user so the API can be exercised without the proxy.
    """

    def __init__(self, development: bool = False):
        self.development = development

    def from_headers(self, headers: Mapping[str, str]) -> Identity | None:
        header = headers.get(PRINCIPAL_HEADER)
        principal = decode_principal(header) if header else None

        if principal is None:
            if header:
                logger.warning("Ignoring malformed %s header", PRINCIPAL_HEADER)
            if self.development:
                return DEVELOPMENT_PRINCIPAL.to_identity()
            return None

        return principal.to_identity()


class BearerTokenResolver(IdentityResolver):
    """Reads an HS256 JWT from ``Authorization: Bearer <token>``."""

    def from_headers(self, headers: Mapping[str, str]) -> Identity | None:
        authorization = headers.get("Authorization")
        if not authorization:
            return None

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        token_data = decode_token(token.strip())
        if token_data is None:
            return None

        return Identity(
            user_id=token_data.user_id,
            display_name=token_data.display_name or "",
            email=token_data.email or "",
        )


def get_identity_resolver() -> IdentityResolver:
    """Build the resolver selected by TEAMSPACE_AUTH_MODE."""
    mode = os.environ.get("TEAMSPACE_AUTH_MODE", "principal").lower()
    if mode == "jwt":
        return BearerTokenResolver()
    if mode != "principal":
        raise RuntimeError(f"Unknown TEAMSPACE_AUTH_MODE '{mode}' (expected 'principal' or 'jwt')")

    development = os.environ.get("TEAMSPACE_DEV_IDENTITY", "false").lower() == "true"
    if development and os.environ.get("TEAMSPACE_ENV") == "production":
        raise RuntimeError("TEAMSPACE_DEV_IDENTITY cannot be enabled in production")
    if development:
        logger.warning("Development identity enabled: unauthenticated requests act as dev-user-123")
    return ClientPrincipalResolver(development=development)
