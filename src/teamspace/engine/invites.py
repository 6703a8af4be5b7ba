"""Invite token policy."""

import logging
import os
import secrets
from datetime import datetime, timedelta
from typing import NamedTuple

from teamspace.engine.ports import TokenGenerator
from teamspace.errors import InvalidStateError
from teamspace.models.team import utcnow

logger = logging.getLogger(__name__)

# 32 random bytes = 256 bits of entropy
TOKEN_BYTES = 32
DEFAULT_EXPIRY_HOURS = int(os.environ.get("TEAMSPACE_INVITE_EXPIRY_HOURS", "168"))
# Upper bound accepted over HTTP, one year
MAX_EXPIRY_HOURS = 24 * 365


class InviteToken(NamedTuple):
    """A freshly issued invite token and when it stops working."""

    token: str
    expiry: datetime


class SecureTokenGenerator(TokenGenerator):
    """Generate base64url tokens from the OS CSPRNG."""

    def __init__(self, nbytes: int = TOKEN_BYTES):
        if nbytes < TOKEN_BYTES:
            raise ValueError(f"Invite tokens need at least {TOKEN_BYTES} random bytes")
        self.nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_urlsafe(self.nbytes)


def compute_expiry(expiry_hours: int, now: datetime | None = None) -> datetime:
    """Expiry timestamp for a token issued at ``now`` living ``expiry_hours``."""
    if expiry_hours < 1:
        raise InvalidStateError("Invite token lifetime must be at least one hour")
    try:
        return (now or utcnow()) + timedelta(hours=expiry_hours)
    except OverflowError:
        raise InvalidStateError(
            f"Invite token lifetime of {expiry_hours} hours is out of range"
        ) from None


def issue_invite(
    generator: TokenGenerator,
    expiry_hours: int = DEFAULT_EXPIRY_HOURS,
    now: datetime | None = None,
) -> InviteToken:
    """Generate a new invite token and its expiry.

    No uniqueness check is made against stored tokens; with 256 bits of
    entropy a collision is not a practical concern.
    """
    expiry = compute_expiry(expiry_hours, now)
    token = generator.generate()
    logger.debug("Issued invite token expiring at %s", expiry.isoformat())
    return InviteToken(token=token, expiry=expiry)
