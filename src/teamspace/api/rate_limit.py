"""Rate limiting configuration for TeamSpace API."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

_rate_limit_enabled = os.environ.get("TEAMSPACE_RATE_LIMIT_ENABLED", "true").lower() != "false"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["100/minute"] if _rate_limit_enabled else [],
    enabled=_rate_limit_enabled,
)

# Applied to the endpoints that accept invite tokens
JOIN_RATE_LIMIT = os.environ.get("TEAMSPACE_JOIN_RATE_LIMIT", "10/minute")
