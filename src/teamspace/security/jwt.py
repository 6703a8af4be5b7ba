"""JWT token utilities for bearer authentication."""

import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from teamspace.models.team import utcnow

logger = logging.getLogger(__name__)

# JWT Configuration
_env = os.environ.get("TEAMSPACE_ENV", "development")
_configured_secret = os.environ.get("TEAMSPACE_SECRET_KEY")

if _configured_secret:
    SECRET_KEY = _configured_secret
elif _env == "production":
    raise RuntimeError(
        "TEAMSPACE_SECRET_KEY must be set in production. "
        'Generate one with: python -c "import secrets; print(secrets.token_urlsafe(64))"'
    )
else:
    SECRET_KEY = "development-secret-key-DO-NOT-USE-IN-PRODUCTION"
    logger.warning("Using default JWT secret key. Set TEAMSPACE_SECRET_KEY for production.")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("TEAMSPACE_ACCESS_TOKEN_EXPIRE", "60"))


class TokenData:
    """Decoded token data."""

    def __init__(
        self,
        user_id: str,
        display_name: str | None = None,
        email: str | None = None,
        exp: datetime | None = None,
        jti: str | None = None,
    ):
        self.user_id = user_id
        self.display_name = display_name
        self.email = email
        self.exp = exp
        self.jti = jti


def create_access_token(
    user_id: str,
    display_name: str | None = None,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token carrying the caller's identity."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    now = utcnow()
    to_encode: dict[str, Any] = {
        "sub": user_id,
        "type": "access",
        "exp": now + expires_delta,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }

    if display_name is not None:
        to_encode["name"] = display_name
    if email is not None:
        to_encode["email"] = email

    return str(jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM))


def decode_token(token: str) -> TokenData | None:
    """Decode and validate a JWT access token.

    Returns:
        TokenData if valid, None if invalid, expired or not an access token.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None or payload.get("type", "access") != "access":
        return None

    exp = payload.get("exp")
    return TokenData(
        user_id=user_id,
        display_name=payload.get("name"),
        email=payload.get("email"),
        exp=datetime.fromtimestamp(exp, timezone.utc).replace(tzinfo=None) if exp else None,
        jti=payload.get("jti"),
    )
