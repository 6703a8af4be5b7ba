"""FastAPI dependencies: identity and per-request handler wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.db import get_db
from teamspace.db.repositories import TeamRepository
from teamspace.engine import (
    Clock,
    Dispatcher,
    SecureTokenGenerator,
    TokenGenerator,
    build_dispatcher,
)
from teamspace.models.team import utcnow
from teamspace.security.identity import Identity, IdentityResolver, get_identity_resolver


def get_clock() -> Clock:
    """Time source for handlers. Overridden in tests."""
    return utcnow


def get_token_generator() -> TokenGenerator:
    return SecureTokenGenerator()


def get_resolver() -> IdentityResolver:
    return get_identity_resolver()


async def get_current_identity(
    request: Request,
    resolver: Annotated[IdentityResolver, Depends(get_resolver)],
) -> Identity:
    """Get the calling user.

    Raises HTTPException 401 if the request carries no usable identity.
    """
    identity = resolver.resolve(request)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return identity


async def get_dispatcher(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    token_generator: Annotated[TokenGenerator, Depends(get_token_generator)],
) -> Dispatcher:
    """Compose the handlers for one request around its database session."""
    repository = TeamRepository(db, clock=clock)
    return build_dispatcher(repository, token_generator=token_generator, clock=clock)


# Type aliases for dependency injection
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
TeamDispatcher = Annotated[Dispatcher, Depends(get_dispatcher)]
