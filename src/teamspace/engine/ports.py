"""Abstract boundaries the handlers depend on."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from teamspace.models.team import Team

Clock = Callable[[], datetime]


class TeamRepositoryPort(ABC):
    """Persistence boundary for the Team aggregate.

    Storage failures are not translated; they propagate to the caller as
    unexpected errors.
    """

    @abstractmethod
    async def get_by_id(self, team_id: str) -> Team | None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> list[Team]:
        """Teams where the user is an admin or an active member."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_invite_token(self, invite_token: str) -> Team | None:
        raise NotImplementedError

    @abstractmethod
    async def list_all(self) -> list[Team]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, team: Team) -> Team:
        """Store a new team, assigning its ID and timestamps."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, team: Team) -> Team:
        """Save a loaded team back.

        Raises:
            ConcurrencyConflictError: If the stored version moved since ``team`` was loaded.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, team_id: str) -> None:
        raise NotImplementedError


class TokenGenerator(ABC):
    """Source of opaque, URL-safe invite tokens."""

    @abstractmethod
    def generate(self) -> str:
        raise NotImplementedError
