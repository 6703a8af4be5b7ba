"""Explicit routing of command/query messages to their handlers."""

from typing import Any

from teamspace.engine.commands import (
    ApproveMemberCommand,
    CreateTeamCommand,
    DeleteTeamCommand,
    GenerateInviteTokenCommand,
    GetMyTeamsQuery,
    GetPendingMembersQuery,
    GetTeamByIdQuery,
    JoinTeamCommand,
    ListAllTeamsQuery,
    RejectMemberCommand,
    UpdateTeamCommand,
)
from teamspace.engine.handlers import (
    ApproveMemberHandler,
    CreateTeamHandler,
    DeleteTeamHandler,
    GenerateInviteTokenHandler,
    GetMyTeamsHandler,
    GetPendingMembersHandler,
    GetTeamByIdHandler,
    JoinTeamHandler,
    ListAllTeamsHandler,
    RejectMemberHandler,
    TeamHandler,
    UpdateTeamHandler,
)
from teamspace.engine.invites import SecureTokenGenerator
from teamspace.engine.ports import Clock, TeamRepositoryPort, TokenGenerator
from teamspace.models.team import utcnow


class Dispatcher:
    """Maps each message type to exactly one handler instance."""

    def __init__(self, handlers: dict[type, TeamHandler]):
        self._handlers = dict(handlers)

    def handler_for(self, message_type: type) -> TeamHandler:
        try:
            return self._handlers[message_type]
        except KeyError:
            raise LookupError(f"No handler registered for {message_type.__name__}") from None

    async def dispatch(self, message: Any) -> Any:
        return await self.handler_for(type(message)).handle(message)


def build_dispatcher(
    repository: TeamRepositoryPort,
    token_generator: TokenGenerator | None = None,
    clock: Clock = utcnow,
) -> Dispatcher:
    """Wire every handler against the given collaborators."""
    if token_generator is None:
        token_generator = SecureTokenGenerator()

    return Dispatcher(
        {
            CreateTeamCommand: CreateTeamHandler(repository, clock),
            GenerateInviteTokenCommand: GenerateInviteTokenHandler(
                repository, token_generator, clock
            ),
            JoinTeamCommand: JoinTeamHandler(repository, clock),
            ApproveMemberCommand: ApproveMemberHandler(repository, clock),
            RejectMemberCommand: RejectMemberHandler(repository, clock),
            UpdateTeamCommand: UpdateTeamHandler(repository, clock),
            DeleteTeamCommand: DeleteTeamHandler(repository, clock),
            GetMyTeamsQuery: GetMyTeamsHandler(repository, clock),
            GetTeamByIdQuery: GetTeamByIdHandler(repository, clock),
            GetPendingMembersQuery: GetPendingMembersHandler(repository, clock),
            ListAllTeamsQuery: ListAllTeamsHandler(repository, clock),
        }
    )
