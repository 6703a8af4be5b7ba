"""Command and query messages, one per use case.

Each message type is handled by exactly one handler, see
``teamspace.engine.dispatcher``.
"""

from pydantic import BaseModel, ConfigDict, Field

from teamspace.engine.invites import DEFAULT_EXPIRY_HOURS


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True)


# Commands


class CreateTeamCommand(_Message):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    creator_user_id: str


class GenerateInviteTokenCommand(_Message):
    team_id: str
    admin_user_id: str
    expiry_hours: int = DEFAULT_EXPIRY_HOURS


class JoinTeamCommand(_Message):
    invite_token: str
    nickname: str
    user_id: str
    user_email: str = ""
    user_name: str = ""


class ApproveMemberCommand(_Message):
    team_id: str
    member_id: str
    approver_user_id: str


class RejectMemberCommand(_Message):
    team_id: str
    member_id: str
    rejector_user_id: str


class UpdateTeamCommand(_Message):
    team_id: str
    actor_user_id: str
    name: str | None = None
    description: str | None = None


class DeleteTeamCommand(_Message):
    team_id: str
    actor_user_id: str


# Queries


class GetMyTeamsQuery(_Message):
    user_id: str


class GetTeamByIdQuery(_Message):
    team_id: str
    user_id: str


class GetPendingMembersQuery(_Message):
    team_id: str
    admin_user_id: str


class ListAllTeamsQuery(_Message):
    pass


Command = (
    CreateTeamCommand
    | GenerateInviteTokenCommand
    | JoinTeamCommand
    | ApproveMemberCommand
    | RejectMemberCommand
    | UpdateTeamCommand
    | DeleteTeamCommand
)
Query = GetMyTeamsQuery | GetTeamByIdQuery | GetPendingMembersQuery | ListAllTeamsQuery
