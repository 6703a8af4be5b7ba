"""Command and query handlers for the team membership workflow.

Every handler loads the aggregate once, checks authorization, applies one
domain operation and saves once.
"""

import logging

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
from teamspace.engine.invites import InviteToken, issue_invite
from teamspace.engine.ports import Clock, TeamRepositoryPort, TokenGenerator
from teamspace.errors import InvalidStateError, NotFoundError
from teamspace.models.team import Team, TeamMember, utcnow
from teamspace.security.permissions import Permission, check_team_permission, require_team_admin

logger = logging.getLogger(__name__)


class TeamHandler:
    """Base class holding the collaborators shared by all handlers."""

    def __init__(self, repository: TeamRepositoryPort, clock: Clock = utcnow):
        self.repository = repository
        self.clock = clock

    async def _load_team(self, team_id: str) -> Team:
        team = await self.repository.get_by_id(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team


class CreateTeamHandler(TeamHandler):
    async def handle(self, command: CreateTeamCommand) -> Team:
        team = Team.create(
            name=command.name,
            description=command.description,
            creator_id=command.creator_user_id,
            now=self.clock(),
        )
        created = await self.repository.create(team)
        logger.info("Team %s created by %s", created.id, command.creator_user_id)
        return created


class GenerateInviteTokenHandler(TeamHandler):
    def __init__(
        self,
        repository: TeamRepositoryPort,
        token_generator: TokenGenerator,
        clock: Clock = utcnow,
    ):
        super().__init__(repository, clock)
        self.token_generator = token_generator

    async def handle(self, command: GenerateInviteTokenCommand) -> InviteToken:
        team = await self._load_team(command.team_id)
        require_team_admin(team, command.admin_user_id, "generate invite tokens")

        now = self.clock()
        invite = issue_invite(self.token_generator, command.expiry_hours, now=now)
        team.set_invite_token(invite.token, invite.expiry, now=now)

        await self.repository.update(team)
        logger.info(
            "Invite token issued for team %s by %s (expires %s)",
            team.id,
            command.admin_user_id,
            invite.expiry.isoformat(),
        )
        return invite


class JoinTeamHandler(TeamHandler):
    async def handle(self, command: JoinTeamCommand) -> Team:
        team = await self.repository.get_by_invite_token(command.invite_token)
        if team is None:
            raise NotFoundError("Invalid invite token")

        now = self.clock()
        if not team.is_token_valid(now):
            raise InvalidStateError("Invite token has expired")

        member = team.add_member(
            user_id=command.user_id,
            nickname=command.nickname,
            name=command.user_name,
            email=command.user_email,
            now=now,
        )

        saved = await self.repository.update(team)
        logger.info("User %s joined team %s as pending member %s", command.user_id, team.id, member.id)
        return saved


class ApproveMemberHandler(TeamHandler):
    async def handle(self, command: ApproveMemberCommand) -> Team:
        team = await self._load_team(command.team_id)
        require_team_admin(team, command.approver_user_id, "approve members")

        changed = team.approve_member(command.member_id, command.approver_user_id, now=self.clock())
        if not changed:
            logger.info(
                "Member %s of team %s is not pending, approval ignored",
                command.member_id,
                team.id,
            )
            return team

        saved = await self.repository.update(team)
        logger.info(
            "Member %s of team %s approved by %s",
            command.member_id,
            team.id,
            command.approver_user_id,
        )
        return saved


class RejectMemberHandler(TeamHandler):
    async def handle(self, command: RejectMemberCommand) -> Team:
        team = await self._load_team(command.team_id)
        require_team_admin(team, command.rejector_user_id, "reject members")

        changed = team.reject_member(command.member_id, now=self.clock())
        if not changed:
            logger.info(
                "Member %s of team %s is not pending, rejection ignored",
                command.member_id,
                team.id,
            )
            return team

        saved = await self.repository.update(team)
        logger.info("Member %s of team %s rejected", command.member_id, team.id)
        return saved


class UpdateTeamHandler(TeamHandler):
    async def handle(self, command: UpdateTeamCommand) -> Team:
        team = await self._load_team(command.team_id)
        require_team_admin(team, command.actor_user_id, "update the team")

        team.update_details(name=command.name, description=command.description, now=self.clock())
        return await self.repository.update(team)


class DeleteTeamHandler(TeamHandler):
    async def handle(self, command: DeleteTeamCommand) -> None:
        team = await self._load_team(command.team_id)
        require_team_admin(team, command.actor_user_id, "delete the team")

        await self.repository.delete(team.id)
        logger.info("Team %s deleted by %s", team.id, command.actor_user_id)


class GetMyTeamsHandler(TeamHandler):
    async def handle(self, query: GetMyTeamsQuery) -> list[Team]:
        return await self.repository.get_by_user_id(query.user_id)


class GetTeamByIdHandler(TeamHandler):
    async def handle(self, query: GetTeamByIdQuery) -> Team | None:
        """Return the team, or None when it is missing or not visible to the user.

        Both cases look the same to the caller so team existence does not leak.
        """
        team = await self.repository.get_by_id(query.team_id)
        if team is None:
            return None
        if not check_team_permission(team, query.user_id, Permission.VIEWER):
            return None
        return team


class GetPendingMembersHandler(TeamHandler):
    async def handle(self, query: GetPendingMembersQuery) -> list[TeamMember]:
        team = await self._load_team(query.team_id)
        require_team_admin(team, query.admin_user_id, "view pending members")
        return team.pending_members()


class ListAllTeamsHandler(TeamHandler):
    async def handle(self, query: ListAllTeamsQuery) -> list[Team]:
        return await self.repository.list_all()
