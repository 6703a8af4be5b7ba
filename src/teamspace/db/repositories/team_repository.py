"""Team repository for database operations."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from teamspace.db.models import TeamAdminDB, TeamDB, TeamMemberDB
from teamspace.engine.ports import Clock, TeamRepositoryPort
from teamspace.errors import ConcurrencyConflictError, NotFoundError
from teamspace.models.team import MemberStatus, Team, TeamMember, generate_id, utcnow


def _member_to_domain(row: TeamMemberDB) -> TeamMember:
    return TeamMember(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        email=row.email,
        nickname=row.nickname,
        role=row.role,
        status=MemberStatus(row.status),
        joined_at=row.joined_at,
        invited_by=row.invited_by,
        approved_by=row.approved_by,
        approved_at=row.approved_at,
    )


def _to_domain(row: TeamDB) -> Team:
    return Team(
        id=row.id,
        name=row.name,
        description=row.description,
        admins={admin.user_id for admin in row.admins},
        members=[_member_to_domain(member) for member in row.members],
        invite_token=row.invite_token,
        invite_token_expiry=row.invite_token_expiry,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )


def _apply_member(row: TeamMemberDB, member: TeamMember, position: int) -> None:
    row.position = position
    row.user_id = member.user_id
    row.name = member.name
    row.email = member.email
    row.nickname = member.nickname
    row.role = member.role
    row.status = member.status.value
    row.joined_at = member.joined_at
    row.invited_by = member.invited_by
    row.approved_by = member.approved_by
    row.approved_at = member.approved_at


class TeamRepository(TeamRepositoryPort):
    """Repository for Team aggregates.

    Converts between the ``Team`` aggregate and its rows. Callers get detached
    pydantic copies, so saving a stale copy is detected by the version check.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock

    @staticmethod
    def _select():
        return select(TeamDB).options(
            selectinload(TeamDB.admins),
            selectinload(TeamDB.members),
        )

    async def _get_row(self, team_id: str) -> TeamDB | None:
        result = await self.session.execute(self._select().where(TeamDB.id == team_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, team_id: str) -> Team | None:
        """Get a team by ID with admins and members loaded."""
        row = await self._get_row(team_id)
        return _to_domain(row) if row else None

    async def get_by_user_id(self, user_id: str) -> list[Team]:
        """Get teams the user administers or is an active member of."""
        admin_of = select(TeamAdminDB.team_id).where(TeamAdminDB.user_id == user_id)
        active_in = select(TeamMemberDB.team_id).where(
            TeamMemberDB.user_id == user_id,
            TeamMemberDB.status == MemberStatus.ACTIVE.value,
        )
        result = await self.session.execute(
            self._select()
            .where(or_(TeamDB.id.in_(admin_of), TeamDB.id.in_(active_in)))
            .order_by(TeamDB.name)
        )
        return [_to_domain(row) for row in result.scalars().all()]

    async def get_by_invite_token(self, invite_token: str) -> Team | None:
        """Get the team currently carrying exactly this invite token."""
        result = await self.session.execute(
            self._select().where(TeamDB.invite_token == invite_token).limit(1)
        )
        row = result.scalars().first()
        return _to_domain(row) if row else None

    async def list_all(self) -> list[Team]:
        result = await self.session.execute(self._select().order_by(TeamDB.name))
        return [_to_domain(row) for row in result.scalars().all()]

    async def create(self, team: Team) -> Team:
        """Insert a new team with a fresh ID and timestamps."""
        now = self.clock()
        row = TeamDB(
            id=generate_id(),
            name=team.name,
            description=team.description,
            invite_token=team.invite_token,
            invite_token_expiry=team.invite_token_expiry,
            is_active=team.is_active,
            created_at=now,
            updated_at=now,
            version=1,
        )
        row.admins = [TeamAdminDB(user_id=user_id) for user_id in sorted(team.admins)]
        row.members = [
            _new_member_row(member, position) for position, member in enumerate(team.members)
        ]
        self.session.add(row)
        await self.session.flush()
        return _to_domain(row)

    async def update(self, team: Team) -> Team:
        """Write the aggregate back, bumping its version.

        Raises:
            NotFoundError: If the team no longer exists.
            ConcurrencyConflictError: If the team was saved by someone else
                since ``team`` was loaded.
        """
        row = await self._get_row(team.id)
        if row is None:
            raise NotFoundError("Team not found")
        if row.version != team.version:
            raise ConcurrencyConflictError("Team was modified concurrently, reload and retry")

        row.name = team.name
        row.description = team.description
        row.invite_token = team.invite_token
        row.invite_token_expiry = team.invite_token_expiry
        row.is_active = team.is_active
        row.updated_at = self.clock()
        row.version = team.version + 1

        existing_admins = {admin.user_id: admin for admin in row.admins}
        row.admins = [
            existing_admins.get(user_id) or TeamAdminDB(user_id=user_id)
            for user_id in sorted(team.admins)
        ]

        # Members are never removed, only appended or changed
        existing_members = {member.id: member for member in row.members}
        for position, member in enumerate(team.members):
            member_row = existing_members.get(member.id)
            if member_row is None:
                row.members.append(_new_member_row(member, position))
            else:
                _apply_member(member_row, member, position)

        try:
            await self.session.flush()
        except StaleDataError as e:
            raise ConcurrencyConflictError(
                "Team was modified concurrently, reload and retry"
            ) from e

        return _to_domain(row)

    async def delete(self, team_id: str) -> None:
        """Delete a team and its memberships."""
        row = await self._get_row(team_id)
        if row is None:
            return
        await self.session.delete(row)
        await self.session.flush()


def _new_member_row(member: TeamMember, position: int) -> TeamMemberDB:
    row = TeamMemberDB(id=member.id)
    _apply_member(row, member, position)
    return row
