"""Pydantic schemas for Teams API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from teamspace.engine.invites import DEFAULT_EXPIRY_HOURS, MAX_EXPIRY_HOURS
from teamspace.models.team import MemberStatus, Team, TeamMember


def _require_text(value: str | None) -> str | None:
    """Strip surrounding whitespace and reject values left empty."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class TeamCreate(BaseModel):
    """Schema for creating a new team."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _require_text(v)


class TeamUpdate(BaseModel):
    """Schema for updating a team."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        return _require_text(v)


class GenerateInviteTokenRequest(BaseModel):
    """Request to issue a new invite token. The body may be omitted."""

    expiry_hours: int = Field(default=DEFAULT_EXPIRY_HOURS, ge=1, le=MAX_EXPIRY_HOURS)


class InviteTokenResponse(BaseModel):
    invite_token: str
    expiry: datetime


class JoinTeamRequest(BaseModel):
    """Request to join a team with an invite token."""

    invite_token: str = Field(..., min_length=1)
    nickname: str = Field(..., min_length=1, max_length=255)

    @field_validator("invite_token", "nickname")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class TeamMemberInfo(BaseModel):
    """Information about a team member."""

    id: str
    user_id: str
    name: str
    email: str
    nickname: str
    role: str
    status: MemberStatus
    joined_at: datetime
    approved_by: str | None
    approved_at: datetime | None

    @classmethod
    def from_member(cls, member: TeamMember) -> "TeamMemberInfo":
        return cls.model_validate(member.model_dump())


class TeamDetail(BaseModel):
    """Full team detail including members.

    The invite token is only included for admins.
    """

    id: str
    name: str
    description: str | None
    admins: list[str]
    members: list[TeamMemberInfo]
    invite_token: str | None = None
    invite_token_expiry: datetime | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    version: int
    your_role: str  # admin, member, pending

    @classmethod
    def from_team(cls, team: Team, viewer_id: str) -> "TeamDetail":
        is_admin = team.is_admin(viewer_id)
        if is_admin:
            your_role = "admin"
        elif any(m.user_id == viewer_id and m.is_pending for m in team.members):
            your_role = "pending"
        else:
            your_role = "member"

        return cls(
            id=team.id,
            name=team.name,
            description=team.description,
            admins=sorted(team.admins),
            members=[TeamMemberInfo.from_member(m) for m in team.members],
            invite_token=team.invite_token if is_admin else None,
            invite_token_expiry=team.invite_token_expiry if is_admin else None,
            is_active=team.is_active,
            created_at=team.created_at,
            updated_at=team.updated_at,
            version=team.version,
            your_role=your_role,
        )
