"""Team aggregate and its member records."""

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_serializer

from teamspace.errors import InvalidStateError, NotFoundError

DEFAULT_MEMBER_ROLE = "Member"


def generate_id() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MemberStatus(StrEnum):
    """Membership states. Only PENDING may change."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class TeamMember(BaseModel):
    """A single user's membership in a team."""

    id: str = Field(default_factory=generate_id, description="Member ID, unique within the team")
    user_id: str = Field(..., description="Identity of the joining user")
    name: str = Field(default="", description="Name reported by the identity provider")
    email: str = Field(default="", description="Email reported by the identity provider")
    nickname: str = Field(default="", description="Display name chosen when joining")
    role: str = Field(default=DEFAULT_MEMBER_ROLE, description="Free-form role label")
    status: MemberStatus = MemberStatus.PENDING
    joined_at: datetime = Field(default_factory=utcnow)
    invited_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == MemberStatus.PENDING

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    @property
    def is_inactive(self) -> bool:
        return self.status == MemberStatus.INACTIVE


class Team(BaseModel):
    """Team aggregate.

    Owns the admin set, the ordered member list and the current invite token.
    State changes go through the mutation methods below, each of which
    refreshes ``updated_at``.
    """

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    admins: set[str] = Field(default_factory=set, description="User IDs with admin rights")
    members: list[TeamMember] = Field(default_factory=list, description="Members in join order")
    invite_token: str | None = None
    invite_token_expiry: datetime | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = Field(default=0, description="Optimistic concurrency counter")

    @field_serializer("admins")
    def _serialize_admins(self, admins: set[str]) -> list[str]:
        return sorted(admins)

    @classmethod
    def create(
        cls,
        name: str,
        creator_id: str,
        description: str | None = None,
        now: datetime | None = None,
    ) -> "Team":
        """Build a new team whose only admin is its creator."""
        if not name.strip():
            raise InvalidStateError("Team name is required")
        now = now or utcnow()
        return cls(
            name=name,
            description=description,
            admins={creator_id},
            created_at=now,
            updated_at=now,
        )

    # Predicates

    def is_admin(self, user_id: str) -> bool:
        return user_id in self.admins

    def is_token_valid(self, now: datetime | None = None) -> bool:
        """Whether the current invite token can still be used."""
        if self.invite_token is None:
            return False
        if self.invite_token_expiry is None:
            return True
        return self.invite_token_expiry > (now or utcnow())

    def find_member(self, member_id: str) -> TeamMember | None:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def has_member(self, user_id: str) -> bool:
        """Whether the user has a membership row, whatever its status."""
        return any(member.user_id == user_id for member in self.members)

    def pending_members(self) -> list[TeamMember]:
        return [member for member in self.members if member.is_pending]

    def active_members(self) -> list[TeamMember]:
        return [member for member in self.members if member.is_active]

    def is_visible_to(self, user_id: str) -> bool:
        """Admins, active members and pending members may see the team."""
        if self.is_admin(user_id):
            return True
        return any(
            member.user_id == user_id and (member.is_active or member.is_pending)
            for member in self.members
        )

    # Mutations

    def add_member(
        self,
        user_id: str,
        nickname: str,
        name: str = "",
        email: str = "",
        now: datetime | None = None,
    ) -> TeamMember:
        """Append a pending membership for ``user_id``.

        Raises:
            InvalidStateError: If the user already has a membership row or the
                nickname is blank.
        """
        if not nickname.strip():
            raise InvalidStateError("Nickname is required")
        if self.has_member(user_id):
            raise InvalidStateError("User is already a member of this team")

        now = now or utcnow()
        member = TeamMember(
            user_id=user_id,
            name=name,
            email=email,
            nickname=nickname,
            status=MemberStatus.PENDING,
            joined_at=now,
        )
        self.members.append(member)
        self.updated_at = now
        return member

    def approve_member(
        self, member_id: str, approver_id: str, now: datetime | None = None
    ) -> bool:
        """Move a pending member to active.

        Returns:
            True if the member changed, False if it was no longer pending.

        Raises:
            NotFoundError: If no member has ``member_id``.
        """
        member = self._require_member(member_id)
        if not member.is_pending:
            return False

        now = now or utcnow()
        member.status = MemberStatus.ACTIVE
        member.approved_by = approver_id
        member.approved_at = now
        self.updated_at = now
        return True

    def reject_member(self, member_id: str, now: datetime | None = None) -> bool:
        """Move a pending member to inactive.

        Unlike approval, the rejecting admin and time are not recorded.
        """
        member = self._require_member(member_id)
        if not member.is_pending:
            return False

        member.status = MemberStatus.INACTIVE
        self.updated_at = now or utcnow()
        return True

    def set_invite_token(
        self, token: str, expiry: datetime | None, now: datetime | None = None
    ) -> None:
        """Replace the invite token. The previous token stops working immediately."""
        self.invite_token = token
        self.invite_token_expiry = expiry
        self.updated_at = now or utcnow()

    def update_details(
        self,
        name: str | None = None,
        description: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Change the team's name and/or description."""
        if name is not None:
            if not name.strip():
                raise InvalidStateError("Team name is required")
            self.name = name
        if description is not None:
            self.description = description
        self.updated_at = now or utcnow()

    def _require_member(self, member_id: str) -> TeamMember:
        member = self.find_member(member_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member
