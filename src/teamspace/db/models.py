"""SQLAlchemy models for TeamSpace database."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from teamspace.models.team import generate_id, utcnow


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TeamDB(Base):
    """Team row. Admins and members live in child tables."""

    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    invite_token: Mapped[str | None] = mapped_column(String(128), index=True)
    invite_token_expiry: Mapped[datetime | None] = mapped_column(DateTime)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    admins: Mapped[list["TeamAdminDB"]] = relationship(
        "TeamAdminDB", back_populates="team", cascade="all, delete-orphan"
    )
    members: Mapped[list["TeamMemberDB"]] = relationship(
        "TeamMemberDB",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMemberDB.position",
    )

    # The repository sets version explicitly; a flush against a moved row raises StaleDataError
    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}


class TeamAdminDB(Base):
    """Admin rights of a user on a team."""

    __tablename__ = "team_admins"

    team_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True, index=True)

    team: Mapped["TeamDB"] = relationship("TeamDB", back_populates="admins")


class TeamMemberDB(Base):
    """Team membership row."""

    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    team_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    nickname: Mapped[str] = mapped_column(String(255), default="")
    role: Mapped[str] = mapped_column(String(50), default="Member")
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    invited_by: Mapped[str | None] = mapped_column(String(255))
    approved_by: Mapped[str | None] = mapped_column(String(255))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime)

    team: Mapped["TeamDB"] = relationship("TeamDB", back_populates="members")
