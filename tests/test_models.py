"""Tests for the Team aggregate."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from teamspace.errors import InvalidStateError, NotFoundError
from teamspace.models.team import DEFAULT_MEMBER_ROLE, MemberStatus, Team, TeamMember

NOW = datetime(2024, 1, 15, 12, 0, 0)


@pytest.fixture
def team() -> Team:
    return Team.create(name="Team A", creator_id="u1", description="First team", now=NOW)


class TestTeamCreate:
    """Tests for building new teams."""

    def test_creator_is_only_admin(self, team: Team):
        """Test that the creator is the single admin and there are no members."""
        assert team.admins == {"u1"}
        assert team.members == []
        assert team.is_admin("u1")
        assert not team.is_admin("u2")

    def test_create_defaults(self, team: Team):
        """Test defaults of a freshly created team."""
        assert team.is_active is True
        assert team.invite_token is None
        assert team.invite_token_expiry is None
        assert team.created_at == NOW
        assert team.updated_at == NOW
        assert team.version == 0

    def test_name_required(self):
        """Test that an empty name is rejected."""
        with pytest.raises(InvalidStateError, match="Team name is required"):
            Team.create(name="", creator_id="u1")

    def test_blank_name_rejected(self):
        """Test that a whitespace-only name is rejected like on update."""
        with pytest.raises(InvalidStateError, match="Team name is required"):
            Team.create(name="   ", creator_id="u1")

    def test_name_length_limit(self):
        """Test that names longer than 255 characters are rejected."""
        with pytest.raises(ValidationError):
            Team.create(name="x" * 256, creator_id="u1")

    def test_admins_serialized_sorted(self):
        """Test that the admin set serializes as a sorted list."""
        team = Team(name="Sorted", admins={"zed", "amy", "kim"})
        assert team.model_dump()["admins"] == ["amy", "kim", "zed"]


class TestMembership:
    """Tests for adding, approving and rejecting members."""

    def test_add_member_is_pending(self, team: Team):
        """Test that a new member starts pending with the join time recorded."""
        later = NOW + timedelta(minutes=5)
        member = team.add_member("u2", "Bob", name="Bob B", email="bob@example.com", now=later)

        assert member.status == MemberStatus.PENDING
        assert member.role == DEFAULT_MEMBER_ROLE
        assert member.nickname == "Bob"
        assert member.email == "bob@example.com"
        assert member.joined_at == later
        assert member.approved_by is None
        assert team.updated_at == later
        assert team.members == [member]

    def test_add_member_blank_nickname(self, team: Team):
        """Test that a whitespace-only nickname is rejected."""
        with pytest.raises(InvalidStateError, match="Nickname is required"):
            team.add_member("u2", "  ", now=NOW)
        assert team.members == []

    def test_add_member_twice_rejected(self, team: Team):
        """Test that a user cannot hold two memberships."""
        team.add_member("u2", "Bob", now=NOW)
        with pytest.raises(InvalidStateError, match="already a member"):
            team.add_member("u2", "Bobby", now=NOW)
        assert len(team.members) == 1

    def test_rejected_user_cannot_rejoin(self, team: Team):
        """Test that a rejected membership still blocks joining again."""
        member = team.add_member("u2", "Bob", now=NOW)
        team.reject_member(member.id, now=NOW)

        with pytest.raises(InvalidStateError):
            team.add_member("u2", "Bob again", now=NOW)

    def test_admin_can_also_join_as_member(self, team: Team):
        """Test that admins may hold a separate membership."""
        member = team.add_member("u1", "Alice", now=NOW)
        assert member.is_pending
        assert team.is_admin("u1")

    def test_approve_member(self, team: Team):
        """Test that approval activates the member and records approver and time."""
        member = team.add_member("u2", "Bob", now=NOW)
        approved_at = NOW + timedelta(hours=1)

        assert team.approve_member(member.id, "u1", now=approved_at) is True
        assert member.status == MemberStatus.ACTIVE
        assert member.approved_by == "u1"
        assert member.approved_at == approved_at
        assert team.updated_at == approved_at

    def test_approve_is_idempotent(self, team: Team):
        """Test that approving twice keeps the first approval time."""
        member = team.add_member("u2", "Bob", now=NOW)
        first = NOW + timedelta(hours=1)
        team.approve_member(member.id, "u1", now=first)

        assert team.approve_member(member.id, "u1", now=first + timedelta(hours=1)) is False
        assert member.approved_at == first

    def test_reject_member(self, team: Team):
        """Test that rejection deactivates without recording an approver."""
        member = team.add_member("u2", "Bob", now=NOW)

        assert team.reject_member(member.id, now=NOW + timedelta(minutes=1)) is True
        assert member.status == MemberStatus.INACTIVE
        assert member.approved_by is None
        assert member.approved_at is None

    def test_inactive_member_cannot_be_approved(self, team: Team):
        """Test that a rejected member stays inactive."""
        member = team.add_member("u2", "Bob", now=NOW)
        team.reject_member(member.id, now=NOW)

        assert team.approve_member(member.id, "u1", now=NOW) is False
        assert member.is_inactive

    def test_active_member_cannot_be_rejected(self, team: Team):
        """Test that an approved member stays active."""
        member = team.add_member("u2", "Bob", now=NOW)
        team.approve_member(member.id, "u1", now=NOW)

        assert team.reject_member(member.id, now=NOW) is False
        assert member.is_active

    def test_unknown_member(self, team: Team):
        """Test that approving or rejecting an unknown member raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Member not found"):
            team.approve_member("missing", "u1")
        with pytest.raises(NotFoundError):
            team.reject_member("missing")

    def test_member_lists(self, team: Team):
        """Test the pending and active member filters."""
        pending = team.add_member("u2", "Bob", now=NOW)
        active = team.add_member("u3", "Carol", now=NOW)
        inactive = team.add_member("u4", "Dan", now=NOW)
        team.approve_member(active.id, "u1", now=NOW)
        team.reject_member(inactive.id, now=NOW)

        assert team.pending_members() == [pending]
        assert team.active_members() == [active]
        assert team.has_member("u4")
        assert not team.has_member("u5")


class TestVisibility:
    """Tests for who may see a team."""

    def test_visible_to_admin_active_and_pending(self, team: Team):
        """Test that admins, active and pending members see the team."""
        pending = team.add_member("u2", "Bob", now=NOW)
        active = team.add_member("u3", "Carol", now=NOW)
        team.approve_member(active.id, "u1", now=NOW)

        assert team.is_visible_to("u1")
        assert team.is_visible_to(pending.user_id)
        assert team.is_visible_to(active.user_id)

    def test_hidden_from_inactive_and_strangers(self, team: Team):
        """Test that rejected members and strangers do not see the team."""
        member = team.add_member("u2", "Bob", now=NOW)
        team.reject_member(member.id, now=NOW)

        assert not team.is_visible_to("u2")
        assert not team.is_visible_to("stranger")


class TestInviteToken:
    """Tests for invite token validity."""

    def test_no_token_is_invalid(self, team: Team):
        """Test that a team without a token has no valid token."""
        assert team.is_token_valid(NOW) is False

    def test_token_without_expiry_is_valid(self, team: Team):
        """Test that a token without expiry never expires."""
        team.set_invite_token("abc", None, now=NOW)
        assert team.is_token_valid(NOW + timedelta(days=365))

    def test_token_valid_until_expiry(self, team: Team):
        """Test that a token stops working at its expiry instant."""
        expiry = NOW + timedelta(hours=1)
        team.set_invite_token("abc", expiry, now=NOW)

        assert team.is_token_valid(NOW)
        assert team.is_token_valid(expiry - timedelta(seconds=1))
        assert not team.is_token_valid(expiry)
        assert not team.is_token_valid(expiry + timedelta(hours=1))

    def test_set_token_replaces_previous(self, team: Team):
        """Test that setting a token replaces the previous one."""
        team.set_invite_token("old", NOW + timedelta(hours=1), now=NOW)
        later = NOW + timedelta(minutes=10)
        team.set_invite_token("new", NOW + timedelta(hours=2), now=later)

        assert team.invite_token == "new"
        assert team.invite_token_expiry == NOW + timedelta(hours=2)
        assert team.updated_at == later


class TestUpdateDetails:
    """Tests for renaming teams."""

    def test_update_name_and_description(self, team: Team):
        """Test changing both name and description."""
        later = NOW + timedelta(hours=1)
        team.update_details(name="Renamed", description="New text", now=later)

        assert team.name == "Renamed"
        assert team.description == "New text"
        assert team.updated_at == later

    def test_update_keeps_unset_fields(self, team: Team):
        """Test that omitted fields are left alone."""
        team.update_details(description="Only this", now=NOW)
        assert team.name == "Team A"
        assert team.description == "Only this"

    def test_blank_name_rejected(self, team: Team):
        """Test that a whitespace-only name is rejected on update."""
        with pytest.raises(InvalidStateError):
            team.update_details(name="   ")
        assert team.name == "Team A"


class TestTeamMember:
    """Tests for the TeamMember model."""

    def test_status_predicates(self):
        """Test the status helper properties."""
        member = TeamMember(user_id="u2")
        assert member.is_pending
        member.status = MemberStatus.ACTIVE
        assert member.is_active
        member.status = MemberStatus.INACTIVE
        assert member.is_inactive

    def test_member_ids_are_unique(self):
        """Test that each member gets its own ID."""
        assert TeamMember(user_id="u2").id != TeamMember(user_id="u2").id
