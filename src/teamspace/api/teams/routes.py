"""Teams API routes.

Every route turns its request into one command or query and hands it to the
dispatcher. Domain errors are mapped to status codes by the handlers
registered in ``teamspace.api.server``.
"""

from fastapi import APIRouter, HTTPException, Request, status

from teamspace.api.dependencies import CurrentIdentity, TeamDispatcher
from teamspace.api.rate_limit import JOIN_RATE_LIMIT, limiter
from teamspace.api.teams.schemas import (
    GenerateInviteTokenRequest,
    InviteTokenResponse,
    JoinTeamRequest,
    TeamCreate,
    TeamDetail,
    TeamMemberInfo,
    TeamUpdate,
)
from teamspace.engine.commands import (
    ApproveMemberCommand,
    CreateTeamCommand,
    DeleteTeamCommand,
    GenerateInviteTokenCommand,
    GetMyTeamsQuery,
    GetPendingMembersQuery,
    GetTeamByIdQuery,
    JoinTeamCommand,
    RejectMemberCommand,
    UpdateTeamCommand,
)

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.post("/", response_model=TeamDetail, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> TeamDetail:
    """Create a new team. The creator becomes its only admin."""
    team = await dispatcher.dispatch(
        CreateTeamCommand(
            name=team_data.name,
            description=team_data.description,
            creator_user_id=identity.user_id,
        )
    )
    return TeamDetail.from_team(team, identity.user_id)


@router.get("/my-teams", response_model=list[TeamDetail])
async def list_my_teams(
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> list[TeamDetail]:
    """List teams the current user administers or is an active member of."""
    teams = await dispatcher.dispatch(GetMyTeamsQuery(user_id=identity.user_id))
    return [TeamDetail.from_team(team, identity.user_id) for team in teams]


@router.post("/join", response_model=TeamDetail)
@limiter.limit(JOIN_RATE_LIMIT)
async def join_team(
    request: Request,
    join_data: JoinTeamRequest,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> TeamDetail:
    """Request membership with an invite token. The member starts as pending."""
    team = await dispatcher.dispatch(
        JoinTeamCommand(
            invite_token=join_data.invite_token,
            nickname=join_data.nickname,
            user_id=identity.user_id,
            user_email=identity.email,
            user_name=identity.display_name,
        )
    )
    return TeamDetail.from_team(team, identity.user_id)


@router.get("/{team_id}", response_model=TeamDetail)
async def get_team(
    team_id: str,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> TeamDetail:
    """Get a team by ID with member list."""
    team = await dispatcher.dispatch(GetTeamByIdQuery(team_id=team_id, user_id=identity.user_id))

    # Missing and not-visible teams look the same
    if team is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team not found",
        )

    return TeamDetail.from_team(team, identity.user_id)


@router.put("/{team_id}", response_model=TeamDetail)
async def update_team(
    team_id: str,
    team_data: TeamUpdate,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> TeamDetail:
    """Update a team's name or description. Only admins can update."""
    update_fields = team_data.model_dump(exclude_unset=True)
    team = await dispatcher.dispatch(
        UpdateTeamCommand(team_id=team_id, actor_user_id=identity.user_id, **update_fields)
    )
    return TeamDetail.from_team(team, identity.user_id)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team_id: str,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> None:
    """Delete a team and all its memberships. Only admins can delete."""
    await dispatcher.dispatch(DeleteTeamCommand(team_id=team_id, actor_user_id=identity.user_id))


@router.post("/{team_id}/invite-token", response_model=InviteTokenResponse)
async def generate_invite_token(
    team_id: str,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
    token_data: GenerateInviteTokenRequest | None = None,
) -> InviteTokenResponse:
    """Issue a new invite token, replacing the previous one."""
    if token_data is None:
        token_data = GenerateInviteTokenRequest()

    invite = await dispatcher.dispatch(
        GenerateInviteTokenCommand(
            team_id=team_id,
            admin_user_id=identity.user_id,
            expiry_hours=token_data.expiry_hours,
        )
    )
    return InviteTokenResponse(invite_token=invite.token, expiry=invite.expiry)


# Member management endpoints


@router.get("/{team_id}/members/pending", response_model=list[TeamMemberInfo])
async def list_pending_members(
    team_id: str,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> list[TeamMemberInfo]:
    """List members waiting for approval. Only admins can see them."""
    members = await dispatcher.dispatch(
        GetPendingMembersQuery(team_id=team_id, admin_user_id=identity.user_id)
    )
    return [TeamMemberInfo.from_member(member) for member in members]


@router.post("/{team_id}/members/{member_id}/approve", response_model=TeamDetail)
async def approve_member(
    team_id: str,
    member_id: str,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> TeamDetail:
    """Approve a pending member."""
    team = await dispatcher.dispatch(
        ApproveMemberCommand(
            team_id=team_id,
            member_id=member_id,
            approver_user_id=identity.user_id,
        )
    )
    return TeamDetail.from_team(team, identity.user_id)


@router.post("/{team_id}/members/{member_id}/reject", response_model=TeamDetail)
async def reject_member(
    team_id: str,
    member_id: str,
    identity: CurrentIdentity,
    dispatcher: TeamDispatcher,
) -> TeamDetail:
    """Reject a pending member."""
    team = await dispatcher.dispatch(
        RejectMemberCommand(
            team_id=team_id,
            member_id=member_id,
            rejector_user_id=identity.user_id,
        )
    )
    return TeamDetail.from_team(team, identity.user_id)
