from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...domain.common import SuccessResponse
from ...domain.team import (
    TeamListResponse,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
    TeamReorderRequest,
)
from ...repositories.team import TeamRepository
from ...services.catalogs import TeamRoster
from ...services.revalidation import RevalidationService
from ..dependencies import (
    assert_admin,
    get_revalidation_service,
    get_team_repository,
    get_team_roster,
)

router = APIRouter(prefix="/api/admin/team", tags=["team"], dependencies=[Depends(assert_admin)])

TEAM_PATHS = ("/masterskaja", "/")


def _member_id(raw: str) -> int:
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if not value.is_integer() or value <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid member id")
    return int(value)


@router.get("", response_model=TeamListResponse)
async def list_team(team_repo: TeamRepository = Depends(get_team_repository)) -> TeamListResponse:
    return TeamListResponse(members=await team_repo.list_all())


@router.post("", response_model=TeamMemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    payload: TeamMemberCreate,
    team_repo: TeamRepository = Depends(get_team_repository),
    roster: TeamRoster = Depends(get_team_roster),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> TeamMemberResponse:
    if not payload.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    member = await team_repo.create(payload.model_dump())
    roster.invalidate()
    await revalidation.revalidate(TEAM_PATHS)
    return TeamMemberResponse(member=member)


@router.post("/reorder", response_model=SuccessResponse)
async def reorder_team(
    payload: TeamReorderRequest,
    team_repo: TeamRepository = Depends(get_team_repository),
    roster: TeamRoster = Depends(get_team_roster),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SuccessResponse:
    member_ids = payload.member_ids()
    if not member_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid order")
    await team_repo.reorder(member_ids)
    roster.invalidate()
    await revalidation.revalidate(TEAM_PATHS)
    return SuccessResponse()


@router.patch("/{member_id}", response_model=TeamMemberResponse)
async def update_member(
    member_id: str,
    payload: TeamMemberUpdate,
    team_repo: TeamRepository = Depends(get_team_repository),
    roster: TeamRoster = Depends(get_team_roster),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> TeamMemberResponse:
    member = await team_repo.update(_member_id(member_id), payload.model_dump(exclude_unset=True))
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    roster.invalidate()
    await revalidation.revalidate(TEAM_PATHS)
    return TeamMemberResponse(member=member)


@router.delete("/{member_id}", response_model=SuccessResponse)
async def delete_member(
    member_id: str,
    team_repo: TeamRepository = Depends(get_team_repository),
    roster: TeamRoster = Depends(get_team_roster),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SuccessResponse:
    await team_repo.delete(_member_id(member_id))
    roster.invalidate()
    await revalidation.revalidate(TEAM_PATHS)
    return SuccessResponse()
