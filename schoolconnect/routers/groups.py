"""Group chat routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import GroupChat, User
from ..schemas import GroupCreateRequest, GroupResponse
from ..services import create_group, get_current_user, get_group, list_groups

router = APIRouter(prefix="/api/groups", tags=["groups"])


def _to_group_response(group: GroupChat) -> GroupResponse:
    members = list(group.members)
    if group.created_by in members:
        members.remove(group.created_by)
        members.insert(0, group.created_by)
    return GroupResponse(
        id=group.id,
        name=group.name,
        created_by=group.created_by,
        members=members,
        admins=group.admins,
        created_at=group.created_at,
    )


@router.get("", response_model=list[GroupResponse])
async def list_groups_endpoint(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[GroupResponse]:
    return [_to_group_response(group) for group in list_groups(db, viewer=current_user.username)]


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group_endpoint(
    payload: GroupCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupResponse:
    return _to_group_response(create_group(db, current_user, payload))


@router.get("/{group_id}", response_model=GroupResponse)
async def group_detail_endpoint(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupResponse:
    return _to_group_response(get_group(db, group_id=group_id, viewer=current_user.username))
