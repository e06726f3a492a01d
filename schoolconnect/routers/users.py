"""Account directory routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import AccountResponse, RoleUpdateRequest, UserSummary
from ..services import get_current_user, list_accounts, require_admin, set_user_role

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserSummary])
async def list_users_endpoint(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[UserSummary]:
    return [UserSummary.model_validate(user) for user in list_accounts(db)]


@router.post("/{username}/role", response_model=AccountResponse)
async def update_role_endpoint(
    username: str,
    payload: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_session),
) -> AccountResponse:
    user = set_user_role(db, username, payload.role)
    return AccountResponse.model_validate(user)
