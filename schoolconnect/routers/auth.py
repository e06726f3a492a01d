"""Authentication and session routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User, UserSession
from ..schemas import AccountResponse, LoginRequest, LoginResponse, MessageOnlyResponse, RegisterRequest, RegisterResponse
from ..services import (
    authenticate_user,
    close_session,
    get_current_session,
    get_current_user,
    open_session,
    register_user,
)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    payload: RegisterRequest,
    db: Session = Depends(get_session),
) -> RegisterResponse:
    user = register_user(db, payload)
    return RegisterResponse(message="Account created", user=AccountResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login_endpoint(
    payload: LoginRequest,
    db: Session = Depends(get_session),
) -> LoginResponse:
    user = authenticate_user(db, payload.username.strip(), payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Wrong username or password")
    token = open_session(db, user)
    return LoginResponse(message="Logged in", access_token=token, user=AccountResponse.model_validate(user))


@router.post("/logout", response_model=MessageOnlyResponse)
async def logout_endpoint(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_session),
) -> MessageOnlyResponse:
    close_session(db, session)
    return MessageOnlyResponse(message="Logged out")


@router.get("/me", response_model=AccountResponse)
async def me_endpoint(current_user: User = Depends(get_current_user)) -> AccountResponse:
    return AccountResponse.model_validate(current_user)
