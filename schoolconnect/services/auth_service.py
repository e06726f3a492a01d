"""Business logic for registration, login sessions and authorization."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import ROLE_ADMIN, ROLE_USER
from ..database import get_session
from ..models import User, UserSession
from ..schemas import RegisterRequest
from ..security.secrets import MissingSecretError, require_secret

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    try:
        return _pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def contact_address_for(username: str) -> str:
    """Derive the contact address assigned to a handle at registration."""

    return f"{username}@{get_settings().contact_domain}"


def register_user(db: Session, payload: RegisterRequest) -> User:
    """Persist a new account; duplicate handles are rejected with 409."""

    existing = db.scalar(select(User).where(User.username == payload.username))
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="That username is already taken, try another one")

    role = ROLE_ADMIN if payload.username in get_settings().admin_handles else ROLE_USER
    user = User(
        username=payload.username,
        email=contact_address_for(payload.username),
        hashed_password=hash_password(payload.password),
        role=role,
    )

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        logger.info("Concurrent registration of %s rejected", payload.username)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="That username is already taken, try another one") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to register user %s", payload.username)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to register user") from exc

    logger.info("Registered account %s (role=%s)", user.username, user.role)
    return user


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """Return the account matching the credential pair, or ``None``."""

    user = db.scalar(select(User).where(User.username == username))
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def open_session(db: Session, user: User, *, expires_minutes: Optional[int] = None) -> str:
    """Persist a login session for ``user`` and return its signed bearer token."""

    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
    record = UserSession(user_id=user.id, created_at=now, expires_at=expires_at)

    try:
        expired = delete(UserSession).where(UserSession.expires_at < now).execution_options(synchronize_session=False)
        pruned = db.execute(expired).rowcount
        if pruned:
            logger.info("Pruned %d expired sessions", pruned)
        db.add(record)
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to open session for %s", user.username)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to start session") from exc

    payload = {"sub": str(user.id), "jti": str(record.id), "iat": now, "exp": expires_at}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.jwt_algorithm)


def close_session(db: Session, record: UserSession) -> None:
    """Destroy a login session so its token stops working."""

    try:
        db.delete(record)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to end session") from exc


def decode_access_token(token: str) -> tuple[UUID, UUID]:
    """Decode a bearer token, returning ``(user_id, session_id)``."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[get_settings().jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session") from exc

    try:
        return UUID(str(payload.get("sub"))), UUID(str(payload.get("jti")))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session payload") from exc


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> UserSession:
    """Resolve the live login session from the bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please log in first")

    user_id, session_id = decode_access_token(credentials.credentials)
    record = db.get(UserSession, session_id)
    if record is None or record.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session has ended, please log in again")
    return record


async def get_current_user(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the account owning the current session."""

    user = db.get(User, session.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session has ended, please log in again")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator role required")
    return user


def set_user_role(db: Session, username: str, role: str) -> User:
    """Grant or revoke the admin role of an account."""

    user = db.scalar(select(User).where(User.username == username))
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User '{username}' not found")
    if role not in {ROLE_USER, ROLE_ADMIN}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown role '{role}'")

    setattr(user, "role", role)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to update role") from exc

    db.refresh(user)
    logger.info("Role of %s set to %s", username, role)
    return user


__all__ = [
    "register_user",
    "authenticate_user",
    "contact_address_for",
    "open_session",
    "close_session",
    "decode_access_token",
    "hash_password",
    "verify_password",
    "get_current_session",
    "get_current_user",
    "require_admin",
    "set_user_role",
]
