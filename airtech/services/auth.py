"""Authentication service: hashed session tokens, bcrypt passwords."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

import bcrypt
from fastapi import Request, HTTPException

from airtech.db.repository import Repository
from airtech.schemas import Session, utcnow_iso

SESSION_COOKIE_NAME = "session_token"
SESSION_MAX_AGE_DAYS = 7


@dataclass
class AuthContext:
    user_id: str
    role: str  # 'technician' | 'admin'
    display_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def _hash_token(token: str) -> str:
    """SHA-256 hash of a session token for storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def create_session(
    repo: Repository,
    user_id: str,
    role: str,
    display_name: str = "",
    max_age_days: int = SESSION_MAX_AGE_DAYS,
) -> str:
    """Store a session and return the raw token (not the hash)."""
    token = secrets.token_urlsafe(48)
    expires_at = datetime.now(timezone.utc) + timedelta(days=max_age_days)
    await repo.add_session(Session(
        token_hash=_hash_token(token),
        role=role,
        user_id=user_id,
        display_name=display_name,
        expires_at=expires_at.isoformat(),
        created_at=utcnow_iso(),
    ))
    return token


async def validate_session(token: str, repo: Repository) -> Session | None:
    """Look up a session by token hash; expired sessions are removed."""
    token_hash = _hash_token(token)
    session = await repo.get_session(token_hash)
    if session is None:
        return None
    if datetime.fromisoformat(session.expires_at) <= datetime.now(timezone.utc):
        await repo.delete_session(token_hash)
        return None
    return session


async def remove_session(token: str, repo: Repository) -> None:
    await repo.delete_session(_hash_token(token))


async def get_current_user(request: Request, repo: Repository) -> AuthContext:
    """Read the session cookie, validate it, return AuthContext or raise 401."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    session = await validate_session(token, repo)
    if session is None:
        raise HTTPException(status_code=401, detail="Session expired")

    if session.role == "technician":
        tech = await repo.get_technician(session.user_id)
        if tech is None or not tech.is_active:
            raise HTTPException(status_code=401, detail="Session expired")

    return AuthContext(
        user_id=session.user_id,
        role=session.role,
        display_name=session.display_name,
    )
