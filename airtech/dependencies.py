"""FastAPI dependency providers for the repository, settings, and role enforcement."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from airtech.config import Settings
from airtech.db.repository import Repository
from airtech.services.auth import AuthContext, get_current_user
from airtech.services.tripletex import TripletexClient


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tripletex(request: Request) -> TripletexClient:
    return request.app.state.tripletex


async def require_auth(
    request: Request,
    repo: Repository = Depends(get_repository),
) -> AuthContext:
    """Require a valid authenticated session. Returns AuthContext."""
    return await get_current_user(request, repo)


def require_role(*allowed_roles: str):
    """Factory: returns a dependency that enforces role membership."""
    async def _check(auth: AuthContext = Depends(require_auth)) -> AuthContext:
        if auth.role not in allowed_roles:
            raise HTTPException(403, "Insufficient permissions")
        return auth
    return _check


require_admin = require_role("admin")
