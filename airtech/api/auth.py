"""Auth API: technician and admin login, logout, current user."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from airtech.config import Settings
from airtech.db.repository import Repository
from airtech.dependencies import get_app_settings, get_repository, require_admin, require_auth
from airtech.services.auth import (
    AuthContext, SESSION_COOKIE_NAME, create_session, remove_session, verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
admin_router = APIRouter(prefix="/api/admin/auth", tags=["auth"])


def _session_response(content: dict, token: str, max_age_days: int) -> JSONResponse:
    response = JSONResponse(content=content)
    response.set_cookie(
        SESSION_COOKIE_NAME, token,
        httponly=True, samesite="lax",
        max_age=86400 * max_age_days,
    )
    return response


async def _logout(request: Request, repo: Repository) -> JSONResponse:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        await remove_session(token, repo)
    response = JSONResponse(content={"message": "Logged out successfully"})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


# ── Technician ────────────────────────────────────────────

@router.post("/login")
async def login(
    body: dict,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    technician_id = body.get("technicianId")
    password = body.get("password")
    if not technician_id or not password:
        raise HTTPException(400, "technicianId and password are required")

    tech = await repo.get_technician(technician_id)
    if not tech or not tech.is_active or not verify_password(password, tech.password_hash):
        logger.info("Failed technician login for %s", technician_id)
        raise HTTPException(401, "Invalid credentials")

    token = await create_session(
        repo, tech.id, "technician", tech.name, settings.auth.session_max_age_days,
    )
    return _session_response(
        {"message": "Logged in successfully", "technician": tech.public_doc()},
        token, settings.auth.session_max_age_days,
    )


@router.get("/me")
async def get_me(
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    if auth.role != "technician":
        raise HTTPException(401, "Not logged in")
    tech = await repo.get_technician(auth.user_id)
    if not tech:
        raise HTTPException(404, "Technician not found")
    return tech.public_doc()


@router.post("/logout")
async def logout(request: Request, repo: Repository = Depends(get_repository)):
    return await _logout(request, repo)


# ── Admin ─────────────────────────────────────────────────

@admin_router.post("/login")
async def admin_login(
    body: dict,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    username = body.get("username")
    password = body.get("password")
    if not username or not password:
        raise HTTPException(400, "username and password are required")

    cfg = settings.auth
    if username != cfg.admin_username or not verify_password(password, cfg.admin_password_hash):
        logger.info("Failed admin login for %s", username)
        raise HTTPException(401, "Invalid credentials")

    token = await create_session(
        repo, cfg.admin_username, "admin", cfg.admin_display_name, cfg.session_max_age_days,
    )
    return _session_response(
        {"message": "Logged in successfully", "username": cfg.admin_username},
        token, cfg.session_max_age_days,
    )


@admin_router.get("/me")
async def admin_me(auth: AuthContext = Depends(require_admin)):
    return {"username": auth.user_id, "displayName": auth.display_name, "role": auth.role}


@admin_router.post("/logout")
async def admin_logout(request: Request, repo: Repository = Depends(get_repository)):
    return await _logout(request, repo)
