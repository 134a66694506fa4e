"""Technician management API. Only admins may create, edit or deactivate."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_admin, require_auth
from airtech.schemas import Technician, initials_from_name
from airtech.services.auth import AuthContext, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/technicians", tags=["technicians"])


def _technician_payload(body: dict) -> dict:
    """Strip fields clients may not set directly; hash a plain password."""
    payload = {k: v for k, v in Technician.alias_keys(body).items() if k not in ("password", "passwordHash", "id")}
    if body.get("password"):
        payload["passwordHash"] = hash_password(body["password"])
    return payload


@router.get("")
async def list_technicians(
    active_only: bool = Query(False, alias="activeOnly"),
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    techs = await repo.list_technicians(active_only=active_only)
    return [t.public_doc() for t in techs]


@router.get("/{tech_id}")
async def get_technician(
    tech_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    tech = await repo.get_technician(tech_id)
    if not tech:
        raise HTTPException(404, "Technician not found")
    return tech.public_doc()


@router.post("", status_code=201)
async def create_technician(
    body: dict,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    name = (body.get("name") or "").strip()
    if not name:
        raise HTTPException(400, "name is required")

    payload = _technician_payload(body)
    payload["name"] = name
    payload.setdefault("initials", initials_from_name(name))
    tech = await repo.add_technician(payload)
    logger.info("Created technician %s (%s)", tech.id, tech.name)
    return tech.public_doc()


@router.put("/{tech_id}")
async def update_technician(
    tech_id: str,
    body: dict,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    tech = await repo.update_technician(tech_id, _technician_payload(body))
    if not tech:
        raise HTTPException(404, "Technician not found")
    if not tech.is_active:
        await repo.delete_user_sessions(tech_id)
    return tech.public_doc()


@router.delete("/{tech_id}")
async def deactivate_technician(
    tech_id: str,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    tech = await repo.update_technician(tech_id, {"isActive": False})
    if not tech:
        raise HTTPException(404, "Technician not found")
    await repo.delete_user_sessions(tech_id)
    logger.info("Deactivated technician %s", tech_id)
    return {"ok": True, "id": tech.id}
