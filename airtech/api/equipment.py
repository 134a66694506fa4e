"""Equipment API. Removal is a soft delete: the unit is marked inactive."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_auth
from airtech.schemas import Equipment
from airtech.services.auth import AuthContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/equipment", tags=["equipment"])


@router.get("")
async def list_equipment(
    customer_id: str | None = Query(None, alias="customerId"),
    include_inactive: bool = Query(False, alias="includeInactive"),
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    equipment = await repo.list_equipment(customer_id=customer_id, include_inactive=include_inactive)
    return [e.to_doc() for e in equipment]


@router.get("/{equipment_id}")
async def get_equipment(
    equipment_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    eq = await repo.get_equipment(equipment_id)
    if not eq:
        raise HTTPException(404, "Equipment not found")
    return eq.to_doc()


@router.post("", status_code=201)
async def create_equipment(
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    payload = {k: v for k, v in Equipment.alias_keys(body).items() if k not in ("status", "serviceStatus")}
    if not payload.get("customerId") or not payload.get("type"):
        raise HTTPException(400, "customerId and type are required")
    eq = await repo.add_equipment(payload)
    logger.info("Registered %s equipment %s for customer %s", eq.type, eq.id, eq.customer_id)
    return eq.to_doc()


@router.put("/{equipment_id}")
async def update_equipment(
    equipment_id: str,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    eq = await repo.update_equipment(equipment_id, body)
    if not eq:
        raise HTTPException(404, "Equipment not found")
    return eq.to_doc()


@router.delete("/{equipment_id}")
async def deactivate_equipment(
    equipment_id: str,
    body: dict | None = None,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    reason = (body or {}).get("reason", "")
    eq = await repo.update_equipment(
        equipment_id, {"status": "inactive", "deactivationReason": reason},
    )
    if not eq:
        raise HTTPException(404, "Equipment not found")
    logger.info("Deactivated equipment %s: %s", equipment_id, reason or "no reason given")
    return {"message": "Equipment deactivated", "equipment": eq.to_doc()}
