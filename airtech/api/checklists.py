"""Checklist template and checklist item instruction API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_admin, require_auth
from airtech.services.auth import AuthContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checklists", tags=["checklists"])


@router.get("/template/{equipment_type}")
async def get_template(
    equipment_type: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    template = await repo.get_checklist_template(equipment_type)
    if not template:
        raise HTTPException(404, f"No checklist template for {equipment_type}")
    return template.to_doc()


@router.get("/templates")
async def list_templates(
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    return [t.to_doc() for t in await repo.list_checklist_templates()]


@router.put("/templates")
async def replace_templates(
    body: list[dict],
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    templates = await repo.replace_checklist_templates(body)
    logger.info("Checklist templates replaced (%d types)", len(templates))
    return [t.to_doc() for t in templates]


instructions_router = APIRouter(prefix="/api/checklist-instructions", tags=["checklists"])


@instructions_router.get("/{template_name}")
async def list_instructions(
    template_name: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    instructions = await repo.list_checklist_instructions(template_name)
    return {"instructions": {i.item_id: i.instruction_text for i in instructions}}


@instructions_router.get("/{template_name}/{item_id}")
async def get_instruction(
    template_name: str,
    item_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    instruction = await repo.get_checklist_instruction(template_name, item_id)
    if not instruction:
        raise HTTPException(404, "Instruction not found")
    return {"instruction": instruction.instruction_text}


@instructions_router.post("/{template_name}/{item_id}")
async def save_instruction(
    template_name: str,
    item_id: str,
    body: dict,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    text = body.get("instructionText", body.get("instruction_text"))
    if not isinstance(text, str) or not text.strip():
        raise HTTPException(400, "instructionText is required")
    instruction = await repo.upsert_checklist_instruction(template_name, item_id, text.strip())
    logger.info("Saved instruction for %s/%s", template_name, item_id)
    return {"success": True, "message": "Instruction saved", "instruction": instruction.to_doc()}


@instructions_router.delete("/{template_name}/{item_id}")
async def delete_instruction(
    template_name: str,
    item_id: str,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    if not await repo.delete_checklist_instruction(template_name, item_id):
        raise HTTPException(404, "Instruction not found")
    logger.info("Deleted instruction for %s/%s", template_name, item_id)
    return {"success": True}
