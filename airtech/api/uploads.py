"""Photo upload API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from airtech.config import Settings
from airtech.dependencies import get_app_settings, require_auth
from airtech.services.auth import AuthContext
from airtech.services.upload_store import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload")
async def upload_photo(
    photo: UploadFile = File(...),
    auth: AuthContext = Depends(require_auth),
    settings: Settings = Depends(get_app_settings),
):
    data = await photo.read()
    if not data:
        raise HTTPException(400, "Empty file")

    stored = await save_upload(data, photo.filename or "", settings.uploads)
    logger.info("Stored upload %s (%d bytes) from %s", stored.filename, len(data), auth.user_id)
    return {"url": stored.url, "thumbnailUrl": stored.thumbnail_url}
