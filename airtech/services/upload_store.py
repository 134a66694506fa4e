"""Upload storage: save photos to local disk and write JPEG thumbnails.

Files land in ``{base_dir}/{ulid}{ext}``; thumbnails in
``{base_dir}/thumbnails/{ulid}.jpg``. Both are served under ``/uploads``.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image
from ulid import ULID

from airtech.config import UploadConfig

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"


@dataclass
class StoredUpload:
    filename: str
    path: str
    url: str
    thumbnail_url: str | None = None


def _safe_suffix(filename: str) -> str:
    suffix = Path(filename or "").suffix.lower()
    return suffix if suffix.isascii() and suffix[1:].isalnum() else ""


def _save_sync(data: bytes, original_name: str, config: UploadConfig) -> StoredUpload:
    base = Path(config.base_dir)
    thumb_dir = base / "thumbnails"
    base.mkdir(parents=True, exist_ok=True)

    stem = str(ULID())
    filename = f"{stem}{_safe_suffix(original_name)}"
    path = base / filename
    path.write_bytes(data)

    thumbnail_url = None
    try:
        img = Image.open(io.BytesIO(data))
        img_copy = img.convert("RGB")
        img_copy.thumbnail(config.thumbnail_size)
        thumb_dir.mkdir(parents=True, exist_ok=True)
        img_copy.save(thumb_dir / f"{stem}.jpg", "JPEG", quality=85)
        thumbnail_url = f"{URL_PREFIX}/thumbnails/{stem}.jpg"
    except OSError as e:
        # Not an image, or a corrupt one: keep the original only.
        logger.warning("No thumbnail for %s: %s", filename, e)
        (thumb_dir / f"{stem}.jpg").unlink(missing_ok=True)

    return StoredUpload(
        filename=filename,
        path=str(path),
        url=f"{URL_PREFIX}/{filename}",
        thumbnail_url=thumbnail_url,
    )


async def save_upload(data: bytes, original_name: str, config: UploadConfig) -> StoredUpload:
    """Store an uploaded file; returns where it was written and its public URLs."""
    return await asyncio.to_thread(_save_sync, data, original_name, config)
