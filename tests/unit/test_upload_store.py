import io
import logging
import os

import pytest
from PIL import Image

from airtech.config import UploadConfig
from airtech.services.upload_store import save_upload


@pytest.fixture
def jpeg_bytes():
    img = Image.new("RGB", (1920, 1440), color=(70, 130, 180))
    buf = io.BytesIO()
    img.save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def config(tmp_path):
    return UploadConfig(base_dir=str(tmp_path / "uploads"), thumbnail_size=(320, 240))


async def test_image_upload_writes_original_and_thumbnail(jpeg_bytes, config):
    stored = await save_upload(jpeg_bytes, "Filter før bytte.JPG", config)

    assert stored.filename.endswith(".jpg")
    assert os.path.isfile(stored.path)
    assert stored.url == f"/uploads/{stored.filename}"

    stem = stored.filename.rsplit(".", 1)[0]
    assert stored.thumbnail_url == f"/uploads/thumbnails/{stem}.jpg"
    thumb_path = os.path.join(config.base_dir, "thumbnails", f"{stem}.jpg")
    with Image.open(thumb_path) as thumb:
        assert thumb.width <= 320
        assert thumb.height <= 240


async def test_non_image_upload_has_no_thumbnail(config):
    stored = await save_upload(b"%PDF-1.4 not really", "datablad.pdf", config)
    assert os.path.isfile(stored.path)
    assert stored.thumbnail_url is None


async def test_unsafe_suffix_is_dropped(jpeg_bytes, config):
    stored = await save_upload(jpeg_bytes, "../../etc/passwd", config)
    assert "/" not in stored.filename
    assert "." not in stored.filename


async def test_uploads_get_unique_names(jpeg_bytes, config):
    first = await save_upload(jpeg_bytes, "a.jpg", config)
    second = await save_upload(jpeg_bytes, "a.jpg", config)
    assert first.filename != second.filename


async def test_truncated_image_keeps_original_without_thumbnail(jpeg_bytes, config, caplog):
    with caplog.at_level(logging.WARNING, logger="airtech.services.upload_store"):
        stored = await save_upload(jpeg_bytes[: len(jpeg_bytes) // 2], "avbrutt.jpg", config)

    assert os.path.isfile(stored.path)
    assert stored.thumbnail_url is None
    stem = stored.filename.rsplit(".", 1)[0]
    assert not os.path.exists(os.path.join(config.base_dir, "thumbnails", f"{stem}.jpg"))
    assert any(stored.filename in rec.getMessage() for rec in caplog.records)
