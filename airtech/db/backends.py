"""Storage backends for the repository document.

A backend only knows how to read and write the whole document:
``load()`` returns the stored dict (or None when nothing is stored yet) and
``save(doc)`` replaces what is stored.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from airtech.config import StorageConfig
from airtech.db.engine import create_engine, create_tables, session_factory
from airtech.models import CollectionRow

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class StorageBackend(Protocol):
    async def load(self) -> Document | None: ...

    async def save(self, document: Document) -> None: ...

    async def close(self) -> None: ...


class JsonFileBackend:
    """The whole database as one pretty-printed JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonFileBackend({str(self.path)!r})"

    def _read_sync(self) -> Document | None:
        if not self.path.exists():
            return None
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write_sync(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".db-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def load(self) -> Document | None:
        return await asyncio.to_thread(self._read_sync)

    async def save(self, document: Document) -> None:
        # Serialise on the event loop so the write sees a consistent snapshot.
        text = json.dumps(document, indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._write_sync, text)

    async def close(self) -> None:
        return None


class SqlBackend:
    """Stores each collection as a JSON row in a SQL database."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = session_factory(engine)
        self._tables_ready = False

    def __repr__(self) -> str:
        return f"SqlBackend({self.engine.url.render_as_string(hide_password=True)!r})"

    async def _ensure_tables(self) -> None:
        if not self._tables_ready:
            await create_tables(self.engine)
            self._tables_ready = True

    async def load(self) -> Document | None:
        await self._ensure_tables()
        async with self._session_factory() as db:
            result = await db.execute(select(CollectionRow))
            rows = list(result.scalars().all())
        if not rows:
            return None
        return {row.name: row.data for row in rows}

    async def save(self, document: Document) -> None:
        await self._ensure_tables()
        snapshot = copy.deepcopy(document)
        async with self._session_factory() as db:
            for name, items in snapshot.items():
                await db.merge(CollectionRow(name=name, data=items))
            await db.commit()

    async def close(self) -> None:
        await self.engine.dispose()


def backend_from_config(config: StorageConfig) -> StorageBackend:
    """Pick the SQL backend when a database URL is configured, else the JSON file."""
    if config.database_url:
        logger.info("Using SQL storage backend")
        return SqlBackend(create_engine(config.database_url))
    logger.info("Using JSON file storage at %s", config.data_file)
    return JsonFileBackend(config.data_file)
