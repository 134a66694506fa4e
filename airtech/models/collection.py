"""One row per repository collection, holding the whole collection as JSON."""

from __future__ import annotations

from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column

from airtech.models.base import Base, TimestampMixin


class CollectionRow(Base, TimestampMixin):
    __tablename__ = "collections"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[list] = mapped_column(JSON, default=list)
