"""SQLAlchemy ORM models used by the SQL storage backend."""

from airtech.models.base import Base
from airtech.models.collection import CollectionRow

__all__ = ["Base", "CollectionRow"]
