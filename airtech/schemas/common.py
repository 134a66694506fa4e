"""Shared base for stored records: camelCase on the wire, snake_case in Python."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def coerce_number(value: Any) -> float:
    """Loose numeric parse for form input: '' / None / garbage -> 0."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class Record(BaseModel):
    """A document stored in one of the repository collections.

    Unknown fields are kept so partial updates can carry arbitrary data.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_doc(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def alias_keys(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Rename snake_case field names in ``data`` to their stored aliases."""
        out: dict[str, Any] = {}
        for key, value in data.items():
            field = cls.model_fields.get(key)
            out[(field.alias or key) if field else key] = value
        return out
