"""Technician record. ``passwordHash`` is stored but never served."""

from __future__ import annotations

from typing import Any

from airtech.schemas.common import Record


class Technician(Record):
    id: str = ""
    name: str
    email: str = ""
    phone: str = ""
    initials: str = ""
    is_active: bool = True
    password_hash: str = ""

    def public_doc(self) -> dict[str, Any]:
        doc = self.to_doc()
        doc.pop("passwordHash", None)
        return doc


def initials_from_name(name: str) -> str:
    """'Rune Hansen' -> 'RH'."""
    return "".join(part[0] for part in name.split() if part).upper()[:3]
