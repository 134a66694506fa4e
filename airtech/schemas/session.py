from __future__ import annotations

from typing import Literal

from airtech.schemas.common import Record

Role = Literal["technician", "admin"]


class Session(Record):
    token_hash: str
    role: Role
    user_id: str
    display_name: str = ""
    expires_at: str
    created_at: str | None = None
