from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from airtech.schemas.common import Record, coerce_number
from airtech.schemas.service_report import ProductLine

QuoteStatus = Literal["pending", "approved", "rejected", "sent"]


class Quote(Record):
    id: str = ""
    order_id: str
    description: str
    estimated_hours: float = 0.0
    estimated_price: float = 0.0
    products: list[ProductLine] = Field(default_factory=list)
    status: QuoteStatus = "pending"
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("estimated_hours", "estimated_price", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return coerce_number(v)
