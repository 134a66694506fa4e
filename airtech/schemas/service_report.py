"""Service report: one per (order, equipment), built up from checklist components."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from airtech.schemas.common import Record, coerce_number

ReportStatus = Literal["draft", "in_progress", "completed"]


class ProductLine(Record):
    name: str = ""
    price: float = 0.0

    @field_validator("price", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return coerce_number(v)


class WorkLine(Record):
    description: str = ""
    hours: float = 0.0
    price: float = 0.0

    @field_validator("hours", "price", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return coerce_number(v)


class ReportComponent(Record):
    details: dict[str, Any] = Field(default_factory=dict)
    checklist: dict[str, Any] = Field(default_factory=dict)
    products: list[ProductLine] = Field(default_factory=list)
    additional_work: list[WorkLine] = Field(default_factory=list)


class ReportData(Record):
    components: list[ReportComponent] = Field(default_factory=list)
    overall_comment: str = ""


class ServiceReport(Record):
    report_id: str = ""
    order_id: str
    equipment_id: str
    status: ReportStatus = "draft"
    report_data: ReportData = Field(default_factory=ReportData)
    photos: list[str] = Field(default_factory=list)
    sent_to_invoicing: bool = False
    signature: Any = None
    created_at: str | None = None
    updated_at: str | None = None
    completed_at: str | None = None
