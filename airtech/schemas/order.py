from __future__ import annotations

from typing import Literal

from airtech.schemas.common import Record

OrderStatus = Literal["pending", "scheduled", "in_progress", "completed"]
ORDER_STATUSES: tuple[str, ...] = ("pending", "scheduled", "in_progress", "completed")


class Order(Record):
    id: str = ""
    order_number: str | None = None
    customer_id: str
    customer_name: str = ""
    technician_id: str | None = None
    scheduled_date: str | None = None  # YYYY-MM-DD
    scheduled_time: str | None = None
    service_type: str = ""
    description: str = ""
    status: OrderStatus = "pending"
    created_at: str | None = None
    updated_at: str | None = None
