from __future__ import annotations

from typing import Literal

from airtech.schemas.common import Record

EquipmentStatus = Literal["active", "inactive"]
ServiceStatus = Literal["not_started", "in_progress", "completed"]


class Equipment(Record):
    id: str = ""
    customer_id: str
    type: str
    system_number: str = ""
    name: str = ""
    location: str = ""
    operator: str = ""
    status: EquipmentStatus = "active"
    service_status: ServiceStatus = "not_started"
    deactivation_reason: str = ""
