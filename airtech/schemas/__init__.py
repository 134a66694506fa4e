"""Pydantic records for every stored entity."""

from airtech.schemas.common import Record, utcnow_iso
from airtech.schemas.customer import Customer
from airtech.schemas.technician import Technician, initials_from_name
from airtech.schemas.order import Order, ORDER_STATUSES
from airtech.schemas.equipment import Equipment
from airtech.schemas.checklist import (
    ChecklistInstruction, ChecklistItem, ChecklistTemplate, SWITCH_SETTINGS_LABEL, CUSTOM_EQUIPMENT_TYPE,
)
from airtech.schemas.service_report import (
    ServiceReport, ReportData, ReportComponent, ProductLine, WorkLine,
)
from airtech.schemas.quote import Quote
from airtech.schemas.session import Session

__all__ = [
    "Record", "utcnow_iso",
    "Customer", "Technician", "initials_from_name",
    "Order", "ORDER_STATUSES",
    "Equipment",
    "ChecklistInstruction", "ChecklistItem", "ChecklistTemplate", "SWITCH_SETTINGS_LABEL", "CUSTOM_EQUIPMENT_TYPE",
    "ServiceReport", "ReportData", "ReportComponent", "ProductLine", "WorkLine",
    "Quote",
    "Session",
]
