"""Order status derivation.

The displayed status of an order combines its stored status with the service
progress of the equipment worked on under it. This is the only place that
rule lives; API responses carry the result as ``displayStatus``.
"""

from __future__ import annotations

from typing import Iterable

from airtech.schemas import Equipment, Order, ServiceReport

_STARTED = frozenset({"in_progress", "completed"})

_REPORT_TO_SERVICE_STATUS = {
    "draft": "not_started",
    "in_progress": "in_progress",
    "completed": "completed",
}


def derive_order_status(order: Order, equipment: Iterable[Equipment]) -> str:
    """Return pending | scheduled | in_progress | completed for display."""
    if order.status == "completed":
        return "completed"
    if any(eq.service_status in _STARTED for eq in equipment):
        return "in_progress"
    return order.status or "scheduled"


def service_status_for_report(report: ServiceReport) -> str:
    return _REPORT_TO_SERVICE_STATUS.get(report.status, "not_started")


def linked_equipment(
    reports: Iterable[ServiceReport], equipment_by_id: dict[str, Equipment],
) -> list[Equipment]:
    """Equipment worked on under an order, with service status taken from that order's reports.

    Equipment carries a single lifetime ``serviceStatus``; using the report
    status keeps a unit finished on an earlier order from marking a new order
    as started.
    """
    linked = []
    for report in reports:
        eq = equipment_by_id.get(report.equipment_id)
        if eq is None:
            continue
        linked.append(eq.model_copy(update={"service_status": service_status_for_report(report)}))
    return linked
