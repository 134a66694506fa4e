"""Orders API: list, create, update, complete. Every order carries its derived displayStatus."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_auth
from airtech.schemas import ORDER_STATUSES, Equipment, Order, ServiceReport
from airtech.services.auth import AuthContext
from airtech.services.status import derive_order_status, linked_equipment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _order_doc(
    order: Order, reports: list[ServiceReport], equipment_by_id: dict[str, Equipment],
) -> dict:
    own_reports = [r for r in reports if r.order_id == order.id]
    doc = order.to_doc()
    doc["displayStatus"] = derive_order_status(order, linked_equipment(own_reports, equipment_by_id))
    return doc


async def _order_docs(repo: Repository, orders: list[Order]) -> list[dict]:
    reports = await repo.list_service_reports()
    equipment_by_id = {e.id: e for e in await repo.list_equipment()}
    return [_order_doc(o, reports, equipment_by_id) for o in orders]


@router.get("")
async def list_orders(
    technician_id: str | None = Query(None, alias="technicianId"),
    customer_id: str | None = Query(None, alias="customerId"),
    status: str | None = Query(None),
    show_all: bool = Query(False, alias="all"),
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    if status is not None and status not in ORDER_STATUSES:
        raise HTTPException(400, f"Unknown status filter: {status}")
    if not auth.is_admin and technician_id is None and not show_all:
        technician_id = auth.user_id
    orders = await repo.list_orders(technician_id=technician_id, customer_id=customer_id, status=status)
    return await _order_docs(repo, orders)


@router.get("/today")
async def list_todays_orders(
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    technician_id = None if auth.is_admin else auth.user_id
    orders = await repo.list_orders(technician_id=technician_id, scheduled_date=date.today().isoformat())
    return await _order_docs(repo, orders)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    order = await repo.get_order(order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    reports = await repo.list_service_reports(order_id=order_id)
    equipment_by_id = {e.id: e for e in await repo.list_equipment()}
    doc = _order_doc(order, reports, equipment_by_id)

    customer_equipment = [
        e for e in equipment_by_id.values()
        if e.customer_id == order.customer_id and e.status == "active"
    ]
    doc["equipment"] = [e.to_doc() for e in customer_equipment]
    doc["serviceReports"] = [
        {
            "reportId": r.report_id,
            "equipmentId": r.equipment_id,
            "status": r.status,
            "sentToInvoicing": r.sent_to_invoicing,
        }
        for r in reports
    ]
    return doc


@router.post("", status_code=201)
async def create_order(
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    customer_id = body.get("customerId")
    if not customer_id:
        raise HTTPException(400, "customerId is required")

    payload = dict(body)
    if not payload.get("customerName"):
        customer = await repo.get_customer(customer_id)
        if customer:
            payload["customerName"] = customer.name
    if not payload.get("status"):
        scheduled = payload.get("technicianId") and payload.get("scheduledDate")
        payload["status"] = "scheduled" if scheduled else "pending"

    order = await repo.add_order(payload)
    logger.info("Created order %s (%s) for customer %s", order.id, order.order_number, customer_id)
    return _order_doc(order, [], {})


@router.put("/{order_id}")
async def update_order(
    order_id: str,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    current = await repo.get_order(order_id)
    if not current:
        raise HTTPException(404, "Order not found")

    new_status = body.get("status")
    if current.status == "completed" and new_status and new_status != "completed":
        logger.warning("Order %s moved from completed back to %s by %s", order_id, new_status, auth.user_id)

    order = await repo.update_order(order_id, body)
    return (await _order_docs(repo, [order]))[0]


@router.post("/{order_id}/complete")
async def complete_order(
    order_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    order = await repo.get_order(order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    reports = await repo.list_service_reports(order_id=order_id)
    if not reports:
        raise HTTPException(400, "Order has no service reports")
    unfinished = [r.report_id for r in reports if r.status != "completed"]
    if unfinished:
        raise HTTPException(400, f"Service reports not completed: {', '.join(unfinished)}")

    order = await repo.update_order(order_id, {"status": "completed"})
    logger.info("Order %s completed by %s", order_id, auth.user_id)
    return (await _order_docs(repo, [order]))[0]
