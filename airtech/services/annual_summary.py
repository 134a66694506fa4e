"""Per-customer yearly summary for the admin console."""

from __future__ import annotations

from typing import Iterable

from airtech.schemas import Customer, Order, Quote


def _order_year(order: Order) -> int | None:
    stamp = order.scheduled_date or order.created_at or ""
    head = stamp[:4]
    return int(head) if head.isdigit() else None


def build_annual_summary(
    customers: Iterable[Customer],
    orders: Iterable[Order],
    quotes: Iterable[Quote],
    year: int | None = None,
) -> list[dict]:
    summary = {
        c.id: {"customerId": c.id, "name": c.name, "projectCount": 0, "completedCount": 0, "quotedTotal": 0.0}
        for c in customers
    }
    order_customer: dict[str, str] = {}
    for order in orders:
        if year is not None and _order_year(order) != year:
            continue
        row = summary.get(order.customer_id)
        if row is None:
            continue
        order_customer[order.id] = order.customer_id
        row["projectCount"] += 1
        if order.status == "completed":
            row["completedCount"] += 1

    for quote in quotes:
        customer_id = order_customer.get(quote.order_id)
        if customer_id and quote.status == "approved":
            summary[customer_id]["quotedTotal"] += quote.estimated_price

    return list(summary.values())
