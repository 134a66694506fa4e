"""Document repository: every collection lives in one in-memory document.

The document is read once from the storage backend and written back in full
after every mutation. There is no locking; concurrent writers race and the
last flush wins.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, TypeVar

from airtech.db.backends import Document, StorageBackend
from airtech.schemas import (
    ChecklistInstruction, ChecklistTemplate, Customer, Equipment, Order, Quote, Record,
    ServiceReport, Session, Technician, utcnow_iso,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

COLLECTIONS: tuple[str, ...] = (
    "customers", "technicians", "orders", "equipment",
    "checklistTemplates", "checklistInstructions", "serviceReports", "quotes", "sessions",
)

_ID_PREFIXES = {
    "customers": "CUST",
    "technicians": "TECH",
    "orders": "ORD",
    "equipment": "EQ",
    "serviceReports": "SR",
    "quotes": "QUOTE",
}

_KEY_FIELDS = {
    "serviceReports": "reportId",
    "sessions": "tokenHash",
    "checklistTemplates": "equipmentType",
}


def empty_document() -> Document:
    return {name: [] for name in COLLECTIONS}


class Repository:
    """Typed access to the stored collections."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend
        self._data: Document | None = None

    # ── Lifecycle ─────────────────────────────────────────

    async def load(self) -> None:
        """Read the document; a failed or empty read starts a fresh database."""
        try:
            data = await self.backend.load()
        except Exception:
            logger.exception("Could not read database from %r, re-initialising", self.backend)
            data = None

        if data is None:
            self._data = empty_document()
            await self.flush()
            return

        for name in COLLECTIONS:
            if not isinstance(data.get(name), list):
                data[name] = []
        self._data = data

    async def reload(self) -> None:
        self._data = None
        await self.load()

    async def flush(self) -> None:
        if self._data is None:
            return
        await self.backend.save(self._data)

    async def close(self) -> None:
        await self.backend.close()

    async def _ensure_loaded(self) -> Document:
        if self._data is None:
            await self.load()
        return self._data

    # ── Generic helpers ───────────────────────────────────

    async def _items(self, collection: str) -> list[dict[str, Any]]:
        data = await self._ensure_loaded()
        return data[collection]

    async def _find(self, collection: str, key: str) -> tuple[int, dict[str, Any]] | None:
        key_field = _KEY_FIELDS.get(collection, "id")
        for index, item in enumerate(await self._items(collection)):
            if item.get(key_field) == key:
                return index, item
        return None

    def _new_id(self, collection: str, items: list[dict[str, Any]]) -> str:
        prefix = _ID_PREFIXES[collection]
        key_field = _KEY_FIELDS.get(collection, "id")
        taken = {item.get(key_field) for item in items}
        stamp = int(time.time() * 1000)
        while f"{prefix}-{stamp}" in taken:
            stamp += 1
        return f"{prefix}-{stamp}"

    async def _get(self, collection: str, model: type[R], key: str) -> R | None:
        found = await self._find(collection, key)
        return model.model_validate(found[1]) if found else None

    async def _list(self, collection: str, model: type[R]) -> list[R]:
        return [model.model_validate(item) for item in await self._items(collection)]

    async def _add(self, collection: str, model: type[R], payload: dict[str, Any]) -> R:
        items = await self._items(collection)
        doc = model.alias_keys(payload)
        key_field = _KEY_FIELDS.get(collection, "id")
        if collection in _ID_PREFIXES:
            doc[key_field] = self._new_id(collection, items)
        if "created_at" in model.model_fields:
            doc.setdefault("createdAt", utcnow_iso())
        record = model.model_validate(doc)
        items.append(record.to_doc())
        await self.flush()
        return record

    async def _update(
        self, collection: str, model: type[R], key: str, updates: dict[str, Any],
    ) -> R | None:
        found = await self._find(collection, key)
        if found is None:
            return None
        index, current = found
        key_field = _KEY_FIELDS.get(collection, "id")
        merged = {**current, **model.alias_keys(updates), key_field: key}
        if "updated_at" in model.model_fields:
            merged["updatedAt"] = utcnow_iso()
        record = model.model_validate(merged)
        (await self._items(collection))[index] = record.to_doc()
        await self.flush()
        return record

    async def _delete(self, collection: str, key: str) -> bool:
        found = await self._find(collection, key)
        if found is None:
            return False
        del (await self._items(collection))[found[0]]
        await self.flush()
        return True

    # ── Customers ─────────────────────────────────────────

    async def list_customers(self) -> list[Customer]:
        return await self._list("customers", Customer)

    async def get_customer(self, customer_id: str) -> Customer | None:
        return await self._get("customers", Customer, customer_id)

    async def add_customer(self, payload: dict[str, Any]) -> Customer:
        return await self._add("customers", Customer, payload)

    async def update_customer(self, customer_id: str, updates: dict[str, Any]) -> Customer | None:
        return await self._update("customers", Customer, customer_id, updates)

    # ── Technicians ───────────────────────────────────────

    async def list_technicians(self, active_only: bool = False) -> list[Technician]:
        techs = await self._list("technicians", Technician)
        if active_only:
            techs = [t for t in techs if t.is_active]
        return techs

    async def get_technician(self, technician_id: str) -> Technician | None:
        return await self._get("technicians", Technician, technician_id)

    async def add_technician(self, payload: dict[str, Any]) -> Technician:
        return await self._add("technicians", Technician, payload)

    async def update_technician(self, technician_id: str, updates: dict[str, Any]) -> Technician | None:
        return await self._update("technicians", Technician, technician_id, updates)

    # ── Orders ────────────────────────────────────────────

    async def list_orders(
        self,
        technician_id: str | None = None,
        customer_id: str | None = None,
        status: str | None = None,
        scheduled_date: str | None = None,
    ) -> list[Order]:
        orders = await self._list("orders", Order)
        if technician_id is not None:
            orders = [o for o in orders if o.technician_id == technician_id]
        if customer_id is not None:
            orders = [o for o in orders if o.customer_id == customer_id]
        if status is not None:
            orders = [o for o in orders if o.status == status]
        if scheduled_date is not None:
            orders = [o for o in orders if o.scheduled_date == scheduled_date]
        return orders

    async def get_order(self, order_id: str) -> Order | None:
        return await self._get("orders", Order, order_id)

    async def add_order(self, payload: dict[str, Any]) -> Order:
        payload = dict(payload)
        if not payload.get("orderNumber") and not payload.get("order_number"):
            payload["orderNumber"] = await self._next_order_number()
        return await self._add("orders", Order, payload)

    async def update_order(self, order_id: str, updates: dict[str, Any]) -> Order | None:
        return await self._update("orders", Order, order_id, updates)

    async def _next_order_number(self) -> str:
        highest = 0
        for item in await self._items("orders"):
            number = str(item.get("orderNumber") or "")
            if number.isdigit():
                highest = max(highest, int(number))
        return str(highest + 1 if highest else 10001)

    # ── Equipment ─────────────────────────────────────────

    async def list_equipment(
        self, customer_id: str | None = None, include_inactive: bool = True,
    ) -> list[Equipment]:
        equipment = await self._list("equipment", Equipment)
        if customer_id is not None:
            equipment = [e for e in equipment if e.customer_id == customer_id]
        if not include_inactive:
            equipment = [e for e in equipment if e.status == "active"]
        return equipment

    async def get_equipment(self, equipment_id: str) -> Equipment | None:
        return await self._get("equipment", Equipment, equipment_id)

    async def add_equipment(self, payload: dict[str, Any]) -> Equipment:
        return await self._add("equipment", Equipment, payload)

    async def update_equipment(self, equipment_id: str, updates: dict[str, Any]) -> Equipment | None:
        return await self._update("equipment", Equipment, equipment_id, updates)

    # ── Checklist templates ───────────────────────────────

    async def list_checklist_templates(self) -> list[ChecklistTemplate]:
        return await self._list("checklistTemplates", ChecklistTemplate)

    async def get_checklist_template(self, equipment_type: str) -> ChecklistTemplate | None:
        return await self._get("checklistTemplates", ChecklistTemplate, equipment_type)

    async def replace_checklist_templates(self, templates: list[dict[str, Any]]) -> list[ChecklistTemplate]:
        """Swap in a whole new template set; nothing is written if any entry is invalid."""
        validated = [ChecklistTemplate.model_validate(t) for t in templates]
        data = await self._ensure_loaded()
        data["checklistTemplates"] = [t.to_doc() for t in validated]
        await self.flush()
        return validated

    # ── Checklist instructions ────────────────────────────

    async def _find_instruction(self, template_name: str, item_id: str) -> tuple[int, dict[str, Any]] | None:
        for index, item in enumerate(await self._items("checklistInstructions")):
            if item.get("templateName") == template_name and item.get("itemId") == item_id:
                return index, item
        return None

    async def list_checklist_instructions(self, template_name: str) -> list[ChecklistInstruction]:
        instructions = [
            i for i in await self._list("checklistInstructions", ChecklistInstruction)
            if i.template_name == template_name
        ]
        return sorted(instructions, key=lambda i: i.item_id)

    async def get_checklist_instruction(self, template_name: str, item_id: str) -> ChecklistInstruction | None:
        found = await self._find_instruction(template_name, item_id)
        return ChecklistInstruction.model_validate(found[1]) if found else None

    async def upsert_checklist_instruction(
        self, template_name: str, item_id: str, text: str,
    ) -> ChecklistInstruction:
        """Create or replace the instruction for one item; createdAt survives a replace."""
        now = utcnow_iso()
        found = await self._find_instruction(template_name, item_id)
        record = ChecklistInstruction(
            template_name=template_name,
            item_id=item_id,
            instruction_text=text,
            created_at=found[1].get("createdAt") if found else now,
            updated_at=now,
        )
        items = await self._items("checklistInstructions")
        if found:
            items[found[0]] = record.to_doc()
        else:
            items.append(record.to_doc())
        await self.flush()
        return record

    async def delete_checklist_instruction(self, template_name: str, item_id: str) -> bool:
        found = await self._find_instruction(template_name, item_id)
        if found is None:
            return False
        del (await self._items("checklistInstructions"))[found[0]]
        await self.flush()
        return True

    # ── Service reports ───────────────────────────────────

    async def list_service_reports(
        self, order_id: str | None = None, equipment_id: str | None = None,
    ) -> list[ServiceReport]:
        reports = await self._list("serviceReports", ServiceReport)
        if order_id is not None:
            reports = [r for r in reports if r.order_id == order_id]
        if equipment_id is not None:
            reports = [r for r in reports if r.equipment_id == equipment_id]
        return reports

    async def get_service_report(self, report_id: str) -> ServiceReport | None:
        return await self._get("serviceReports", ServiceReport, report_id)

    async def get_service_report_by_equipment(self, equipment_id: str, order_id: str) -> ServiceReport | None:
        for item in await self._items("serviceReports"):
            if item.get("equipmentId") == equipment_id and item.get("orderId") == order_id:
                return ServiceReport.model_validate(item)
        return None

    async def add_service_report(self, payload: dict[str, Any]) -> ServiceReport:
        return await self._add("serviceReports", ServiceReport, payload)

    async def update_service_report(self, report_id: str, updates: dict[str, Any]) -> ServiceReport | None:
        return await self._update("serviceReports", ServiceReport, report_id, updates)

    # ── Quotes ────────────────────────────────────────────

    async def list_quotes(self, order_id: str | None = None) -> list[Quote]:
        quotes = await self._list("quotes", Quote)
        if order_id is not None:
            quotes = [q for q in quotes if q.order_id == order_id]
        return sorted(quotes, key=lambda q: q.created_at or "", reverse=True)

    async def get_quote(self, quote_id: str) -> Quote | None:
        return await self._get("quotes", Quote, quote_id)

    async def add_quote(self, payload: dict[str, Any]) -> Quote:
        return await self._add("quotes", Quote, payload)

    async def update_quote(self, quote_id: str, updates: dict[str, Any]) -> Quote | None:
        return await self._update("quotes", Quote, quote_id, updates)

    async def delete_quote(self, quote_id: str) -> bool:
        return await self._delete("quotes", quote_id)

    # ── Sessions ──────────────────────────────────────────

    async def add_session(self, session: Session) -> Session:
        items = await self._items("sessions")
        items.append(session.to_doc())
        await self.flush()
        return session

    async def get_session(self, token_hash: str) -> Session | None:
        return await self._get("sessions", Session, token_hash)

    async def delete_session(self, token_hash: str) -> bool:
        return await self._delete("sessions", token_hash)

    async def delete_user_sessions(self, user_id: str) -> int:
        data = await self._ensure_loaded()
        before = len(data["sessions"])
        data["sessions"] = [s for s in data["sessions"] if s.get("userId") != user_id]
        removed = before - len(data["sessions"])
        if removed:
            await self.flush()
        return removed

    async def prune_expired_sessions(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        data = await self._ensure_loaded()
        kept = []
        for s in data["sessions"]:
            try:
                expired = datetime.fromisoformat(s["expiresAt"]) <= now
            except (KeyError, TypeError, ValueError):
                expired = True
            if not expired:
                kept.append(s)
        removed = len(data["sessions"]) - len(kept)
        if removed:
            data["sessions"] = kept
            await self.flush()
        return removed
