"""Service-report completeness checks.

A component is complete when every item of the equipment's checklist
template has an answer. Custom equipment has no template; a free-text
description is all it needs. A report can be finalized once it has at least
one component and all of them are complete.
"""

from __future__ import annotations

from typing import Any

from airtech.schemas import (
    CUSTOM_EQUIPMENT_TYPE, ChecklistItem, ChecklistTemplate, ReportComponent, ServiceReport,
)

_FREE_TEXT_TYPES = frozenset({"number", "text", "textarea"})


def _has_text(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def is_item_answered(item: ChecklistItem, answer: Any) -> bool:
    if item.is_switch_settings:
        return isinstance(answer, str) and answer.strip() != ""
    if item.type == "select":
        return isinstance(answer, dict) and bool(answer.get("status"))
    if item.type in _FREE_TEXT_TYPES:
        return _has_text(answer)
    return False


def component_progress(
    component: ReportComponent, template: ChecklistTemplate | None,
) -> dict[str, bool]:
    """Map each required template item id to whether it has an answer."""
    if template is None:
        return {}
    return {
        item.id: is_item_answered(item, component.checklist.get(item.id))
        for item in template.items
        if item.required
    }


def is_component_complete(
    component: ReportComponent,
    template: ChecklistTemplate | None,
    equipment_type: str,
) -> bool:
    if equipment_type == CUSTOM_EQUIPMENT_TYPE:
        description = component.details.get("beskrivelse")
        return isinstance(description, str) and description.strip() != ""
    if template is None:
        return False
    return all(component_progress(component, template).values())


def is_report_finalizable(
    report: ServiceReport,
    template: ChecklistTemplate | None,
    equipment_type: str,
) -> bool:
    components = report.report_data.components
    return bool(components) and all(
        is_component_complete(c, template, equipment_type) for c in components
    )


def report_completeness(
    report: ServiceReport,
    template: ChecklistTemplate | None,
    equipment_type: str,
) -> dict[str, Any]:
    """Per-component breakdown served to the technician app."""
    components = []
    for index, component in enumerate(report.report_data.components):
        progress = component_progress(component, template)
        components.append({
            "index": index,
            "complete": is_component_complete(component, template, equipment_type),
            "missingItems": [item_id for item_id, done in progress.items() if not done],
        })
    return {
        "reportId": report.report_id,
        "finalizable": bool(components) and all(c["complete"] for c in components),
        "components": components,
    }
