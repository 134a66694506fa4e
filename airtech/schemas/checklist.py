"""Checklist templates: the inspection items required per equipment type."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from airtech.schemas.common import Record

ItemType = Literal["select", "number", "text", "textarea"]

# Rendered as a dropdown of operating modes rather than ok/avvik buttons.
SWITCH_SETTINGS_LABEL = "Innstilling brytere"
CUSTOM_EQUIPMENT_TYPE = "custom"


class ChecklistItem(Record):
    id: str
    label: str
    type: ItemType = "select"
    options: list[str] = Field(default_factory=list)
    required: bool = True

    @property
    def is_switch_settings(self) -> bool:
        return self.label == SWITCH_SETTINGS_LABEL


class ChecklistTemplate(Record):
    equipment_type: str
    name: str = ""
    items: list[ChecklistItem] = Field(default_factory=list)


class ChecklistInstruction(Record):
    """Free-text help for one checklist item, keyed by template name and item id."""

    template_name: str
    item_id: str
    instruction_text: str
    created_at: str | None = None
    updated_at: str | None = None
