import pytest

from airtech.schemas import ChecklistTemplate, ReportComponent, ServiceReport
from airtech.services.completeness import (
    component_progress, is_component_complete, is_report_finalizable, report_completeness,
)


@pytest.fixture
def template():
    return ChecklistTemplate.model_validate({
        "equipmentType": "ventilasjonsaggregat",
        "name": "Sjekkliste Ventilasjonsaggregat",
        "items": [
            {"id": "pkt1", "label": "Luftinntak / Rister", "type": "select", "options": ["OK", "Avvik"]},
            {"id": "pkt22", "label": "Innstilling brytere", "type": "select",
             "options": ["AUTO", "Sommer", "Vinter"]},
            {"id": "temp_ute", "label": "Temp Ute (°C)", "type": "number"},
            {"id": "notat", "label": "Notat", "type": "textarea", "required": False},
        ],
    })


def _component(checklist=None, details=None):
    return ReportComponent.model_validate({"checklist": checklist or {}, "details": details or {}})


def _full_checklist():
    return {"pkt1": {"status": "ok"}, "pkt22": "AUTO", "temp_ute": 4}


def test_all_items_answered_is_complete(template):
    assert is_component_complete(_component(_full_checklist()), template, "ventilasjonsaggregat")


@pytest.mark.parametrize("item_id", ["pkt1", "pkt22", "temp_ute"])
def test_missing_answer_is_incomplete(template, item_id):
    checklist = _full_checklist()
    del checklist[item_id]
    assert not is_component_complete(_component(checklist), template, "ventilasjonsaggregat")


@pytest.mark.parametrize("answer", [{}, {"comment": "skitten"}, {"status": ""}, "ok"])
def test_select_answer_needs_status(template, answer):
    checklist = {**_full_checklist(), "pkt1": answer}
    assert not is_component_complete(_component(checklist), template, "ventilasjonsaggregat")


@pytest.mark.parametrize("answer", ["", "   ", None])
def test_blank_text_answers_are_incomplete(template, answer):
    checklist = {**_full_checklist(), "temp_ute": answer}
    assert not is_component_complete(_component(checklist), template, "ventilasjonsaggregat")
    checklist = {**_full_checklist(), "pkt22": answer}
    assert not is_component_complete(_component(checklist), template, "ventilasjonsaggregat")


def test_zero_is_a_valid_number_answer(template):
    checklist = {**_full_checklist(), "temp_ute": 0}
    assert is_component_complete(_component(checklist), template, "ventilasjonsaggregat")


def test_optional_items_are_not_required(template):
    progress = component_progress(_component(_full_checklist()), template)
    assert "notat" not in progress
    assert all(progress.values())


def test_no_template_is_incomplete():
    assert not is_component_complete(_component(_full_checklist()), None, "ukjent")


@pytest.mark.parametrize("details,expected", [
    ({"beskrivelse": "Byttet vifte i kjeller"}, True),
    ({"beskrivelse": "   "}, False),
    ({"beskrivelse": ""}, False),
    ({}, False),
])
def test_custom_component_needs_description(details, expected):
    assert is_component_complete(_component(details=details), None, "custom") is expected


def test_report_needs_at_least_one_component(template):
    report = ServiceReport(reportId="SR-1", orderId="ORD-1", equipmentId="EQ-1")
    assert not is_report_finalizable(report, template, "ventilasjonsaggregat")


def test_report_finalizable_only_when_every_component_complete(template):
    report = ServiceReport.model_validate({
        "reportId": "SR-1", "orderId": "ORD-1", "equipmentId": "EQ-1",
        "reportData": {"components": [{"checklist": _full_checklist()}, {"checklist": {"pkt1": {"status": "ok"}}}]},
    })
    assert not is_report_finalizable(report, template, "ventilasjonsaggregat")

    summary = report_completeness(report, template, "ventilasjonsaggregat")
    assert summary["finalizable"] is False
    assert summary["components"][0] == {"index": 0, "complete": True, "missingItems": []}
    assert summary["components"][1]["missingItems"] == ["pkt22", "temp_ute"]

    report.report_data.components.pop()
    assert is_report_finalizable(report, template, "ventilasjonsaggregat")
