"""PDF generation for service reports using xhtml2pdf."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from airtech.db.repository import Repository
from airtech.schemas import ChecklistTemplate, ReportComponent

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "j2"]),
)


def _format_answer(answer) -> str:
    if answer is None or answer == "":
        return "-"
    if isinstance(answer, dict):
        status = answer.get("status", "")
        comment = answer.get("comment")
        return f"{status}: {comment}" if comment else str(status)
    return str(answer)


def _component_rows(component: ReportComponent, template: ChecklistTemplate | None) -> list[dict]:
    labels = {item.id: item.label for item in template.items} if template else {}
    return [
        {"label": labels.get(item_id, item_id), "answer": _format_answer(answer)}
        for item_id, answer in component.checklist.items()
    ]


def render_service_report_html(context: dict) -> str:
    template = _env.get_template("service_report.html.j2")
    return template.render(**context)


async def generate_service_report_pdf(repo: Repository, report_id: str) -> bytes:
    """Generate a PDF for one service report. Returns PDF bytes."""
    from xhtml2pdf import pisa

    report = await repo.get_service_report(report_id)
    if report is None:
        raise ValueError("Service report not found")

    order = await repo.get_order(report.order_id)
    equipment = await repo.get_equipment(report.equipment_id)
    customer = await repo.get_customer(order.customer_id) if order else None
    technician = (
        await repo.get_technician(order.technician_id) if order and order.technician_id else None
    )
    checklist = await repo.get_checklist_template(equipment.type) if equipment else None

    components = []
    products_total = 0.0
    work_total = 0.0
    for component in report.report_data.components:
        products_total += sum(p.price for p in component.products)
        work_total += sum(w.price for w in component.additional_work)
        components.append({
            "details": component.details,
            "rows": _component_rows(component, checklist),
            "products": component.products,
            "additional_work": component.additional_work,
        })

    html = render_service_report_html({
        "report": report,
        "order": order,
        "equipment": equipment,
        "customer": customer,
        "technician": technician,
        "components": components,
        "products_total": products_total,
        "work_total": work_total,
        "report_date": datetime.now(timezone.utc).strftime("%d.%m.%Y"),
    })

    pdf_buffer = io.BytesIO()
    pisa_status = pisa.CreatePDF(io.StringIO(html), dest=pdf_buffer)
    if pisa_status.err:
        raise RuntimeError(f"PDF generation failed with {pisa_status.err} errors")

    return pdf_buffer.getvalue()
