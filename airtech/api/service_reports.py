"""Service report API: one report per (order, equipment), built from checklist components."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_admin, require_auth
from airtech.schemas import ReportComponent, ServiceReport, utcnow_iso
from airtech.services.auth import AuthContext
from airtech.services.completeness import is_report_finalizable, report_completeness

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/servicereports", tags=["service_reports"])

# Only the finalize endpoint may complete a report.
_PROTECTED_FIELDS = ("status", "completedAt", "sentToInvoicing")


async def _get_report_or_404(repo: Repository, report_id: str) -> ServiceReport:
    report = await repo.get_service_report(report_id)
    if not report:
        raise HTTPException(404, "Service report not found")
    return report


async def _mark_started(repo: Repository, report: ServiceReport) -> ServiceReport:
    """First saved component: draft report -> in_progress, not_started equipment -> in_progress."""
    if not report.report_data.components:
        return report
    if report.status == "draft":
        report = await repo.update_service_report(report.report_id, {"status": "in_progress"})
    eq = await repo.get_equipment(report.equipment_id)
    if eq and eq.service_status == "not_started":
        await repo.update_equipment(eq.id, {"serviceStatus": "in_progress"})
        logger.info("Equipment %s service started on order %s", eq.id, report.order_id)
    return report


async def _save_components(
    repo: Repository, report: ServiceReport, components: list[ReportComponent],
) -> ServiceReport:
    report_data = report.report_data.model_copy(update={"components": components})
    report = await repo.update_service_report(report.report_id, {"reportData": report_data.to_doc()})
    return await _mark_started(repo, report)


async def _equipment_type(repo: Repository, report: ServiceReport) -> str:
    eq = await repo.get_equipment(report.equipment_id)
    return eq.type if eq else ""


@router.get("/equipment/{equipment_id}")
async def get_or_create_for_equipment(
    equipment_id: str,
    response: Response,
    order_id: str | None = Query(None, alias="orderId"),
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    if not order_id:
        raise HTTPException(400, "orderId is required")

    report = await repo.get_service_report_by_equipment(equipment_id, order_id)
    if report:
        return report.to_doc()

    if not await repo.get_equipment(equipment_id):
        raise HTTPException(404, "Equipment not found")
    if not await repo.get_order(order_id):
        raise HTTPException(404, "Order not found")

    report = await repo.add_service_report({"orderId": order_id, "equipmentId": equipment_id})
    logger.info("Created service report %s for equipment %s on order %s", report.report_id, equipment_id, order_id)
    response.status_code = 201
    return report.to_doc()


@router.get("/order/{order_id}")
async def list_for_order(
    order_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    return [r.to_doc() for r in await repo.list_service_reports(order_id=order_id)]


@router.get("/{report_id}")
async def get_report(
    report_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    return (await _get_report_or_404(repo, report_id)).to_doc()


@router.put("/{report_id}")
async def update_report(
    report_id: str,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    await _get_report_or_404(repo, report_id)
    updates = {k: v for k, v in ServiceReport.alias_keys(body).items() if k not in _PROTECTED_FIELDS}
    report = await repo.update_service_report(report_id, updates)
    report = await _mark_started(repo, report)
    return report.to_doc()


# ── Components ────────────────────────────────────────────

@router.post("/{report_id}/components", status_code=201)
async def add_component(
    report_id: str,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    report = await _get_report_or_404(repo, report_id)
    components = [*report.report_data.components, ReportComponent.model_validate(body)]
    report = await _save_components(repo, report, components)
    return report.to_doc()


@router.put("/{report_id}/components/{index}")
async def replace_component(
    report_id: str,
    index: int,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    report = await _get_report_or_404(repo, report_id)
    components = list(report.report_data.components)
    if not 0 <= index < len(components):
        raise HTTPException(404, "Component not found")
    components[index] = ReportComponent.model_validate(body)
    report = await _save_components(repo, report, components)
    return report.to_doc()


@router.delete("/{report_id}/components/{index}")
async def delete_component(
    report_id: str,
    index: int,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    report = await _get_report_or_404(repo, report_id)
    components = list(report.report_data.components)
    if not 0 <= index < len(components):
        raise HTTPException(404, "Component not found")
    del components[index]
    report = await _save_components(repo, report, components)
    return report.to_doc()


# ── Completeness and finalize ─────────────────────────────

@router.get("/{report_id}/completeness")
async def get_completeness(
    report_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    report = await _get_report_or_404(repo, report_id)
    equipment_type = await _equipment_type(repo, report)
    template = await repo.get_checklist_template(equipment_type)
    return report_completeness(report, template, equipment_type)


@router.post("/{report_id}/complete")
async def complete_report(
    report_id: str,
    body: dict | None = None,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    body = body or {}
    report = await _get_report_or_404(repo, report_id)
    if report.status == "completed":
        raise HTTPException(400, "Service report is already completed")

    equipment_type = await _equipment_type(repo, report)
    template = await repo.get_checklist_template(equipment_type)
    if not is_report_finalizable(report, template, equipment_type):
        raise HTTPException(400, "Service report is incomplete")

    updates: dict = {"status": "completed", "completedAt": utcnow_iso()}
    if "overallComment" in body:
        report_data = report.report_data.model_copy(update={"overall_comment": body["overallComment"] or ""})
        updates["reportData"] = report_data.to_doc()
    if "signature" in body:
        updates["signature"] = body["signature"]
    report = await repo.update_service_report(report_id, updates)

    await repo.update_equipment(report.equipment_id, {"serviceStatus": "completed"})
    logger.info("Service report %s completed by %s", report_id, auth.user_id)
    return report.to_doc()


# ── Photos, invoicing, PDF ────────────────────────────────

@router.post("/{report_id}/photos")
async def add_photos(
    report_id: str,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    report = await _get_report_or_404(repo, report_id)
    photos = body.get("photos")
    if photos is None and body.get("url"):
        photos = [body["url"]]
    if not isinstance(photos, list) or not photos:
        raise HTTPException(400, "photos must be a non-empty list of URLs")
    report = await repo.update_service_report(report_id, {"photos": [*report.photos, *photos]})
    return report.to_doc()


@router.post("/{report_id}/send-to-invoicing")
async def send_to_invoicing(
    report_id: str,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    report = await _get_report_or_404(repo, report_id)
    if report.status != "completed":
        raise HTTPException(400, "Only completed reports can be sent to invoicing")
    report = await repo.update_service_report(report_id, {"sentToInvoicing": True})
    logger.info("Service report %s sent to invoicing", report_id)
    return report.to_doc()


@router.get("/{report_id}/pdf")
async def get_report_pdf(
    report_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    await _get_report_or_404(repo, report_id)

    from airtech.services.pdf_generator import generate_service_report_pdf
    pdf_bytes = await generate_service_report_pdf(repo, report_id)

    filename = f"servicerapport_{report_id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
