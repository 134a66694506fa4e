"""Admin reporting API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_admin
from airtech.services.annual_summary import build_annual_summary
from airtech.services.auth import AuthContext

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/annual-summary")
async def annual_summary(
    year: int | None = Query(None),
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    return build_annual_summary(
        await repo.list_customers(),
        await repo.list_orders(),
        await repo.list_quotes(),
        year=year,
    )
