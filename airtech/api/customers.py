"""Customer API, including read-only lookups in Tripletex."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, get_tripletex, require_admin, require_auth
from airtech.services.auth import AuthContext
from airtech.services.tripletex import (
    TripletexClient, TripletexError, TripletexNotConfigured, to_customer_summary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["customers"])


def _tripletex_http_error(e: TripletexError) -> HTTPException:
    if isinstance(e, TripletexNotConfigured):
        return HTTPException(503, str(e))
    if e.status_code == 404:
        return HTTPException(404, "Customer not found in Tripletex")
    return HTTPException(502, str(e))


@router.get("")
async def list_customers(
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    return [c.to_doc() for c in await repo.list_customers()]


@router.get("/tripletex")
async def list_tripletex_customers(
    name: str | None = Query(None),
    count: int = Query(1000),
    auth: AuthContext = Depends(require_auth),
    tripletex: TripletexClient = Depends(get_tripletex),
):
    params: dict = {"count": count, "isInactive": False}
    if name:
        params["name"] = name
    try:
        data = await tripletex.get_customers(**params)
    except TripletexError as e:
        raise _tripletex_http_error(e)
    return [to_customer_summary(c) for c in data.get("values") or []]


@router.get("/tripletex/status")
async def tripletex_status(
    auth: AuthContext = Depends(require_admin),
    tripletex: TripletexClient = Depends(get_tripletex),
):
    if not tripletex.configured:
        return {"success": False, "message": "Tripletex is not configured"}
    return await tripletex.test_connection()


@router.get("/tripletex/{customer_id}")
async def get_tripletex_customer(
    customer_id: str,
    auth: AuthContext = Depends(require_auth),
    tripletex: TripletexClient = Depends(get_tripletex),
):
    try:
        raw = await tripletex.get_customer(customer_id)
    except TripletexError as e:
        raise _tripletex_http_error(e)
    return to_customer_summary(raw)


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    customer = await repo.get_customer(customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")
    return customer.to_doc()


@router.post("", status_code=201)
async def create_customer(
    body: dict,
    auth: AuthContext = Depends(require_admin),
    repo: Repository = Depends(get_repository),
):
    if not body.get("name"):
        raise HTTPException(400, "name is required")
    customer = await repo.add_customer(body)
    logger.info("Created customer %s (%s)", customer.id, customer.name)
    return customer.to_doc()
