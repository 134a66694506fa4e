"""Quote API: price estimates attached to orders."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from airtech.db.repository import Repository
from airtech.dependencies import get_repository, require_auth
from airtech.services.auth import AuthContext

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


@router.get("")
async def list_quotes(
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    return [q.to_doc() for q in await repo.list_quotes()]


@router.get("/order/{order_id}")
async def list_quotes_for_order(
    order_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    return [q.to_doc() for q in await repo.list_quotes(order_id=order_id)]


@router.get("/{quote_id}")
async def get_quote(
    quote_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    quote = await repo.get_quote(quote_id)
    if not quote:
        raise HTTPException(404, "Quote not found")
    return quote.to_doc()


@router.post("", status_code=201)
async def create_quote(
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    if not body.get("orderId") or not body.get("description"):
        raise HTTPException(400, "orderId and description are required")
    if not await repo.get_order(body["orderId"]):
        raise HTTPException(404, "Order not found")

    payload = {**body, "status": "pending"}
    quote = await repo.add_quote(payload)
    return quote.to_doc()


@router.put("/{quote_id}")
async def update_quote(
    quote_id: str,
    body: dict,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    quote = await repo.update_quote(quote_id, body)
    if not quote:
        raise HTTPException(404, "Quote not found")
    return quote.to_doc()


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: str,
    auth: AuthContext = Depends(require_auth),
    repo: Repository = Depends(get_repository),
):
    if not await repo.delete_quote(quote_id):
        raise HTTPException(404, "Quote not found")
    return {"message": "Quote deleted"}
