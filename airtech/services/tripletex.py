"""Tripletex accounting API client (read-only customer master data).

Tripletex authenticates with a session token created from the consumer and
employee tokens; every call then uses HTTP basic auth with user ``0`` and the
session token as password.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from airtech.config import TripletexConfig

logger = logging.getLogger(__name__)


class TripletexError(Exception):
    """A failed call to the Tripletex API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TripletexNotConfigured(TripletexError):
    pass


class TripletexClient:
    def __init__(self, config: TripletexConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._session_token: str | None = None

    @property
    def configured(self) -> bool:
        return bool(self.config.base_url and self.config.consumer_token and self.config.employee_token)

    def _client(self) -> httpx.AsyncClient:
        if not self.configured:
            raise TripletexNotConfigured("Tripletex is not configured")
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._http

    async def _get_session_token(self) -> str:
        if self._session_token:
            return self._session_token

        client = self._client()
        expiration = date(date.today().year, 12, 31).isoformat()
        logger.info("Requesting Tripletex session token")
        try:
            r = await client.put(
                "/token/session/:create",
                params={
                    "consumerToken": self.config.consumer_token,
                    "employeeToken": self.config.employee_token,
                    "expirationDate": expiration,
                },
            )
            r.raise_for_status()
            self._session_token = r.json()["value"]["token"]
        except httpx.HTTPStatusError as e:
            logger.error("Tripletex session token rejected: %s %s", e.response.status_code, e.response.text)
            raise TripletexError("Could not authenticate with Tripletex", e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error("Tripletex unreachable: %s", e)
            raise TripletexError("No response from Tripletex API") from e
        except (KeyError, TypeError, ValueError) as e:
            raise TripletexError("Unexpected session token response from Tripletex") from e
        return self._session_token

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        token = await self._get_session_token()
        client = self._client()
        try:
            r = await client.get(path, params=params, auth=("0", token))
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                # Token expired or revoked; the next call creates a new one.
                self._session_token = None
            try:
                body = e.response.json()
            except ValueError:
                body = None
            message = (body.get("message") if isinstance(body, dict) else None) or str(e)
            logger.error("Tripletex API error on %s: %s %s", path, e.response.status_code, message)
            raise TripletexError(f"Tripletex API Error: {message}", e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error("Tripletex request to %s failed: %s", path, e)
            raise TripletexError("No response from Tripletex API") from e

        try:
            data = r.json()
        except ValueError as e:
            logger.error("Tripletex returned a non-JSON body on %s", path)
            raise TripletexError("Invalid response from Tripletex API", r.status_code) from e
        if not isinstance(data, dict):
            raise TripletexError("Invalid response from Tripletex API", r.status_code)
        return data

    async def get_customers(self, **params: Any) -> dict[str, Any]:
        """Raw customer list: ``{"fullResultSize": n, "values": [...]}``."""
        data = await self._get("/customer", params=params or None)
        logger.info("Fetched %d customers from Tripletex", len(data.get("values") or []))
        return data

    async def get_customer(self, customer_id: str | int) -> dict[str, Any]:
        data = await self._get(f"/customer/{customer_id}")
        return data.get("value", data)

    async def test_connection(self) -> dict[str, Any]:
        try:
            data = await self.get_customers(count=1)
        except TripletexError as e:
            return {"success": False, "message": str(e)}
        return {
            "success": True,
            "message": "Tripletex API is reachable",
            "customerCount": data.get("fullResultSize", 0),
        }

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


def _format_address(address: dict[str, Any] | None) -> str:
    if not address:
        return ""
    street = " ".join(p for p in (address.get("addressLine1"), address.get("addressLine2")) if p)
    town = " ".join(p for p in (address.get("postalCode"), address.get("city")) if p)
    return ", ".join(p for p in (street, town) if p)


def to_customer_summary(raw: dict[str, Any]) -> dict[str, Any]:
    """Map a Tripletex customer onto the local customer shape."""
    contact = raw.get("customerContact") or {}
    contact_name = " ".join(p for p in (contact.get("firstName"), contact.get("lastName")) if p)
    return {
        "id": str(raw.get("id")),
        "name": raw.get("name", ""),
        "customerNumber": raw.get("customerNumber"),
        "organizationNumber": raw.get("organizationNumber"),
        "contact": contact_name,
        "email": raw.get("email") or contact.get("email") or "",
        "phone": raw.get("phoneNumber") or raw.get("phoneNumberMobile") or "",
        "address": _format_address(raw.get("physicalAddress")),
        "postalAddress": _format_address(raw.get("postalAddress")),
        "invoiceEmail": raw.get("invoiceEmail") or "",
        "isPrivate": bool(raw.get("isPrivateIndividual", False)),
    }
