import base64

import httpx
import pytest

from airtech.config import TripletexConfig
from airtech.services.tripletex import (
    TripletexClient, TripletexError, TripletexNotConfigured, to_customer_summary,
)

_CONFIG = TripletexConfig(
    base_url="https://tripletex.test/v2", consumer_token="consumer", employee_token="employee",
)

_RAW_CUSTOMER = {
    "id": 4711,
    "name": "Bergen Næringsbygg AS",
    "customerNumber": 1001,
    "organizationNumber": "912345678",
    "email": "",
    "phoneNumber": "55 12 34 56",
    "invoiceEmail": "faktura@bergen-naering.no",
    "isPrivateIndividual": False,
    "customerContact": {"firstName": "Kari", "lastName": "Nordmann", "email": "kari@bergen-naering.no"},
    "physicalAddress": {"addressLine1": "Strandgaten 12", "postalCode": "5013", "city": "Bergen"},
}


def _client(handler):
    return TripletexClient(_CONFIG, transport=httpx.MockTransport(handler))


async def test_session_token_is_created_once_and_sent_as_basic_auth():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.path.endswith("/token/session/:create"):
            assert request.method == "PUT"
            assert request.url.params["consumerToken"] == "consumer"
            assert request.url.params["employeeToken"] == "employee"
            return httpx.Response(200, json={"value": {"token": "sess-1"}})
        assert request.headers["authorization"] == "Basic " + base64.b64encode(b"0:sess-1").decode()
        return httpx.Response(200, json={"fullResultSize": 1, "values": [_RAW_CUSTOMER]})

    client = _client(handler)
    try:
        first = await client.get_customers(count=10)
        await client.get_customers()
    finally:
        await client.aclose()

    assert first["values"][0]["id"] == 4711
    token_calls = [c for c in calls if c.url.path.endswith(":create")]
    assert len(token_calls) == 1
    assert calls[1].url.params["count"] == "10"


async def test_get_customer_unwraps_value():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(200, json={"value": {"token": "sess-1"}})
        assert request.url.path.endswith("/customer/4711")
        return httpx.Response(200, json={"value": _RAW_CUSTOMER})

    client = _client(handler)
    try:
        customer = await client.get_customer(4711)
    finally:
        await client.aclose()
    assert customer["name"] == "Bergen Næringsbygg AS"


async def test_api_error_carries_status_and_message():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(200, json={"value": {"token": "sess-1"}})
        return httpx.Response(404, json={"status": 404, "message": "Object not found"})

    client = _client(handler)
    try:
        with pytest.raises(TripletexError) as exc_info:
            await client.get_customer(1)
    finally:
        await client.aclose()
    assert exc_info.value.status_code == 404
    assert "Object not found" in str(exc_info.value)


async def test_unauthorised_clears_cached_token():
    tokens = iter(["sess-1", "sess-2"])
    seen_auth = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(200, json={"value": {"token": next(tokens)}})
        seen_auth.append(request.headers["authorization"])
        if len(seen_auth) == 1:
            return httpx.Response(401, text="expired")
        return httpx.Response(200, json={"fullResultSize": 0, "values": []})

    client = _client(handler)
    try:
        with pytest.raises(TripletexError):
            await client.get_customers()
        await client.get_customers()
    finally:
        await client.aclose()
    assert seen_auth[0] != seen_auth[1]


async def test_rejected_token_request():
    client = _client(lambda request: httpx.Response(403, text="bad tokens"))
    try:
        with pytest.raises(TripletexError) as exc_info:
            await client.get_customers()
    finally:
        await client.aclose()
    assert exc_info.value.status_code == 403


async def test_not_configured():
    client = TripletexClient(TripletexConfig(base_url="", consumer_token="", employee_token=""))
    assert not client.configured
    with pytest.raises(TripletexNotConfigured):
        await client.get_customers()


async def test_test_connection_reports_failure():
    client = _client(lambda request: httpx.Response(500, text="down"))
    try:
        result = await client.test_connection()
    finally:
        await client.aclose()
    assert result["success"] is False


def test_customer_summary_mapping():
    summary = to_customer_summary(_RAW_CUSTOMER)
    assert summary == {
        "id": "4711",
        "name": "Bergen Næringsbygg AS",
        "customerNumber": 1001,
        "organizationNumber": "912345678",
        "contact": "Kari Nordmann",
        "email": "kari@bergen-naering.no",
        "phone": "55 12 34 56",
        "address": "Strandgaten 12, 5013 Bergen",
        "postalAddress": "",
        "invoiceEmail": "faktura@bergen-naering.no",
        "isPrivate": False,
    }


async def test_non_json_response_is_a_tripletex_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(200, json={"value": {"token": "sess"}})
        return httpx.Response(200, text="<html>Vedlikehold</html>")

    client = _client(handler)
    try:
        with pytest.raises(TripletexError) as exc:
            await client.get_customer(4711)
    finally:
        await client.aclose()
    assert exc.value.status_code == 200
    assert str(exc.value) == "Invalid response from Tripletex API"
