from __future__ import annotations

from airtech.schemas.common import Record


class Customer(Record):
    id: str = ""
    name: str
    customer_number: str | None = None
    organization_number: str | None = None
    email: str = ""
    phone: str = ""
    address: str = ""
    contact: str = ""
