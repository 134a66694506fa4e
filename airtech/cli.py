"""CLI for Air-Tech Service: bootstrap the store, manage technicians and templates."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import sys
from pathlib import Path

DEFAULT_TEMPLATES = Path(__file__).resolve().parent / "data" / "default_checklist_templates.json"


async def _open_repository():
    from airtech.config import get_settings
    from airtech.db.backends import backend_from_config
    from airtech.db.repository import Repository

    repo = Repository(backend_from_config(get_settings().storage))
    await repo.load()
    return repo


def _read_templates(path: Path) -> list[dict]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of templates")
    return data


async def cmd_init_db(args):
    """Create the store, or repair it if unreadable."""
    repo = await _open_repository()
    try:
        if args.with_templates and not await repo.list_checklist_templates():
            templates = await repo.replace_checklist_templates(_read_templates(DEFAULT_TEMPLATES))
            print(f"Loaded {len(templates)} default checklist templates")
    finally:
        await repo.close()
    print(f"Store ready: {repo.backend!r}")


async def cmd_create_technician(args):
    from airtech.schemas import initials_from_name
    from airtech.services.auth import hash_password

    password = args.password
    if not password:
        password = getpass.getpass("Technician password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    if len(password) < 6:
        print("Password must be at least 6 characters")
        sys.exit(1)

    repo = await _open_repository()
    try:
        tech = await repo.add_technician({
            "name": args.name,
            "email": args.email,
            "phone": args.phone,
            "initials": initials_from_name(args.name),
            "passwordHash": hash_password(password),
        })
    finally:
        await repo.close()
    print(f"Technician created: {tech.name} (id={tech.id})")
    print(f"Log in with technicianId={tech.id}")


async def cmd_hash_password(args):
    """Print a bcrypt hash for auth.admin_password_hash."""
    from airtech.services.auth import hash_password

    password = args.password or getpass.getpass("Password: ")
    print(hash_password(password))


async def cmd_load_templates(args):
    templates = _read_templates(Path(args.file))
    repo = await _open_repository()
    try:
        loaded = await repo.replace_checklist_templates(templates)
    finally:
        await repo.close()
    print(f"Replaced checklist templates: {', '.join(t.equipment_type for t in loaded)}")


async def cmd_seed(args):
    """Load demo data: customers, technicians, equipment, one scheduled order."""
    from datetime import date

    from airtech.services.auth import hash_password

    repo = await _open_repository()
    try:
        await repo.replace_checklist_templates(_read_templates(DEFAULT_TEMPLATES))

        customer = await repo.add_customer({
            "name": "Bergen Næringsbygg AS",
            "customerNumber": "1001",
            "organizationNumber": "912345678",
            "email": "drift@bergen-naering.no",
            "phone": "55 12 34 56",
            "address": "Strandgaten 12, 5013 Bergen",
            "contact": "Kari Nordmann",
        })
        tech = await repo.add_technician({
            "name": "Rune Hansen",
            "email": "rune@air-tech.no",
            "phone": "900 11 222",
            "initials": "RH",
            "passwordHash": hash_password(args.password),
        })
        await repo.add_equipment({
            "customerId": customer.id,
            "type": "ventilasjonsaggregat",
            "systemNumber": "360.001",
            "name": "Aggregat kontorfløy",
            "location": "Teknisk rom, 5. etg",
            "operator": "Vaktmester",
        })
        await repo.add_equipment({
            "customerId": customer.id,
            "type": "vifter",
            "systemNumber": "360.002",
            "name": "Avtrekksvifte tak",
            "location": "Tak",
        })
        order = await repo.add_order({
            "customerId": customer.id,
            "customerName": customer.name,
            "technicianId": tech.id,
            "scheduledDate": date.today().isoformat(),
            "scheduledTime": "08:00",
            "serviceType": "Vedlikehold",
            "description": "Årlig service ventilasjon",
            "status": "scheduled",
        })
    finally:
        await repo.close()

    print(f"Seeded customer {customer.id}, technician {tech.id}, order {order.order_number}")
    print(f"Log in with technicianId={tech.id} password={args.password}")


def main():
    parser = argparse.ArgumentParser(description="Air-Tech Service CLI")
    subparsers = parser.add_subparsers(dest="command")

    # init-db
    idb = subparsers.add_parser("init-db", help="Create or repair the data store")
    idb.add_argument("--with-templates", action="store_true", help="Load default checklist templates if none exist")

    # create-technician
    ct = subparsers.add_parser("create-technician", help="Create a technician login")
    ct.add_argument("--name", required=True, help="Full name")
    ct.add_argument("--email", default="", help="Email")
    ct.add_argument("--phone", default="", help="Phone number")
    ct.add_argument("--password", default="", help="Password (prompted if not given)")

    # hash-password
    hp = subparsers.add_parser("hash-password", help="Print a bcrypt hash for the admin config")
    hp.add_argument("--password", default="", help="Password (prompted if not given)")

    # load-templates
    lt = subparsers.add_parser("load-templates", help="Replace checklist templates from a JSON file")
    lt.add_argument("file", help="JSON file with a list of templates")

    # seed
    sd = subparsers.add_parser("seed", help="Load demo data")
    sd.add_argument("--password", default="demo1234", help="Password for the demo technician")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-technician":
        asyncio.run(cmd_create_technician(args))
    elif args.command == "hash-password":
        asyncio.run(cmd_hash_password(args))
    elif args.command == "load-templates":
        asyncio.run(cmd_load_templates(args))
    elif args.command == "seed":
        asyncio.run(cmd_seed(args))


if __name__ == "__main__":
    main()
