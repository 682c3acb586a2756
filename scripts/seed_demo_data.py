#!/usr/bin/env python3
"""CLI script to load demo data into an empty CRM database.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --force

Creates a handful of clients, listings, a buying stage, a lead, and some
finance records through the same repositories the API uses, so every
side effect (interactions, queued emails, fan-out records) is produced
exactly as it would be for real traffic.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone

# Ensure project root is on sys.path so we can import src.crm
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


CLIENTS = [
    {"name": "Maria Lopez", "email": "maria.lopez@example.com", "phone": "555-0101"},
    {"name": "Daniel Chen", "email": "daniel.chen@example.com", "phone": "555-0102"},
    {"name": "Priya Nair", "email": None, "phone": "555-0103"},
]

PROPERTIES = [
    {
        "title": "Sunny 3BR Colonial",
        "address": "12 Elm Street, Springfield",
        "price": 450000,
        "type": "House",
        "listing_type": "SALE",
        "bedrooms": 3,
        "bathrooms": 2,
        "area": 1850,
        "garage": True,
        "basement": True,
    },
    {
        "title": "Downtown Loft",
        "address": "400 Main Street #5B, Springfield",
        "price": 2400,
        "type": "Apartment",
        "listing_type": "RENTAL",
        "bedrooms": 1,
        "bathrooms": 1,
        "area": 780,
        "furnished": True,
        "lease_term": "12 months",
    },
    {
        "title": "Family Home near Park",
        "address": "88 Oak Avenue, Springfield",
        "price": 615000,
        "type": "House",
        "listing_type": "SALE",
        "bedrooms": 4,
        "bathrooms": 3,
        "area": 2600,
    },
]


async def seed(force: bool) -> int:
    from sqlalchemy import func, select
    from sqlalchemy.ext.asyncio import AsyncSession

    from src.crm.clients.repository import ClientRepository
    from src.crm.clients.schemas import ClientCreate
    from src.crm.core.database import close_db, get_engine, init_db
    from src.crm.finances.repository import FinanceRepository
    from src.crm.finances.schemas import CommissionCreate, GoalCreate, TransactionCreate
    from src.crm.leads.repository import LeadRepository
    from src.crm.leads.schemas import LeadCreate
    from src.crm.models import Client
    from src.crm.properties.repository import PropertyRepository
    from src.crm.properties.schemas import PropertyCreate
    from src.crm.requirements.schemas import RequirementCreate
    from src.crm.workflows.repository import StageRepository
    from src.crm.workflows.schemas import ProcessCreate, StageCreate

    await init_db()

    try:
        async with AsyncSession(get_engine(), expire_on_commit=False) as session:
            count = await session.scalar(select(func.count()).select_from(Client))
            if count and not force:
                print(f"Database already has {count} clients; use --force to seed anyway", file=sys.stderr)
                return 1

            now = datetime.now(timezone.utc)
            clients_repo = ClientRepository(session)
            properties_repo = PropertyRepository(session)

            clients = []
            for values in CLIENTS:
                client = await clients_repo.create_client(
                    ClientCreate(
                        **values,
                        requirements=RequirementCreate(
                            type="PURCHASE",
                            property_type="House",
                            budget_min=350000,
                            budget_max=650000,
                            bedrooms=3,
                            preferred_locations=["Springfield"],
                        ),
                        force_create=True,
                    )
                )
                clients.append(client)
                print(f"  Client:   {client.name} ({client.id})")

            listings = []
            for values in PROPERTIES:
                listing = await properties_repo.create_property(PropertyCreate(**values))
                listings.append(listing)
                print(f"  Property: {listing.title} ({listing.id})")

            buyer = clients[0]
            stage = await StageRepository(session).create_stage(
                buyer,
                StageCreate(
                    title="House Hunting",
                    description="Tour shortlisted homes",
                    processes=[
                        ProcessCreate(
                            title="Schedule first viewings",
                            type="MEETING",
                            due_date=now + timedelta(days=3),
                        ),
                        ProcessCreate(
                            title="Send pre-approval checklist",
                            type="EMAIL",
                            due_date=now + timedelta(days=1),
                        ),
                    ],
                ),
            )
            print(f"  Stage:    {stage.title} ({len(stage.processes)} processes)")

            await properties_repo.share_properties(
                buyer.id, [listings[0].id, listings[2].id], stage_id=stage.id
            )

            lead = await LeadRepository(session).create_lead(
                LeadCreate(
                    first_name="Tom",
                    last_name="Baker",
                    email="tom.baker@example.com",
                    source="Open House",
                )
            )
            print(f"  Lead:     {lead.first_name} {lead.last_name} ({lead.id})")

            finances = FinanceRepository(session)
            await finances.create_commission(
                CommissionCreate(
                    amount=13500,
                    percentage=3,
                    due_date=now + timedelta(days=30),
                    property_id=listings[0].id,
                    client_id=buyer.id,
                )
            )
            await finances.create_transaction(
                TransactionCreate(
                    type="EXPENSE",
                    amount=250,
                    description="Listing photography",
                    category="Marketing",
                    date=now,
                )
            )
            await finances.create_goal(
                GoalCreate(
                    title="Quarterly commission target",
                    target_amount=60000,
                    end_date=now + timedelta(days=90),
                )
            )

        print("Demo data seeded successfully")
        return 0
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the CRM with demo data")
    parser.add_argument("--force", action="store_true", help="Seed even if clients already exist")
    args = parser.parse_args()

    sys.exit(asyncio.run(seed(args.force)))


if __name__ == "__main__":
    main()
