#!/usr/bin/env python3
"""
Seed service types and one demo account per role for local development.

Run with:
    python scripts/seed_demo_accounts.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
from datetime import UTC, datetime

from sqlalchemy import select

from src.domain.billing import subscription_end_date
from src.domain.reference_data import SERVICE_TYPES
from src.domain.services.auth_service import UserExistsError
from src.domain.services.provisioning import ProvisioningService
from src.infrastructure.db.models import (
    PlanType,
    ServiceType,
    Subscription,
    SubscriptionStatus,
    UserModel,
    Vehicle,
)
from src.infrastructure.db.session import dispose_engine, get_session_factory

DEMO_PASSWORD = "demo-password-1"


async def seed_service_types(session) -> int:
    existing = set((await session.execute(select(ServiceType.name))).scalars().all())
    added = 0
    for service_type in SERVICE_TYPES:
        if service_type["name"] not in existing:
            session.add(ServiceType(**service_type))
            added += 1
    await session.commit()
    return added


async def seed_accounts(session) -> list[UserModel]:
    provisioning = ProvisioningService(session)
    created = []

    try:
        center = await provisioning.create_service_center(
            name="Demo Service Center",
            email="center@motortrace.dev",
            phone="0112345678",
            password=DEMO_PASSWORD,
            business_name="Demo Motors",
            address="1 Demo Road",
            business_registration_number="BR-DEMO-1",
        )
        now = datetime.now(UTC)
        center.subscription = Subscription(
            plan_type=PlanType.YEARLY,
            status=SubscriptionStatus.ACTIVE,
            start_date=now,
            end_date=subscription_end_date(now, PlanType.YEARLY.value),
            payment_data={"source": "seed"},
        )
        await session.commit()
        created.append(center)
    except UserExistsError:
        print("  center@motortrace.dev already exists, skipping")

    try:
        seller = await provisioning.create_part_seller(
            name="Demo Parts",
            email="seller@motortrace.dev",
            phone="0112345679",
            password=DEMO_PASSWORD,
            shop_name="Demo Parts",
            address="2 Demo Road",
            categories_sold=["engine", "brakes"],
            contact_person_name="Demo Seller",
        )
        created.append(seller)
    except UserExistsError:
        print("  seller@motortrace.dev already exists, skipping")

    try:
        owner = await provisioning.create_car_user(
            name="Demo Driver", email="driver@motortrace.dev", phone="0771234567"
        )
        owner.vehicles.append(
            Vehicle(
                vehicle_name="Corolla",
                model="Toyota",
                year=2020,
                license_plate="DEMO-001",
                is_primary=True,
            )
        )
        await session.commit()
        created.append(owner)
    except UserExistsError:
        print("  driver@motortrace.dev already exists, skipping")

    return created


async def main() -> None:
    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            added = await seed_service_types(session)
            print(f"Seeded {added} service types")

            accounts = await seed_accounts(session)
            for account in accounts:
                print(f"  {account.role.value}: {account.email} (id={account.id})")
    finally:
        await dispose_engine()

    print(f"\nService-center and part-seller logins use password: {DEMO_PASSWORD}")
    print("The demo driver has no password; use scripts/generate_test_token.py instead.")


if __name__ == "__main__":
    asyncio.run(main())
