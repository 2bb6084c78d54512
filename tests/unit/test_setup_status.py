"""Unit tests for the onboarding setup-status evaluator."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain import SETUP_DETAILS_ROUTE, SETUP_PAYMENT_ROUTE
from src.domain.services.setup_status import (
    AccountNotFoundError,
    SetupStatusService,
    can_access_dashboard,
    derive_setup_status,
    next_setup_step,
)
from src.infrastructure.db.models import (
    CarOwnerProfile,
    PlanType,
    ServiceCenterProfile,
    Subscription,
    SubscriptionStatus,
    UserModel,
    UserRole,
    Vehicle,
)


class TestDeriveSetupStatus:
    """Pure verdict computation."""

    @pytest.mark.parametrize("role", ["service_center", "part_seller"])
    def test_business_role_without_subscription_needs_payment(self, role: str) -> None:
        status = derive_setup_status(
            role=role,
            phone="0771234567",
            has_profile=True,
            vehicle_count=0,
            subscription_status=None,
        )

        assert status.has_active_subscription is False
        assert "payment" in status.missing_steps

    def test_car_owner_with_profile_but_no_vehicle_is_not_set_up(self) -> None:
        status = derive_setup_status(
            role="car_owner",
            phone="0771234567",
            has_profile=True,
            vehicle_count=0,
            subscription_status=None,
        )

        assert status.is_setup_complete is False
        assert "profile" in status.missing_steps

    def test_no_missing_steps_means_no_redirect(self) -> None:
        status = derive_setup_status(
            role="part_seller",
            phone="0771234567",
            has_profile=True,
            vehicle_count=0,
            subscription_status="active",
        )

        assert status.missing_steps == []
        assert status.redirect_to is None
        assert can_access_dashboard(status) is True
        assert next_setup_step(status) is None

    def test_bare_car_owner_only_misses_profile(self) -> None:
        status = derive_setup_status(
            role="car_owner",
            phone=None,
            has_profile=False,
            vehicle_count=0,
            subscription_status=None,
        )

        assert status.is_registration_complete is False
        assert status.is_setup_complete is False
        assert status.missing_steps == ["profile"]
        assert status.redirect_to == SETUP_DETAILS_ROUTE

    def test_car_owner_is_never_registration_complete(self) -> None:
        status = derive_setup_status(
            role="car_owner",
            phone="0771234567",
            has_profile=True,
            vehicle_count=2,
            subscription_status=None,
        )

        assert status.is_registration_complete is False
        assert status.is_setup_complete is True
        assert status.missing_steps == []
        assert can_access_dashboard(status) is True

    def test_service_center_with_profile_only_misses_payment(self) -> None:
        status = derive_setup_status(
            role="service_center",
            phone="+15550100",
            has_profile=True,
            vehicle_count=0,
            subscription_status=None,
        )

        assert status.missing_steps == ["payment"]
        assert status.redirect_to == SETUP_PAYMENT_ROUTE

    def test_payment_redirect_overrides_earlier_steps(self) -> None:
        status = derive_setup_status(
            role="service_center",
            phone=None,
            has_profile=False,
            vehicle_count=0,
            subscription_status=None,
        )

        assert status.missing_steps == ["registration", "profile", "payment"]
        assert status.redirect_to == SETUP_PAYMENT_ROUTE
        assert next_setup_step(status) == SETUP_PAYMENT_ROUTE

    @pytest.mark.parametrize("subscription_status", ["cancelled", "expired"])
    def test_inactive_subscription_does_not_count(self, subscription_status: str) -> None:
        status = derive_setup_status(
            role="part_seller",
            phone="0771234567",
            has_profile=True,
            vehicle_count=0,
            subscription_status=subscription_status,
        )

        assert status.has_active_subscription is False
        assert status.missing_steps == ["payment"]

    def test_token_claims_and_dict_shape(self) -> None:
        status = derive_setup_status(
            role="service_center",
            phone="0771234567",
            has_profile=True,
            vehicle_count=0,
            subscription_status="active",
        )

        assert status.to_dict() == {
            "is_registration_complete": True,
            "is_setup_complete": True,
            "has_active_subscription": True,
            "missing_steps": [],
            "redirect_to": None,
        }
        assert status.token_claims() == {
            "is_registration_complete": True,
            "is_setup_complete": True,
            "has_active_subscription": True,
        }
        assert status.requires_setup is False


class TestSetupStatusService:
    """Loading accounts from the database."""

    async def test_unknown_account_raises(self, db: AsyncSession) -> None:
        with pytest.raises(AccountNotFoundError):
            await SetupStatusService(db).check_setup_status(9999)

    async def test_car_owner_with_vehicle_is_complete(self, db: AsyncSession) -> None:
        user = UserModel(email="car@example.com", role=UserRole.CAR_OWNER, phone="0771234567")
        user.car_owner_profile = CarOwnerProfile(name="Car Owner")
        user.vehicles.append(
            Vehicle(
                vehicle_name="Civic",
                model="Honda",
                year=2019,
                license_plate="CAR-0001",
                is_primary=True,
            )
        )
        db.add(user)
        await db.commit()

        status = await SetupStatusService(db).check_setup_status(user.id)

        assert status.is_setup_complete is True
        assert status.missing_steps == []

    async def test_subscription_status_change_is_picked_up(self, db: AsyncSession) -> None:
        now = datetime.now(UTC)
        user = UserModel(
            email="center@example.com", role=UserRole.SERVICE_CENTER, phone="0112345678"
        )
        user.service_center_profile = ServiceCenterProfile(
            business_name="Speedy Motors",
            address="12 Main Street",
            business_registration_number="BR-0001",
        )
        user.subscription = Subscription(
            plan_type=PlanType.MONTHLY,
            status=SubscriptionStatus.ACTIVE,
            start_date=now,
            end_date=now + timedelta(days=30),
        )
        db.add(user)
        await db.commit()

        service = SetupStatusService(db)
        assert (await service.check_setup_status(user.id)).missing_steps == []

        user.subscription.status = SubscriptionStatus.CANCELLED
        await db.commit()

        status = await service.check_setup_status(user.id)
        assert status.has_active_subscription is False
        assert status.missing_steps == ["payment"]
        assert status.redirect_to == SETUP_PAYMENT_ROUTE
