"""
Onboarding completeness checks.

The verdict is derived from the account row, its role profile, vehicles and
subscription. Two observed behaviours are kept on purpose:

* car owners never count as registration-complete here, whatever their phone,
  yet the registration step is not listed as missing for them;
* every failing check overwrites ``redirect_to``, so a missing payment wins
  over an earlier missing registration or profile step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from src.domain.models import (
    SETUP_DETAILS_ROUTE,
    SETUP_PAYMENT_ROUTE,
    SetupStatus,
    SetupStep,
)
from src.infrastructure.db.models import SubscriptionStatus, UserModel, UserRole

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

BUSINESS_ROLES = (UserRole.SERVICE_CENTER.value, UserRole.PART_SELLER.value)


class AccountNotFoundError(Exception):
    """Raised when the account id does not resolve to a row."""


def derive_setup_status(
    *,
    role: str | None,
    phone: str | None,
    has_profile: bool,
    vehicle_count: int,
    subscription_status: str | None,
) -> SetupStatus:
    """Compute the setup verdict from already-loaded account facts."""
    missing_steps: list[str] = []
    redirect_to: str | None = None

    is_registration_complete = bool(phone) and bool(role) and role != UserRole.CAR_OWNER.value
    # car owners never pass the registration check but are not asked to repeat it
    if not is_registration_complete and role != UserRole.CAR_OWNER.value:
        missing_steps.append(SetupStep.REGISTRATION.value)
        redirect_to = SETUP_DETAILS_ROUTE

    if role == UserRole.CAR_OWNER.value:
        is_setup_complete = has_profile and vehicle_count > 0
    elif role in BUSINESS_ROLES:
        is_setup_complete = has_profile
    else:
        is_setup_complete = False

    if not is_setup_complete:
        missing_steps.append(SetupStep.PROFILE.value)
        redirect_to = SETUP_DETAILS_ROUTE

    has_active_subscription = subscription_status == SubscriptionStatus.ACTIVE.value
    if role in BUSINESS_ROLES and not has_active_subscription:
        missing_steps.append(SetupStep.PAYMENT.value)
        redirect_to = SETUP_PAYMENT_ROUTE

    if not missing_steps:
        redirect_to = None

    return SetupStatus(
        is_registration_complete=is_registration_complete,
        is_setup_complete=is_setup_complete,
        has_active_subscription=has_active_subscription,
        missing_steps=missing_steps,
        redirect_to=redirect_to,
    )


def setup_status_for(user: UserModel) -> SetupStatus:
    """Derive the verdict for a loaded ``UserModel`` and its relationships."""
    role = user.role.value if user.role else None
    profile = {
        UserRole.CAR_OWNER.value: user.car_owner_profile,
        UserRole.SERVICE_CENTER.value: user.service_center_profile,
        UserRole.PART_SELLER.value: user.part_seller_profile,
    }.get(role or "")
    subscription = user.subscription

    return derive_setup_status(
        role=role,
        phone=user.phone,
        has_profile=profile is not None,
        vehicle_count=len(user.vehicles),
        subscription_status=subscription.status.value if subscription else None,
    )


def can_access_dashboard(status: SetupStatus) -> bool:
    return not status.missing_steps


def next_setup_step(status: SetupStatus) -> str | None:
    return status.redirect_to


class SetupStatusService:
    """Loads an account and reports how far through onboarding it is."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def check_setup_status(self, user_id: int) -> SetupStatus:
        # populate_existing refreshes relationships already in the identity map
        stmt = (
            select(UserModel)
            .where(UserModel.id == user_id)
            .execution_options(populate_existing=True)
        )
        user = (await self.session.execute(stmt)).scalar_one_or_none()
        if user is None:
            raise AccountNotFoundError(f"User {user_id} not found")

        status = setup_status_for(user)
        await logger.adebug(
            "setup_status_checked",
            user_id=user_id,
            role=user.role.value,
            missing_steps=status.missing_steps,
        )
        return status
