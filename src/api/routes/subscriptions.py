"""Business subscriptions. Payment itself happens elsewhere; only the record is kept."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_user, get_db_session, require_roles, require_self
from src.api.schemas.auth import MessageResponse
from src.api.schemas.subscriptions import (
    SubscriptionCreate,
    SubscriptionEnvelope,
    SubscriptionResponse,
    SubscriptionUpdate,
)
from src.core.auth import Role
from src.domain import User
from src.domain.billing import subscription_end_date
from src.infrastructure.db.models import Subscription, SubscriptionStatus

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])
logger = structlog.get_logger()

_business_user = require_roles([role.value for role in Role.business_roles()])


async def _get_owned_subscription(
    session: AsyncSession, subscription_id: int, user: User
) -> Subscription:
    subscription = await session.get(Subscription, subscription_id)
    if subscription is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found"
        )
    if subscription.user_id != user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    return subscription


@router.post(
    "",
    response_model=SubscriptionEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Start a subscription",
)
async def create_subscription(
    payload: SubscriptionCreate,
    user: User = Depends(_business_user),
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionEnvelope:
    existing = await session.scalar(
        select(Subscription.id).where(Subscription.user_id == user.user_id)
    )
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Subscription already exists"
        )

    now = datetime.now(UTC)
    subscription = Subscription(
        user_id=user.user_id,
        plan_type=payload.plan_type,
        status=SubscriptionStatus.ACTIVE,
        start_date=now,
        end_date=subscription_end_date(now, payload.plan_type.value),
        payment_data=payload.payment_data,
    )
    session.add(subscription)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Subscription already exists"
        ) from exc
    await session.refresh(subscription)

    logger.info(
        "subscription_created",
        user_id=user.user_id,
        subscription_id=subscription.id,
        plan_type=payload.plan_type.value,
    )
    return SubscriptionEnvelope(
        message="Subscription created",
        subscription=SubscriptionResponse.model_validate(subscription),
    )


@router.get(
    "/users/{user_id}/subscription",
    response_model=SubscriptionEnvelope,
    summary="Subscription of an account",
)
async def get_user_subscription(
    user_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionEnvelope:
    require_self(user_id, user)
    subscription = await session.scalar(
        select(Subscription).where(Subscription.user_id == user_id)
    )
    if subscription is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found"
        )
    return SubscriptionEnvelope(subscription=SubscriptionResponse.model_validate(subscription))


@router.put("/{subscription_id}", response_model=SubscriptionEnvelope)
async def update_subscription(
    subscription_id: int,
    payload: SubscriptionUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionEnvelope:
    """Change plan, payment data or status; the window is recomputed from the start date."""
    subscription = await _get_owned_subscription(session, subscription_id, user)

    if payload.plan_type is not None:
        subscription.plan_type = payload.plan_type
    if payload.payment_data is not None:
        subscription.payment_data = payload.payment_data
    if payload.status is not None:
        subscription.status = payload.status
    subscription.end_date = subscription_end_date(
        subscription.start_date, subscription.plan_type.value
    )

    await session.commit()
    await session.refresh(subscription)

    logger.info(
        "subscription_updated",
        user_id=user.user_id,
        subscription_id=subscription.id,
        updated_fields=sorted(payload.model_dump(exclude_none=True)),
    )
    return SubscriptionEnvelope(
        message="Subscription updated",
        subscription=SubscriptionResponse.model_validate(subscription),
    )


@router.delete("/{subscription_id}", response_model=MessageResponse)
async def delete_subscription(
    subscription_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    subscription = await _get_owned_subscription(session, subscription_id, user)
    await session.delete(subscription)
    await session.commit()

    logger.info("subscription_deleted", user_id=user.user_id, subscription_id=subscription_id)
    return MessageResponse(message="Subscription deleted")
