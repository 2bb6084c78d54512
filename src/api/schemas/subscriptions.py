from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from src.infrastructure.db.models import PlanType, SubscriptionStatus


class SubscriptionCreate(BaseModel):
    plan_type: PlanType
    payment_data: dict[str, Any] = Field(default_factory=dict)


class SubscriptionUpdate(BaseModel):
    plan_type: PlanType | None = None
    payment_data: dict[str, Any] | None = None
    status: SubscriptionStatus | None = None


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    plan_type: PlanType
    status: SubscriptionStatus
    start_date: datetime
    end_date: datetime
    payment_data: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class SubscriptionEnvelope(BaseModel):
    message: str | None = None
    subscription: SubscriptionResponse
