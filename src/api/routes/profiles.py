from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_user, get_db_session, require_self
from src.api.schemas.auth import MessageResponse
from src.api.schemas.profiles import ProfileResponse, ProfileUpdate
from src.api.schemas.vehicles import VehicleResponse
from src.domain import User
from src.infrastructure.db.models import CarOwnerProfile, UserModel, UserRole

router = APIRouter(prefix="/profiles", tags=["Profiles"])
logger = structlog.get_logger()


def _role_profile(user: UserModel) -> dict[str, Any] | None:
    """Shape the role-specific profile block of ``GET /profiles/{user_id}``."""
    if user.role is UserRole.CAR_OWNER:
        profile = user.car_owner_profile
        return {
            "id": profile.id if profile else None,
            "name": profile.name if profile else None,
            "image_base64": profile.image_base64 if profile else None,
            "vehicles": [
                VehicleResponse.model_validate(vehicle).model_dump(mode="json")
                for vehicle in user.vehicles
            ],
        }

    if user.role is UserRole.SERVICE_CENTER and user.service_center_profile:
        center = user.service_center_profile
        return {
            "id": center.id,
            "business_name": center.business_name,
            "address": center.address,
            "business_registration_number": center.business_registration_number,
            "services_offered": center.services_offered or [],
            "operating_hours": center.operating_hours or {},
            "logo": center.logo,
        }

    if user.role is UserRole.PART_SELLER and user.part_seller_profile:
        shop = user.part_seller_profile
        return {
            "id": shop.id,
            "shop_name": shop.shop_name,
            "address": shop.address,
            "categories_sold": shop.categories_sold or [],
            "inventory_capacity": shop.inventory_capacity,
            "contact_person_name": shop.contact_person_name,
        }

    return None


@router.get("/{user_id}", response_model=ProfileResponse, summary="Account profile")
async def get_profile(
    user_id: int,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    account = await session.get(UserModel, user_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return ProfileResponse(
        id=account.id,
        email=account.email,
        name=account.name,
        phone=account.phone,
        role=account.role.value,
        profile=_role_profile(account),
    )


@router.put("/{user_id}", response_model=MessageResponse, summary="Update own profile")
async def update_profile(
    user_id: int,
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    require_self(user_id, user)

    account = await session.get(UserModel, user_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    account.name = payload.name
    account.phone = payload.phone

    if account.role is UserRole.CAR_OWNER:
        if account.car_owner_profile is None:
            account.car_owner_profile = CarOwnerProfile(
                name=payload.name, image_base64=payload.image
            )
        else:
            account.car_owner_profile.name = payload.name
            account.car_owner_profile.image_base64 = payload.image
    elif account.role is UserRole.SERVICE_CENTER and account.service_center_profile:
        account.service_center_profile.logo = payload.image

    await session.commit()

    logger.info("profile_updated", user_id=user_id, role=account.role.value)
    return MessageResponse(message="Profile updated successfully")
