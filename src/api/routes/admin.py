"""Back-office provisioning of business and car-owner accounts."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_email_service, require_admin_key
from src.api.schemas.admin import (
    ProvisionedUser,
    ProvisionedUserType,
    ProvisionPartSellerRequest,
    ProvisionResponse,
    ProvisionUserRequest,
)
from src.domain.services.auth_service import UserExistsError, user_to_dict
from src.domain.services.notifications import EmailService
from src.domain.services.provisioning import ProvisioningService
from src.infrastructure.db.models import UserModel

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin_key)])
logger = structlog.get_logger()

SERVICE_CENTER_FIELDS = ("password", "business_name", "address", "business_registration_number")


async def _welcome(email_service: EmailService, user: UserModel) -> None:
    result = await email_service.send_welcome_email(user.email, user.name)
    if not result.success:
        logger.warning("provisioning_welcome_email_failed", user_id=user.id, error=result.error)


@router.post(
    "/users",
    response_model=ProvisionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a service center or car user",
)
async def provision_user(
    payload: ProvisionUserRequest,
    session: AsyncSession = Depends(get_db_session),
    email_service: EmailService = Depends(get_email_service),
) -> ProvisionResponse:
    service = ProvisioningService(session)

    try:
        if payload.user_type is ProvisionedUserType.SERVICE_CENTERS:
            missing = [name for name in SERVICE_CENTER_FIELDS if not getattr(payload, name)]
            if missing:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Missing required service center fields: {', '.join(missing)}",
                )
            user = await service.create_service_center(
                name=payload.name,
                email=payload.email,
                phone=payload.phone,
                password=payload.password,
                business_name=payload.business_name,
                address=payload.address,
                business_registration_number=payload.business_registration_number,
            )
        else:
            if not payload.total_vehicles:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Missing total_vehicles for car user",
                )
            user = await service.create_car_user(
                name=payload.name, email=payload.email, phone=payload.phone
            )
    except UserExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    await _welcome(email_service, user)
    logger.info("admin_user_provisioned", user_id=user.id, user_type=payload.user_type.value)
    return ProvisionResponse(
        message="User created successfully", user=ProvisionedUser(**user_to_dict(user))
    )


@router.post(
    "/part-sellers",
    response_model=ProvisionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a spare parts seller",
)
async def provision_part_seller(
    payload: ProvisionPartSellerRequest,
    session: AsyncSession = Depends(get_db_session),
    email_service: EmailService = Depends(get_email_service),
) -> ProvisionResponse:
    try:
        user = await ProvisioningService(session).create_part_seller(
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            password=payload.password,
            shop_name=payload.shop_name,
            address=payload.address,
            categories_sold=payload.categories_sold,
            contact_person_name=payload.contact_person_name,
            inventory_capacity=payload.inventory_capacity,
        )
    except UserExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    await _welcome(email_service, user)
    logger.info("admin_part_seller_provisioned", user_id=user.id)
    return ProvisionResponse(
        message="Spare Parts Seller created successfully",
        user=ProvisionedUser(**user_to_dict(user)),
    )
