"""Back-office creation of fully registered business and car-owner accounts."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.services.auth_service import UserExistsError, hash_password
from src.infrastructure.db.models import (
    CarOwnerProfile,
    PartSellerProfile,
    ServiceCenterProfile,
    UserModel,
    UserRole,
)

logger = structlog.get_logger()


class ProvisioningService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_service_center(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        password: str,
        business_name: str,
        address: str,
        business_registration_number: str,
    ) -> UserModel:
        user = self._new_user(
            name=name, email=email, phone=phone, role=UserRole.SERVICE_CENTER, password=password
        )
        user.service_center_profile = ServiceCenterProfile(
            business_name=business_name,
            address=address,
            business_registration_number=business_registration_number,
            services_offered=[],
            operating_hours={},
        )
        return await self._save(user)

    async def create_car_user(self, *, name: str, email: str, phone: str) -> UserModel:
        # Vehicles are added by the owner later
        user = self._new_user(name=name, email=email, phone=phone, role=UserRole.CAR_OWNER)
        user.car_owner_profile = CarOwnerProfile(name=name)
        return await self._save(user)

    async def create_part_seller(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        password: str,
        shop_name: str,
        address: str,
        categories_sold: Sequence[str],
        contact_person_name: str,
        inventory_capacity: str | None = None,
    ) -> UserModel:
        user = self._new_user(
            name=name, email=email, phone=phone, role=UserRole.PART_SELLER, password=password
        )
        user.part_seller_profile = PartSellerProfile(
            shop_name=shop_name,
            address=address,
            categories_sold=list(categories_sold),
            inventory_capacity=inventory_capacity,
            contact_person_name=contact_person_name,
        )
        return await self._save(user)

    def _new_user(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        role: UserRole,
        password: str | None = None,
    ) -> UserModel:
        return UserModel(
            name=name,
            email=email.lower(),
            phone=phone,
            role=role,
            hashed_password=hash_password(password) if password else None,
            is_registration_complete=True,
        )

    async def _save(self, user: UserModel) -> UserModel:
        existing = await self.session.scalar(
            select(UserModel.id).where(UserModel.email == user.email)
        )
        if existing is not None:
            raise UserExistsError("User already exists")

        try:
            self.session.add(user)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise UserExistsError("User already exists") from exc

        await logger.ainfo(
            "account_provisioned", user_id=user.id, email=user.email, role=user.role.value
        )
        return user
