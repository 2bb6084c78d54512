"""Authentication service: registration, login, OAuth accounts and setup completion."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import create_access_token
from src.domain.models import SetupStatus
from src.domain.services.setup_status import AccountNotFoundError, SetupStatusService
from src.infrastructure.db.models import (
    CarOwnerProfile,
    PartSellerProfile,
    ServiceCenterProfile,
    UserModel,
    UserRole,
    Vehicle,
)
from src.libs.google_oauth import GoogleIdentity

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthError(Exception):
    """Base exception for authentication errors."""

    pass


class UserExistsError(AuthError):
    """Raised when attempting to register with existing email."""

    pass


class InvalidCredentialsError(AuthError):
    """Raised when login credentials are invalid."""

    pass


class UserNotFoundError(AuthError, AccountNotFoundError):
    """Raised when user is not found."""

    pass


class RoleNotAllowedError(AuthError):
    """Raised when an operation is limited to a different role."""

    pass


class VehicleExistsError(AuthError):
    """Raised when a license plate is already registered."""

    pass


class UnverifiedEmailError(AuthError):
    """Raised when a Google identity carries an unverified email."""

    pass


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(slots=True)
class AuthResult:
    """An account together with a fresh token and its setup verdict."""

    user: UserModel
    token: str
    setup_status: SetupStatus

    def user_dict(self) -> dict:
        return user_to_dict(self.user)


def user_to_dict(user: UserModel) -> dict:
    """Convert UserModel to dict for response."""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "phone": user.phone,
        "role": user.role.value,
        "is_registration_complete": user.is_registration_complete,
    }


def issue_token(user: UserModel, setup_status: SetupStatus | None = None) -> str:
    """Sign an access token carrying the account role and setup flags."""
    return create_access_token(
        subject=str(user.id),
        roles=[user.role.value],
        email=user.email,
        setup_claims=setup_status.token_claims() if setup_status else None,
    )


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.setup_status = SetupStatusService(session)

    async def register_user(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
        phone: str | None = None,
        role: str = UserRole.CAR_OWNER.value,
        profile_data: Mapping[str, Any] | None = None,
        is_mobile: bool = False,
    ) -> AuthResult:
        """
        Register a new account with a local password.

        Mobile clients always sign up as car owners and finish registration
        later through the setup flow.
        """
        if is_mobile:
            role = UserRole.CAR_OWNER.value

        await logger.ainfo("register_attempt", email=email, role=role, is_mobile=is_mobile)

        try:
            user_role = UserRole(role)
        except ValueError as exc:
            raise AuthError(f"Invalid role: {role}") from exc

        user = UserModel(
            email=email.lower(),
            hashed_password=hash_password(password),
            name=name,
            phone=phone,
            role=user_role,
            is_registration_complete=not is_mobile,
        )
        _attach_business_profile(user, user_role, profile_data or {})

        try:
            self.session.add(user)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            await logger.awarning("register_duplicate_email", email=email)
            raise UserExistsError("User already exists") from exc

        result = await self._authenticated(user)
        await logger.ainfo("register_success", user_id=user.id, email=email)
        return result

    async def login(self, *, email: str, password: str) -> AuthResult:
        """Authenticate user with email and password."""
        await logger.ainfo("login_attempt", email=email)

        user = await self._find_by_email(email)
        if user is None:
            await logger.awarning("login_user_not_found", email=email)
            raise InvalidCredentialsError("Invalid email or password")

        # OAuth-only accounts have no password to check against
        if not user.hashed_password or not verify_password(password, user.hashed_password):
            await logger.awarning("login_invalid_password", email=email)
            raise InvalidCredentialsError("Invalid email or password")

        user.last_login_at = datetime.now(UTC)
        await self.session.commit()

        result = await self._authenticated(user)
        await logger.ainfo("login_success", user_id=user.id, email=email)
        return result

    async def login_with_google(self, identity: GoogleIdentity) -> tuple[AuthResult, bool]:
        """Find or create the account for a verified Google identity.

        Returns the auth result and whether the account was just created.
        """
        if not identity.email:
            raise AuthError("Email missing in the token!")
        if not identity.email_verified:
            await logger.awarning("google_login_unverified_email", email=identity.email)
            raise UnverifiedEmailError("Google email is not verified")

        user = await self._find_by_email(identity.email)
        is_new_user = user is None
        if user is None:
            user = UserModel(
                email=identity.email.lower(),
                name=identity.name,
                hashed_password=None,
                role=UserRole.CAR_OWNER,
                is_registration_complete=False,
            )
            self.session.add(user)
        user.last_login_at = datetime.now(UTC)

        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise UserExistsError("User already exists") from exc

        await logger.ainfo(
            "google_login_success", user_id=user.id, email=user.email, is_new_user=is_new_user
        )
        return await self._authenticated(user), is_new_user

    async def get_user(self, user_id: int) -> UserModel:
        user = await self.session.get(UserModel, user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    async def complete_setup_details(
        self,
        *,
        user_id: int,
        phone: str,
        role: str,
        profile_data: Mapping[str, Any] | None = None,
    ) -> AuthResult:
        """Finish registration: contact details, role and the role profile, in one commit."""
        user = await self.get_user(user_id)
        user_role = UserRole(role)
        profile_data = profile_data or {}

        user.phone = phone
        user.role = user_role
        user.is_registration_complete = True

        if user_role is UserRole.CAR_OWNER:
            if user.car_owner_profile is None:
                user.car_owner_profile = CarOwnerProfile(name=user.name)
            await self._add_vehicles(user, profile_data.get("vehicles") or [])
        else:
            _attach_business_profile(user, user_role, profile_data)

        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise VehicleExistsError("Vehicle with this license plate already exists") from exc

        await logger.ainfo("setup_details_completed", user_id=user_id, role=role)
        return await self._authenticated(user)

    async def onboard_car_owner(
        self,
        *,
        user_id: int,
        name: str | None,
        contact: str | None,
        profile_image: str | None,
    ) -> UserModel:
        user = await self.get_user(user_id)
        if user.role is not UserRole.CAR_OWNER:
            raise RoleNotAllowedError("Onboarding only allowed for car owners")

        user.phone = contact
        user.name = name
        user.is_registration_complete = True

        profile = user.car_owner_profile
        if profile is None:
            user.car_owner_profile = CarOwnerProfile(
                name=name or "", image_base64=profile_image or ""
            )
        else:
            profile.name = name or ""
            profile.image_base64 = profile_image or ""

        await self.session.commit()
        await logger.ainfo("onboarding_completed", user_id=user_id)
        return user

    async def sign_out(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        user.updated_at = datetime.now(UTC)
        await self.session.commit()
        await logger.ainfo("signout", user_id=user_id)

    async def delete_account(self, user_id: int) -> None:
        """Delete the account; profiles, vehicles and subscription cascade."""
        user = await self.get_user(user_id)
        await self.session.delete(user)
        await self.session.commit()
        await logger.ainfo("account_deleted", user_id=user_id)

    async def set_password(self, *, email: str, password: str) -> None:
        user = await self._find_by_email(email)
        if user is None:
            raise UserNotFoundError(f"User {email} not found")
        user.hashed_password = hash_password(password)
        await self.session.commit()
        await logger.ainfo("password_reset", user_id=user.id)

    async def find_by_email(self, email: str) -> UserModel | None:
        return await self._find_by_email(email)

    async def _find_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email.lower())
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def _add_vehicles(self, user: UserModel, vehicles: list[Mapping[str, Any]]) -> None:
        if not vehicles:
            return

        plates = [vehicle["license_plate"] for vehicle in vehicles]
        taken = await self.session.scalar(
            select(Vehicle.license_plate).where(Vehicle.license_plate.in_(plates)).limit(1)
        )
        if taken or len(set(plates)) != len(plates):
            raise VehicleExistsError("Vehicle with this license plate already exists")

        has_primary = any(vehicle.is_primary for vehicle in user.vehicles)
        for index, data in enumerate(vehicles):
            user.vehicles.append(
                Vehicle(
                    vehicle_name=data["vehicle_name"],
                    model=data["model"],
                    year=int(data["year"]),
                    license_plate=data["license_plate"],
                    color=data.get("color") or "white",
                    vehicle_type=data.get("vehicle_type") or "car",
                    is_primary=index == 0 and not has_primary,
                )
            )

    async def _authenticated(self, user: UserModel) -> AuthResult:
        status = await self.setup_status.check_setup_status(user.id)
        return AuthResult(user=user, token=issue_token(user, status), setup_status=status)


def _attach_business_profile(
    user: UserModel, role: UserRole, profile_data: Mapping[str, Any]
) -> None:
    """Create or update the service-center / part-seller profile from request data."""
    if role is UserRole.SERVICE_CENTER and profile_data.get("business_details"):
        details = profile_data["business_details"]
        fields = {
            "business_name": details["business_name"],
            "address": details["address"],
            "business_registration_number": details["business_registration_number"],
            "services_offered": list(details.get("services_offered") or []),
            "operating_hours": dict(details.get("operating_hours") or {}),
            "logo": details.get("logo"),
        }
        if user.service_center_profile is None:
            user.service_center_profile = ServiceCenterProfile(**fields)
        else:
            for key, value in fields.items():
                setattr(user.service_center_profile, key, value)

    if role is UserRole.PART_SELLER and profile_data.get("shop_details"):
        details = profile_data["shop_details"]
        fields = {
            "shop_name": details["shop_name"],
            "address": details["address"],
            "categories_sold": list(details.get("categories_sold") or []),
            "inventory_capacity": details.get("inventory_capacity"),
            "contact_person_name": details["contact_person_name"],
        }
        if user.part_seller_profile is None:
            user.part_seller_profile = PartSellerProfile(**fields)
        else:
            for key, value in fields.items():
                setattr(user.part_seller_profile, key, value)
