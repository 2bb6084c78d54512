"""Pydantic schemas for authentication and setup endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# --- Shared payload pieces ---


class VehicleInput(BaseModel):
    """Vehicle supplied during car-owner setup."""

    vehicle_name: str = Field(..., min_length=1, max_length=128)
    model: str = Field(..., min_length=1, max_length=128)
    year: int = Field(..., ge=1900)
    license_plate: str = Field(..., min_length=3, max_length=32)
    color: str | None = Field(None, max_length=32)
    vehicle_type: str | None = Field(None, max_length=32)
    is_primary: bool | None = None


class BusinessDetails(BaseModel):
    business_name: str
    address: str
    business_registration_number: str
    services_offered: list[str] = Field(default_factory=list)
    operating_hours: dict[str, str] = Field(default_factory=dict)
    logo: str | None = None


class ShopDetails(BaseModel):
    shop_name: str
    address: str
    categories_sold: list[str] = Field(default_factory=list)
    inventory_capacity: str | None = None
    contact_person_name: str


class ProfileData(BaseModel):
    vehicles: list[VehicleInput] | None = None
    business_details: BusinessDetails | None = None
    shop_details: ShopDetails | None = None


# --- Request Schemas ---


class RegisterRequest(BaseModel):
    """Request schema for account registration.

    Only email and password are needed up front; the rest can be completed
    through ``/auth/setup/details``.
    """

    email: str | None = Field(None, description="Account email address")
    password: str | None = Field(None, max_length=128, description="Password (min 8 characters)")
    name: str | None = Field(None, max_length=128)
    phone: str | None = Field(None, max_length=32)
    role: str = Field(default="car_owner", description="Account role (defaults to car_owner)")
    profile_data: ProfileData = Field(default_factory=ProfileData)


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class GoogleLoginRequest(BaseModel):
    """Google ID token, accepted as ``id_token`` or ``token``."""

    id_token: str | None = None
    token: str | None = None


class CompleteSetupRequest(BaseModel):
    phone: str | None = None
    role: str | None = None
    profile_data: ProfileData | None = None


class OnboardingRequest(BaseModel):
    name: str | None = Field(None, max_length=128)
    contact: str | None = Field(None, max_length=32)
    profile_image: str | None = Field(None, description="Base64 image or image URL")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    token: str


# --- Response Schemas ---


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    phone: str | None = None
    role: str
    is_registration_complete: bool


class SetupStatusResponse(BaseModel):
    is_registration_complete: bool
    is_setup_complete: bool
    has_active_subscription: bool
    missing_steps: list[str]
    redirect_to: str | None = None


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
    setup_status: SetupStatusResponse
    requires_setup: bool


class LoginResponse(AuthResponse):
    is_registration_complete: bool


class SetupStatusEnvelope(BaseModel):
    setup_status: SetupStatusResponse
    can_access_dashboard: bool
    next_step: str | None = None


class MeResponse(BaseModel):
    user: UserResponse
    setup_status: SetupStatusResponse


class MessageResponse(BaseModel):
    message: str
    success: bool = True


class VerifyOtpResponse(BaseModel):
    message: str = "OTP verified"
    reset_token: str
