from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, EmailStr, Field


class ProvisionedUserType(str, Enum):
    SERVICE_CENTERS = "Service Centers"
    CAR_USERS = "Car Users"


class ProvisionUserRequest(BaseModel):
    """Back-office account creation.

    Service centers need ``password``, ``business_name``, ``address`` and
    ``business_registration_number``; car users need ``total_vehicles``.
    """

    user_type: ProvisionedUserType
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=32)
    password: str | None = Field(None, min_length=8, max_length=128)
    business_name: str | None = None
    address: str | None = None
    business_registration_number: str | None = None
    total_vehicles: int | None = Field(None, ge=1)


class ProvisionPartSellerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=32)
    password: str = Field(..., min_length=8, max_length=128)
    shop_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    categories_sold: list[str]
    inventory_capacity: str | None = None
    contact_person_name: str = Field(..., min_length=1)


class ProvisionedUser(BaseModel):
    id: int
    email: str
    name: str | None = None
    phone: str | None = None
    role: str
    is_registration_complete: bool


class ProvisionResponse(BaseModel):
    message: str
    user: ProvisionedUser
