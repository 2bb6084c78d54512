"""Field checks for registration, setup and vehicle payloads.

Helpers take plain mappings (``model_dump()`` output) and collect every
problem instead of stopping at the first, so the API can return them as one
message.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
VALID_ROLES = ("car_owner", "service_center", "part_seller")
MIN_PASSWORD_LENGTH = 8
MIN_PHONE_LENGTH = 10
MIN_PLATE_LENGTH = 3
MIN_VEHICLE_YEAR = 1900
VEHICLE_FIELDS = ("vehicle_name", "model", "year", "license_plate", "color", "vehicle_type")


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        return ", ".join(self.errors)


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def validate_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


def validate_phone(phone: str) -> bool:
    # Length only; formats vary too much between markets
    return len(phone) >= MIN_PHONE_LENGTH


def validate_role(role: str) -> bool:
    return role in VALID_ROLES


def validate_registration_data(data: Mapping[str, Any]) -> ValidationResult:
    """Initial sign-up needs only email and password."""
    result = ValidationResult()
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        result.errors.append("Missing required fields: email, password")
    if email and not validate_email(email):
        result.errors.append("Invalid email format")
    if password and not validate_password(password):
        result.errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return result


def validate_complete_registration_data(data: Mapping[str, Any]) -> ValidationResult:
    """Setup-details step: phone, role and the profile payload for that role."""
    result = ValidationResult()
    phone = data.get("phone")
    role = data.get("role")
    profile_data = data.get("profile_data") or {}

    if not phone or not role:
        result.errors.append("Missing required fields: phone, role")
    if phone and not validate_phone(phone):
        result.errors.append("Invalid phone number format")
    if role and not validate_role(role):
        result.errors.append("Invalid role. Must be car_owner, service_center, or part_seller")

    if role == "car_owner" and not profile_data.get("vehicles"):
        result.errors.append("At least one vehicle is required for car_owner registration")
    if role == "service_center" and not profile_data.get("business_details"):
        result.errors.append("Business details are required for service_center registration")
    if role == "part_seller" and not profile_data.get("shop_details"):
        result.errors.append("Shop details are required for part_seller registration")
    return result


def validate_vehicle_data(vehicle: Mapping[str, Any] | None) -> ValidationResult:
    result = ValidationResult()
    vehicle = vehicle or {}

    if any(not vehicle.get(name) for name in VEHICLE_FIELDS):
        result.errors.append(
            "All vehicle fields are required: " + ", ".join(VEHICLE_FIELDS)
        )

    year = vehicle.get("year")
    max_year = datetime.now(UTC).year + 1
    if year and not MIN_VEHICLE_YEAR <= int(year) <= max_year:
        result.errors.append("Invalid vehicle year")

    plate = vehicle.get("license_plate")
    if plate and len(plate) < MIN_PLATE_LENGTH:
        result.errors.append(f"License plate must be at least {MIN_PLATE_LENGTH} characters")
    return result
