from __future__ import annotations

from datetime import UTC, datetime

import pytest
from src.domain.validation import (
    validate_complete_registration_data,
    validate_email,
    validate_password,
    validate_phone,
    validate_registration_data,
    validate_role,
    validate_vehicle_data,
)

from tests.utils import business_details, shop_details, vehicle_payload


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("driver@example.com", True),
        ("first.last@sub.example.lk", True),
        ("no-at-sign.example.com", False),
        ("spaces in@example.com", False),
        ("missing@tld", False),
    ],
)
def test_validate_email(email: str, expected: bool) -> None:
    assert validate_email(email) is expected


def test_password_and_phone_length_rules() -> None:
    assert validate_password("12345678") is True
    assert validate_password("1234567") is False
    assert validate_phone("0771234567") is True
    assert validate_phone("077123") is False


def test_validate_role() -> None:
    assert validate_role("car_owner") is True
    assert validate_role("service_center") is True
    assert validate_role("part_seller") is True
    assert validate_role("admin") is False


class TestRegistrationData:
    def test_only_email_and_password_required(self) -> None:
        result = validate_registration_data({"email": "a@example.com", "password": "password123"})

        assert result.is_valid

    def test_missing_fields_message(self) -> None:
        result = validate_registration_data({"email": "a@example.com"})

        assert not result.is_valid
        assert result.message == "Missing required fields: email, password"

    def test_errors_are_joined(self) -> None:
        result = validate_registration_data({"email": "bad", "password": "short"})

        assert result.message == (
            "Invalid email format, Password must be at least 8 characters long"
        )


class TestCompleteRegistrationData:
    def test_car_owner_needs_a_vehicle(self) -> None:
        result = validate_complete_registration_data(
            {"phone": "0771234567", "role": "car_owner", "profile_data": {"vehicles": []}}
        )

        assert result.errors == ["At least one vehicle is required for car_owner registration"]

    def test_valid_car_owner(self) -> None:
        result = validate_complete_registration_data(
            {
                "phone": "0771234567",
                "role": "car_owner",
                "profile_data": {"vehicles": [vehicle_payload()]},
            }
        )

        assert result.is_valid

    def test_business_roles_need_their_details(self) -> None:
        center = validate_complete_registration_data(
            {"phone": "0771234567", "role": "service_center", "profile_data": {}}
        )
        seller = validate_complete_registration_data(
            {"phone": "0771234567", "role": "part_seller", "profile_data": None}
        )

        assert center.errors == [
            "Business details are required for service_center registration"
        ]
        assert seller.errors == ["Shop details are required for part_seller registration"]

    def test_valid_business_roles(self) -> None:
        center = validate_complete_registration_data(
            {
                "phone": "0771234567",
                "role": "service_center",
                "profile_data": {"business_details": business_details()},
            }
        )
        seller = validate_complete_registration_data(
            {
                "phone": "0771234567",
                "role": "part_seller",
                "profile_data": {"shop_details": shop_details()},
            }
        )

        assert center.is_valid
        assert seller.is_valid

    def test_missing_phone_and_invalid_role(self) -> None:
        result = validate_complete_registration_data({"phone": "123", "role": "mechanic"})

        assert result.errors == [
            "Invalid phone number format",
            "Invalid role. Must be car_owner, service_center, or part_seller",
        ]

    def test_missing_phone_and_role(self) -> None:
        result = validate_complete_registration_data({})

        assert result.message == "Missing required fields: phone, role"


class TestVehicleData:
    def test_valid_vehicle(self) -> None:
        assert validate_vehicle_data(vehicle_payload()).is_valid

    def test_all_fields_required(self) -> None:
        result = validate_vehicle_data(vehicle_payload(color=None))

        assert not result.is_valid
        assert result.errors[0].startswith("All vehicle fields are required")

    def test_none_is_invalid(self) -> None:
        assert not validate_vehicle_data(None).is_valid

    def test_year_bounds(self) -> None:
        next_year = datetime.now(UTC).year + 1

        assert validate_vehicle_data(vehicle_payload(year=next_year)).is_valid
        assert validate_vehicle_data(vehicle_payload(year=next_year + 1)).errors == [
            "Invalid vehicle year"
        ]
        assert validate_vehicle_data(vehicle_payload(year=1899)).errors == [
            "Invalid vehicle year"
        ]

    def test_short_plate(self) -> None:
        result = validate_vehicle_data(vehicle_payload(plate="AB"))

        assert result.errors == ["License plate must be at least 3 characters"]
