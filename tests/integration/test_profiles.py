"""Integration tests for account profiles."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient

from tests.utils import bearer, register, register_car_owner, register_service_center, shop_details


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_car_owner_profile_lists_vehicles(self, async_client: AsyncClient) -> None:
        owner = await register_car_owner(async_client)
        user_id = owner["user"]["id"]

        response = await async_client.get(f"/profiles/{user_id}", headers=bearer(owner["token"]))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["role"] == "car_owner"
        assert [v["license_plate"] for v in data["profile"]["vehicles"]] == ["ABC-1234"]

    @pytest.mark.asyncio
    async def test_any_signed_in_account_can_view(self, async_client: AsyncClient) -> None:
        center = await register_service_center(async_client)
        owner = await register_car_owner(async_client)

        response = await async_client.get(
            f"/profiles/{center['user']['id']}", headers=bearer(owner["token"])
        )

        profile = response.json()["profile"]
        assert profile["business_name"] == "Speedy Motors"
        assert profile["services_offered"] == ["Maintenance", "Brakes"]

    @pytest.mark.asyncio
    async def test_part_seller_profile(self, async_client: AsyncClient) -> None:
        seller = await register(
            async_client,
            "seller@example.com",
            role="part_seller",
            phone="0112345678",
            profile_data={"shop_details": shop_details()},
        )

        response = await async_client.get(
            f"/profiles/{seller['user']['id']}", headers=bearer(seller["token"])
        )

        assert response.json()["profile"]["categories_sold"] == ["engine", "brakes"]

    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/profiles/1")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_unknown_user(self, async_client: AsyncClient) -> None:
        owner = await register_car_owner(async_client)

        response = await async_client.get("/profiles/9999", headers=bearer(owner["token"]))

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_car_owner_update(self, async_client: AsyncClient) -> None:
        owner = await register_car_owner(async_client)
        user_id = owner["user"]["id"]
        headers = bearer(owner["token"])

        response = await async_client.put(
            f"/profiles/{user_id}",
            json={"name": "Nimal Perera", "phone": "0711111111", "image": "data:image/png;x"},
            headers=headers,
        )
        profile = await async_client.get(f"/profiles/{user_id}", headers=headers)

        assert response.json()["message"] == "Profile updated successfully"
        data = profile.json()
        assert data["name"] == "Nimal Perera"
        assert data["phone"] == "0711111111"
        assert data["profile"]["name"] == "Nimal Perera"
        assert data["profile"]["image_base64"] == "data:image/png;x"

    @pytest.mark.asyncio
    async def test_service_center_image_becomes_logo(self, async_client: AsyncClient) -> None:
        center = await register_service_center(async_client)
        user_id = center["user"]["id"]
        headers = bearer(center["token"])

        await async_client.put(
            f"/profiles/{user_id}",
            json={"name": "Speedy", "phone": "0112345678", "image": "https://cdn/logo.png"},
            headers=headers,
        )
        profile = await async_client.get(f"/profiles/{user_id}", headers=headers)

        assert profile.json()["profile"]["logo"] == "https://cdn/logo.png"

    @pytest.mark.asyncio
    async def test_cannot_update_someone_else(self, async_client: AsyncClient) -> None:
        owner = await register_car_owner(async_client)
        center = await register_service_center(async_client)

        response = await async_client.put(
            f"/profiles/{owner['user']['id']}",
            json={"name": "X", "phone": "0", "image": "y"},
            headers=bearer(center["token"]),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_all_fields_required(self, async_client: AsyncClient) -> None:
        owner = await register_car_owner(async_client)

        response = await async_client.put(
            f"/profiles/{owner['user']['id']}",
            json={"name": "Only name"},
            headers=bearer(owner["token"]),
        )

        assert response.status_code == 422
