"""Integration tests for service-center services and packages."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient
from src.domain.reference_data import SERVICE_TYPES

from tests.utils import bearer, register_service_center


async def _center(
    client: AsyncClient, email: str = "center@example.com"
) -> tuple[int, dict[str, str]]:
    registered = await register_service_center(client, email)
    headers = bearer(registered["token"])
    profile = await client.get(f"/profiles/{registered['user']['id']}", headers=headers)
    return profile.json()["profile"]["id"], headers


async def _service_type_id(client: AsyncClient, name: str) -> int:
    types = (await client.get("/service-types")).json()
    return next(item["id"] for item in types if item["name"] == name)


async def _add_service(
    client: AsyncClient, center_id: int, headers: dict[str, str], **fields: object
) -> dict:
    payload = {"name": "Oil change", "price": 45.0, "unit": "per service", **fields}
    response = await client.post(
        f"/service-centers/{center_id}/services", json=payload, headers=headers
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


class TestServiceTypes:
    @pytest.mark.asyncio
    async def test_seeded_types_sorted_by_name(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/service-types")

        names = [item["name"] for item in response.json()]
        assert names == sorted(item["name"] for item in SERVICE_TYPES)


class TestServices:
    @pytest.mark.asyncio
    async def test_create_service_with_type(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client)
        type_id = await _service_type_id(async_client, "Maintenance")

        service = await _add_service(
            async_client, center_id, headers, service_type_id=type_id, duration=30
        )

        assert service["service_center_id"] == center_id
        assert service["is_active"] is True
        assert service["service_type"]["name"] == "Maintenance"
        assert service["created_at"]

    @pytest.mark.asyncio
    async def test_unknown_service_type(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client)

        response = await async_client.post(
            f"/service-centers/{center_id}/services",
            json={"name": "X", "price": 1, "unit": "each", "service_type_id": 9999},
            headers=headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Unknown service type"

    @pytest.mark.asyncio
    async def test_only_owner_can_write(self, async_client: AsyncClient) -> None:
        center_id, _ = await _center(async_client, "center@example.com")
        _, rival_headers = await _center(async_client, "rival@example.com")

        response = await async_client.post(
            f"/service-centers/{center_id}/services",
            json={"name": "X", "price": 1, "unit": "each"},
            headers=rival_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_unknown_center(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/service-centers/9999/services")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Service center not found"

    @pytest.mark.asyncio
    async def test_toggle_filter_and_metrics(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client)
        brakes_id = await _service_type_id(async_client, "Brakes")
        oil = await _add_service(async_client, center_id, headers)
        pads = await _add_service(
            async_client, center_id, headers, name="Brake pads", service_type_id=brakes_id
        )

        toggled = await async_client.patch(
            f"/service-centers/{center_id}/services/{oil['id']}/toggle", headers=headers
        )
        active = await async_client.get(
            f"/service-centers/{center_id}/services", params={"status": "active"}
        )
        brakes = await async_client.get(
            f"/service-centers/{center_id}/services", params={"category": "Brakes"}
        )
        metrics = await async_client.get(f"/service-centers/{center_id}/services/metrics")

        assert toggled.json()["is_active"] is False
        assert [item["id"] for item in active.json()] == [pads["id"]]
        assert [item["id"] for item in brakes.json()] == [pads["id"]]
        assert metrics.json() == {"total": 2, "active": 1, "inactive": 1}

    @pytest.mark.asyncio
    async def test_update_and_delete_service(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client)
        service = await _add_service(async_client, center_id, headers, description="Basic")
        url = f"/service-centers/{center_id}/services/{service['id']}"

        updated = await async_client.put(url, json={"price": 50.5}, headers=headers)
        deleted = await async_client.delete(url, headers=headers)
        missing = await async_client.get(url)

        assert updated.json()["price"] == 50.5
        assert updated.json()["description"] == "Basic"
        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert missing.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_service_of_another_center_is_not_found(
        self, async_client: AsyncClient
    ) -> None:
        center_id, headers = await _center(async_client, "center@example.com")
        rival_id, _ = await _center(async_client, "rival@example.com")
        service = await _add_service(async_client, center_id, headers)

        response = await async_client.get(f"/service-centers/{rival_id}/services/{service['id']}")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPackages:
    @pytest.mark.asyncio
    async def test_package_lifecycle(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client)
        oil = await _add_service(async_client, center_id, headers)
        filters = await _add_service(async_client, center_id, headers, name="Filter swap")
        base = f"/service-centers/{center_id}/packages"

        created = await async_client.post(
            base,
            json={"name": "Full service", "service_ids": [oil["id"], filters["id"], oil["id"]]},
            headers=headers,
        )
        assert created.status_code == status.HTTP_201_CREATED
        package = created.json()
        assert [item["id"] for item in package["services"]] == [oil["id"], filters["id"]]

        updated = await async_client.put(
            f"{base}/{package['id']}",
            json={"description": "Oil only", "service_ids": [oil["id"]]},
            headers=headers,
        )
        assert updated.json()["description"] == "Oil only"
        assert [item["id"] for item in updated.json()["services"]] == [oil["id"]]

        toggled = await async_client.patch(f"{base}/{package['id']}/toggle", headers=headers)
        assert toggled.json()["is_active"] is False

        inactive = await async_client.get(base, params={"status": "inactive"})
        metrics = await async_client.get(f"{base}/metrics")
        assert [item["id"] for item in inactive.json()] == [package["id"]]
        assert metrics.json() == {"total": 1}

        deleted = await async_client.delete(f"{base}/{package['id']}", headers=headers)
        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert (await async_client.get(f"{base}/{package['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_update_can_keep_same_services(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client)
        oil = await _add_service(async_client, center_id, headers)
        base = f"/service-centers/{center_id}/packages"
        created = await async_client.post(
            base, json={"name": "Basic", "service_ids": [oil["id"]]}, headers=headers
        )

        response = await async_client.put(
            f"{base}/{created.json()['id']}",
            json={"name": "Basic+", "service_ids": [oil["id"]]},
            headers=headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Basic+"
        assert len(response.json()["services"]) == 1

    @pytest.mark.asyncio
    async def test_services_must_belong_to_center(self, async_client: AsyncClient) -> None:
        center_id, headers = await _center(async_client, "center@example.com")
        rival_id, rival_headers = await _center(async_client, "rival@example.com")
        rival_service = await _add_service(async_client, rival_id, rival_headers)

        response = await async_client.post(
            f"/service-centers/{center_id}/packages",
            json={"name": "Stolen", "service_ids": [rival_service["id"]]},
            headers=headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert str(rival_service["id"]) in response.json()["detail"]
