"""Service packages: named bundles of a center's own services."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_owned_service_center, get_service_center
from src.api.schemas.catalog import (
    ActivityFilter,
    PackageCreate,
    PackageMetrics,
    PackageResponse,
    PackageUpdate,
    ServiceResponse,
)
from src.infrastructure.db.models import (
    PackageTemplate,
    PackageTemplateService,
    ServiceCenterProfile,
    ShopService,
)

router = APIRouter(prefix="/service-centers/{center_id}/packages", tags=["Packages"])
logger = structlog.get_logger()


def _to_response(package: PackageTemplate) -> PackageResponse:
    return PackageResponse(
        id=package.id,
        center_id=package.center_id,
        name=package.name,
        description=package.description,
        is_active=package.is_active,
        created_at=package.created_at,
        updated_at=package.updated_at,
        services=[ServiceResponse.model_validate(link.service) for link in package.services],
    )


async def _get_center_package(
    session: AsyncSession, center_id: int, package_id: int
) -> PackageTemplate:
    package = await session.scalar(
        select(PackageTemplate).where(
            PackageTemplate.id == package_id, PackageTemplate.center_id == center_id
        )
    )
    if package is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


async def _package_links(
    session: AsyncSession, center_id: int, service_ids: Sequence[int]
) -> list[PackageTemplateService]:
    """Build links for ``service_ids``; every id must be one of the center's services."""
    unique_ids = list(dict.fromkeys(service_ids))
    if not unique_ids:
        return []

    stmt = select(ShopService.id).where(
        ShopService.id.in_(unique_ids), ShopService.service_center_id == center_id
    )
    found = set((await session.execute(stmt)).scalars().all())
    missing = [service_id for service_id in unique_ids if service_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown service id(s) for this center: {', '.join(map(str, missing))}",
        )
    return [PackageTemplateService(service_id=service_id) for service_id in unique_ids]


async def _reloaded(session: AsyncSession, package_id: int) -> PackageResponse:
    stmt = (
        select(PackageTemplate)
        .where(PackageTemplate.id == package_id)
        .execution_options(populate_existing=True)
    )
    package = (await session.execute(stmt)).scalar_one()
    return _to_response(package)


@router.get("", response_model=list[PackageResponse], summary="List a center's packages")
async def list_packages(
    status_filter: ActivityFilter | None = Query(default=None, alias="status"),
    center: ServiceCenterProfile = Depends(get_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> list[PackageResponse]:
    stmt = (
        select(PackageTemplate)
        .where(PackageTemplate.center_id == center.id)
        .order_by(PackageTemplate.id)
    )
    if status_filter is not None:
        stmt = stmt.where(PackageTemplate.is_active == (status_filter is ActivityFilter.ACTIVE))

    packages = (await session.execute(stmt)).scalars().all()
    return [_to_response(package) for package in packages]


@router.get("/metrics", response_model=PackageMetrics, summary="Package count")
async def package_metrics(
    center: ServiceCenterProfile = Depends(get_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> PackageMetrics:
    total = await session.scalar(
        select(func.count(PackageTemplate.id)).where(PackageTemplate.center_id == center.id)
    )
    return PackageMetrics(total=total or 0)


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    payload: PackageCreate,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> PackageResponse:
    package = PackageTemplate(
        center_id=center.id,
        name=payload.name,
        description=payload.description,
        services=await _package_links(session, center.id, payload.service_ids),
    )
    session.add(package)
    await session.commit()

    logger.info(
        "package_created",
        center_id=center.id,
        package_id=package.id,
        service_count=len(package.services),
    )
    return await _reloaded(session, package.id)


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: int,
    center: ServiceCenterProfile = Depends(get_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> PackageResponse:
    package = await _get_center_package(session, center.id, package_id)
    return _to_response(package)


@router.put("/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: int,
    payload: PackageUpdate,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> PackageResponse:
    """Update name/description; ``service_ids`` replaces the whole service list."""
    package = await _get_center_package(session, center.id, package_id)

    if payload.name is not None:
        package.name = payload.name
    if payload.description is not None:
        package.description = payload.description
    if payload.service_ids is not None:
        links = await _package_links(session, center.id, payload.service_ids)
        package.services.clear()
        # flush the removals first so re-added ids do not hit the unique constraint
        await session.flush()
        package.services.extend(links)

    await session.commit()

    logger.info("package_updated", center_id=center.id, package_id=package.id)
    return await _reloaded(session, package.id)


@router.patch("/{package_id}/toggle", response_model=PackageResponse, summary="Flip active flag")
async def toggle_package(
    package_id: int,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> PackageResponse:
    package = await _get_center_package(session, center.id, package_id)
    package.is_active = not package.is_active
    await session.commit()

    logger.info(
        "package_toggled", center_id=center.id, package_id=package.id, is_active=package.is_active
    )
    return await _reloaded(session, package.id)


@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_package(
    package_id: int,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    package = await _get_center_package(session, center.id, package_id)
    await session.delete(package)
    await session.commit()

    logger.info("package_deleted", center_id=center.id, package_id=package_id)
