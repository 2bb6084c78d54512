"""Service-center price list: the individual services a center offers."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_owned_service_center, get_service_center
from src.api.schemas.catalog import (
    ActivityFilter,
    ServiceCreate,
    ServiceMetrics,
    ServiceResponse,
    ServiceUpdate,
)
from src.infrastructure.db.models import ServiceCenterProfile, ServiceType, ShopService

router = APIRouter(prefix="/service-centers/{center_id}/services", tags=["Services"])
logger = structlog.get_logger()


async def _get_center_service(
    session: AsyncSession, center_id: int, service_id: int
) -> ShopService:
    service = await session.scalar(
        select(ShopService).where(
            ShopService.id == service_id, ShopService.service_center_id == center_id
        )
    )
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service


async def _ensure_service_type(session: AsyncSession, service_type_id: int | None) -> None:
    if service_type_id is not None and await session.get(ServiceType, service_type_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown service type"
        )


async def _reloaded(session: AsyncSession, service: ShopService) -> ServiceResponse:
    # server-side timestamps and a possibly changed service type
    await session.refresh(service)
    await session.refresh(service, ["service_type"])
    return ServiceResponse.model_validate(service)


@router.get("", response_model=list[ServiceResponse], summary="List a center's services")
async def list_services(
    status_filter: ActivityFilter | None = Query(default=None, alias="status"),
    category: str | None = Query(default=None, description="Service type name"),
    center: ServiceCenterProfile = Depends(get_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> list[ServiceResponse]:
    stmt = (
        select(ShopService)
        .where(ShopService.service_center_id == center.id)
        .order_by(ShopService.id)
    )
    if status_filter is not None:
        stmt = stmt.where(ShopService.is_active == (status_filter is ActivityFilter.ACTIVE))
    if category:
        stmt = stmt.join(ServiceType, ShopService.service_type_id == ServiceType.id).where(
            ServiceType.name == category
        )

    services = (await session.execute(stmt)).scalars().all()
    return [ServiceResponse.model_validate(service) for service in services]


@router.get("/metrics", response_model=ServiceMetrics, summary="Service counts")
async def service_metrics(
    center: ServiceCenterProfile = Depends(get_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> ServiceMetrics:
    stmt = (
        select(ShopService.is_active, func.count(ShopService.id))
        .where(ShopService.service_center_id == center.id)
        .group_by(ShopService.is_active)
    )
    counts = {bool(is_active): count for is_active, count in (await session.execute(stmt)).all()}
    active = counts.get(True, 0)
    inactive = counts.get(False, 0)
    return ServiceMetrics(total=active + inactive, active=active, inactive=inactive)


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    await _ensure_service_type(session, payload.service_type_id)

    service = ShopService(service_center_id=center.id, **payload.model_dump())
    session.add(service)
    await session.commit()

    logger.info("service_created", center_id=center.id, service_id=service.id)
    return await _reloaded(session, service)


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int,
    center: ServiceCenterProfile = Depends(get_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    service = await _get_center_service(session, center.id, service_id)
    return ServiceResponse.model_validate(service)


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    payload: ServiceUpdate,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    service = await _get_center_service(session, center.id, service_id)

    changes = payload.model_dump(exclude_unset=True)
    if "service_type_id" in changes:
        await _ensure_service_type(session, changes["service_type_id"])
    for field, value in changes.items():
        setattr(service, field, value)

    await session.commit()

    logger.info(
        "service_updated", center_id=center.id, service_id=service.id, fields=sorted(changes)
    )
    return await _reloaded(session, service)


@router.patch("/{service_id}/toggle", response_model=ServiceResponse, summary="Flip active flag")
async def toggle_service(
    service_id: int,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    service = await _get_center_service(session, center.id, service_id)
    service.is_active = not service.is_active
    await session.commit()

    logger.info(
        "service_toggled", center_id=center.id, service_id=service.id, is_active=service.is_active
    )
    return await _reloaded(session, service)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_service(
    service_id: int,
    center: ServiceCenterProfile = Depends(get_owned_service_center),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    service = await _get_center_service(session, center.id, service_id)
    await session.delete(service)
    await session.commit()

    logger.info("service_deleted", center_id=center.id, service_id=service_id)
