from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session
from src.api.schemas.catalog import ServiceTypeResponse
from src.infrastructure.db.models import ServiceType

router = APIRouter(prefix="/service-types", tags=["Services"])


@router.get("", response_model=list[ServiceTypeResponse], summary="Service categories")
async def list_service_types(
    session: AsyncSession = Depends(get_db_session),
) -> list[ServiceTypeResponse]:
    """Return the seeded service categories used to classify shop services."""
    types = (await session.execute(select(ServiceType).order_by(ServiceType.name))).scalars()
    return [ServiceTypeResponse.model_validate(service_type) for service_type in types]
