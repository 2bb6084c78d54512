"""Vehicle management for car owners, scoped to the authenticated account."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_user, get_db_session, require_self
from src.api.schemas.auth import MessageResponse
from src.api.schemas.vehicles import (
    CarsResponse,
    CarSummary,
    VehicleCreate,
    VehicleEnvelope,
    VehicleResponse,
    VehiclesResponse,
    VehicleUpdate,
)
from src.domain import User
from src.domain.validation import validate_vehicle_data
from src.infrastructure.db.models import UserModel, UserRole, Vehicle

router = APIRouter(prefix="/users/{user_id}", tags=["Vehicles"])
logger = structlog.get_logger()

PLATE_TAKEN = "Vehicle with this license plate already exists"


async def _owned_vehicles(session: AsyncSession, user_id: int) -> list[Vehicle]:
    stmt = (
        select(Vehicle)
        .where(Vehicle.user_id == user_id)
        .order_by(Vehicle.is_primary.desc(), Vehicle.id)
    )
    return list((await session.execute(stmt)).scalars().all())


async def _get_owned_vehicle(session: AsyncSession, user_id: int, vehicle_id: int) -> Vehicle:
    vehicle = await session.scalar(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.user_id == user_id)
    )
    if vehicle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
    return vehicle


async def _plate_taken(session: AsyncSession, plate: str, exclude_id: int | None = None) -> bool:
    stmt = select(Vehicle.id).where(Vehicle.license_plate == plate)
    if exclude_id is not None:
        stmt = stmt.where(Vehicle.id != exclude_id)
    return await session.scalar(stmt) is not None


@router.post(
    "/vehicles",
    response_model=VehicleEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add a vehicle",
)
async def add_vehicle(
    user_id: int,
    payload: VehicleCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> VehicleEnvelope:
    require_self(user_id, user)

    account = await session.get(UserModel, user_id)
    if account is None or account.role is not UserRole.CAR_OWNER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Only car owners can add vehicles"
        )

    if await _plate_taken(session, payload.license_plate):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PLATE_TAKEN)

    has_vehicles = bool(await _owned_vehicles(session, user_id))
    vehicle = Vehicle(
        user_id=user_id,
        vehicle_name=payload.vehicle_name,
        model=payload.model,
        year=payload.year,
        license_plate=payload.license_plate,
        color=payload.color or "white",
        vehicle_type=payload.vehicle_type or "car",
        image=payload.image,
        nickname=payload.nickname,
        is_primary=not has_vehicles,
    )
    session.add(vehicle)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PLATE_TAKEN) from exc
    await session.refresh(vehicle)

    logger.info("vehicle_added", user_id=user_id, vehicle_id=vehicle.id)
    return VehicleEnvelope(
        message="Vehicle added successfully", vehicle=VehicleResponse.model_validate(vehicle)
    )


@router.get("/vehicles", response_model=VehiclesResponse, summary="List vehicles, primary first")
async def list_vehicles(
    user_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> VehiclesResponse:
    require_self(user_id, user)
    vehicles = await _owned_vehicles(session, user_id)
    return VehiclesResponse(vehicles=[VehicleResponse.model_validate(v) for v in vehicles])


@router.get("/vehicles/{vehicle_id}", response_model=VehicleEnvelope)
async def get_vehicle(
    user_id: int,
    vehicle_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> VehicleEnvelope:
    require_self(user_id, user)
    vehicle = await _get_owned_vehicle(session, user_id, vehicle_id)
    return VehicleEnvelope(vehicle=VehicleResponse.model_validate(vehicle))


@router.put("/vehicles/{vehicle_id}", response_model=VehicleEnvelope, summary="Update a vehicle")
async def update_vehicle(
    user_id: int,
    vehicle_id: int,
    payload: VehicleUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> VehicleEnvelope:
    require_self(user_id, user)

    validation = validate_vehicle_data(payload.model_dump())
    if not validation.is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=validation.message)

    vehicle = await _get_owned_vehicle(session, user_id, vehicle_id)
    if await _plate_taken(session, payload.license_plate, exclude_id=vehicle.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PLATE_TAKEN)

    vehicle.vehicle_name = payload.vehicle_name
    vehicle.model = payload.model
    vehicle.year = payload.year
    vehicle.license_plate = payload.license_plate
    vehicle.color = payload.color
    vehicle.vehicle_type = payload.vehicle_type
    for field in ("image", "nickname", "status", "status_text"):
        value = getattr(payload, field)
        if value is not None:
            setattr(vehicle, field, value)

    if payload.is_primary:
        await session.execute(
            update(Vehicle)
            .where(Vehicle.user_id == user_id, Vehicle.id != vehicle.id)
            .values(is_primary=False)
        )
        vehicle.is_primary = True

    await session.commit()
    await session.refresh(vehicle)

    logger.info("vehicle_updated", user_id=user_id, vehicle_id=vehicle.id)
    return VehicleEnvelope(
        message="Vehicle updated successfully", vehicle=VehicleResponse.model_validate(vehicle)
    )


@router.delete("/vehicles/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    user_id: int,
    vehicle_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    require_self(user_id, user)
    vehicle = await _get_owned_vehicle(session, user_id, vehicle_id)
    was_primary = vehicle.is_primary

    await session.delete(vehicle)
    await session.flush()

    # Hand the primary flag to the oldest remaining vehicle
    if was_primary:
        remaining = await _owned_vehicles(session, user_id)
        if remaining:
            remaining[0].is_primary = True

    await session.commit()
    logger.info("vehicle_deleted", user_id=user_id, vehicle_id=vehicle_id)
    return MessageResponse(message="Vehicle deleted successfully")


@router.patch(
    "/vehicles/{vehicle_id}/primary",
    response_model=VehicleEnvelope,
    summary="Mark a vehicle as primary",
)
async def set_primary_vehicle(
    user_id: int,
    vehicle_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> VehicleEnvelope:
    require_self(user_id, user)
    vehicle = await _get_owned_vehicle(session, user_id, vehicle_id)

    await session.execute(
        update(Vehicle).where(Vehicle.user_id == user_id).values(is_primary=False)
    )
    vehicle.is_primary = True
    await session.commit()
    await session.refresh(vehicle)

    logger.info("primary_vehicle_set", user_id=user_id, vehicle_id=vehicle_id)
    return VehicleEnvelope(
        message="Primary vehicle updated successfully",
        vehicle=VehicleResponse.model_validate(vehicle),
    )


@router.get("/cars", response_model=CarsResponse, summary="Garage summary cards")
async def list_cars(
    user_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> CarsResponse:
    require_self(user_id, user)
    vehicles = await _owned_vehicles(session, user_id)
    return CarsResponse(cars=[CarSummary.model_validate(v) for v in vehicles])
