from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class VehicleCreate(BaseModel):
    vehicle_name: str = Field(..., min_length=1, max_length=128)
    model: str = Field(..., min_length=1, max_length=128)
    year: int = Field(..., ge=1900)
    license_plate: str = Field(..., min_length=3, max_length=32)
    color: str | None = Field(None, max_length=32)
    vehicle_type: str | None = Field(None, max_length=32)
    image: str | None = None
    nickname: str | None = Field(None, max_length=64)


class VehicleUpdate(BaseModel):
    """Full replacement of a vehicle's details; checked by ``validate_vehicle_data``."""

    vehicle_name: str | None = None
    model: str | None = None
    year: int | None = None
    license_plate: str | None = None
    color: str | None = None
    vehicle_type: str | None = None
    is_primary: bool | None = None
    image: str | None = None
    nickname: str | None = None
    status: str | None = None
    status_text: str | None = None


class VehicleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    vehicle_name: str
    model: str
    year: int
    license_plate: str
    color: str
    vehicle_type: str
    is_primary: bool
    image: str | None = None
    nickname: str | None = None
    status: str | None = None
    status_text: str | None = None
    created_at: datetime
    updated_at: datetime


class VehicleEnvelope(BaseModel):
    message: str | None = None
    vehicle: VehicleResponse


class VehiclesResponse(BaseModel):
    vehicles: list[VehicleResponse]


class CarSummary(BaseModel):
    """Compact card shown in the garage screen."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_name: str
    model: str
    year: int
    color: str
    image: str | None = None
    nickname: str | None = None
    status: str | None = None
    status_text: str | None = None


class CarsResponse(BaseModel):
    cars: list[CarSummary]
