from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActivityFilter(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ServiceTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: str | None = None
    price: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=32)
    duration: float | None = Field(None, ge=0, description="Minutes")
    discount: float | None = Field(None, ge=0)
    service_type_id: int | None = None


class ServiceUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    unit: str | None = Field(None, min_length=1, max_length=32)
    duration: float | None = Field(None, ge=0)
    discount: float | None = Field(None, ge=0)
    service_type_id: int | None = None


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_center_id: int
    service_type_id: int | None = None
    name: str
    description: str | None = None
    price: float
    unit: str
    duration: float | None = None
    discount: float | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    service_type: ServiceTypeResponse | None = None


class ServiceMetrics(BaseModel):
    total: int
    active: int
    inactive: int


class PackageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: str | None = None
    service_ids: list[int] = Field(default_factory=list)


class PackageUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    description: str | None = None
    service_ids: list[int] | None = Field(
        None, description="Replaces the package's services when given"
    )


class PackageResponse(BaseModel):
    id: int
    center_id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    services: list[ServiceResponse]


class PackageMetrics(BaseModel):
    total: int
