from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    phone: str = Field(..., min_length=1, max_length=32)
    image: str = Field(..., min_length=1, description="Base64 image or image URL")


class ProfileResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    phone: str | None = None
    role: str
    profile: dict[str, Any] | None = None
