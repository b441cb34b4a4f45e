from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from registry_api.schemas.common import APIModel, InboundModel


class UserSignup(InboundModel):
    name: Any = Field(default=None, description="3-50 characters")
    lastname: Any = Field(default=None, description="3-50 characters")
    email: Any = Field(default=None, description="Unique across users and institutions")
    dni: Any = Field(default=None, description="National id, 7-8 characters")
    address: Any = None
    phone: Any = None
    img_profile: Any = Field(default=None, description="Profile image reference")
    institution_id: Any = Field(default=None, description="Owning institution id")


class UserOut(APIModel):
    id: str
    name: str
    lastname: str
    email: str
    dni: str | None = None
    address: str | None = None
    phone: str | None = None
    img_profile: str | None = None
    role: str
    is_admin: bool
    institution_id: str | None = None
    created_at: datetime


__all__ = ["UserOut", "UserSignup"]
