from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from registry_api.schemas.common import APIModel, InboundModel


class InstitutionSignup(InboundModel):
    name: Any = Field(default=None, description="3-80 characters, unique")
    email: Any = Field(default=None, description="Unique across institutions and users")
    account_number: Any = Field(default=None, description="3-80 characters")
    address: Any = Field(default=None, description="3-80 characters")
    phone: Any = Field(default=None, description="Digits only, 3-15 characters")
    logo: Any = Field(default=None, description="Logo image reference")
    banner: Any = Field(default=None, description="Banner image reference")


class InstitutionPatch(InboundModel):
    name: Any = None
    email: Any = None
    account_number: Any = None
    address: Any = None
    phone: Any = None
    logo: Any = None
    banner: Any = None


class ReviewRequest(APIModel):
    status: str = Field(..., description="Either 'approved' or 'denied'")


class InstitutionPublic(APIModel):
    """Institution view without internal-only fields."""

    id: str
    name: str
    email: str
    account_number: str
    address: str
    phone: str
    logo: str | None = None
    banner: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class InstitutionUpdated(InstitutionPublic):
    owner_id: str | None = None


class InstitutionOut(InstitutionUpdated):
    role: str


class SignupResponse(APIModel):
    message: str
    institution_response: InstitutionPublic


__all__ = [
    "InstitutionOut",
    "InstitutionPatch",
    "InstitutionPublic",
    "InstitutionSignup",
    "InstitutionUpdated",
    "ReviewRequest",
    "SignupResponse",
]
