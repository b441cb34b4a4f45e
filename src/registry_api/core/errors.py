from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic.alias_generators import to_camel


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


class RegistryError(Exception):
    """Base typed error for the registry.

    Carries a stable ``code`` for clients and the HTTP status it maps to.
    """

    status_code = 500
    code = "internal.error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_public_dict(self, *, request_id: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if request_id:
            payload["request_id"] = request_id
        return payload


class InvalidRequestError(RegistryError):
    status_code = 400
    code = "request.invalid"

    def __init__(
        self,
        message: str = "Invalid request",
        *,
        errors: Sequence[FieldError] = (),
    ) -> None:
        super().__init__(message)
        self.errors = list(errors)

    def to_public_dict(self, *, request_id: str | None = None) -> dict[str, Any]:
        payload = super().to_public_dict(request_id=request_id)
        if self.errors:
            payload["errors"] = [
                {"field": to_camel(error.field), "message": error.message} for error in self.errors
            ]
        return payload


class NotFoundError(RegistryError):
    status_code = 404
    code = "resource.not_found"


class ConflictError(RegistryError):
    status_code = 409
    code = "resource.conflict"

    def __init__(
        self,
        fields: Sequence[str],
        message: str = "Provided data conflicts with existing records",
    ) -> None:
        super().__init__(message)
        self.fields = list(fields)

    def to_public_dict(self, *, request_id: str | None = None) -> dict[str, Any]:
        payload = super().to_public_dict(request_id=request_id)
        payload["status"] = "error"
        payload["errors"] = [{"field": field} for field in self.fields]
        return payload


class InternalError(RegistryError):
    status_code = 500
    code = "internal.error"


__all__ = [
    "ConflictError",
    "FieldError",
    "InternalError",
    "InvalidRequestError",
    "NotFoundError",
    "RegistryError",
]
