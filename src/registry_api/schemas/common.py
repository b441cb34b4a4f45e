from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_snake


class APIModel(BaseModel):
    """Response shape; serialized with camelCase keys."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class InboundModel(BaseModel):
    """Request body shape; unknown keys are kept so validators can reject them.

    Declared fields accept camelCase or snake_case keys. Values are left
    untyped so the field validators report every problem as a field error.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def as_payload(self) -> dict[str, Any]:
        return {to_snake(key): value for key, value in self.model_dump(exclude_unset=True).items()}


__all__ = ["APIModel", "InboundModel"]
