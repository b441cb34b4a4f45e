from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Final

from registry_api.core.errors import (
    ConflictError,
    InternalError,
    InvalidRequestError,
    NotFoundError,
    RegistryError,
)
from registry_api.db.models import Role, UserAccount
from registry_api.db.repositories import InstitutionStore, UserStore

logger = logging.getLogger(__name__)

USER_FIELDS: Final[frozenset[str]] = frozenset(
    {"name", "lastname", "email", "dni", "address", "phone", "img_profile", "institution_id"}
)


class UserService:
    """Read access to user accounts plus sign-up with cross-collection email checks."""

    def __init__(self, users: UserStore, institutions: InstitutionStore) -> None:
        self._users = users
        self._institutions = institutions

    async def get_user(self, user_id: str) -> UserAccount:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"No user found with id {user_id}")
        return user

    async def register_user(self, candidate: Mapping[str, Any] | None) -> UserAccount:
        if not candidate or not candidate.get("email"):
            raise InvalidRequestError("User email is required")

        email = candidate["email"]
        institution_id = candidate.get("institution_id")
        try:
            existing_user, existing_institution = await asyncio.gather(
                self._users.find_by_email(email),
                self._institutions.find_one_by(email=email),
            )
            if existing_user is not None or existing_institution is not None:
                raise ConflictError(["Email"])

            if institution_id and await self._institutions.find_by_id(institution_id) is None:
                raise NotFoundError(f"No institution found with id {institution_id}")

            values = {key: value for key, value in candidate.items() if key in USER_FIELDS}
            values["role"] = Role.STUDENT.value
            values["is_admin"] = False
            user = await self._users.insert(values)
        except RegistryError:
            raise
        except Exception as exc:
            logger.exception("Failed to register user %s", email)
            raise InternalError("Failed to register user") from exc

        logger.info("Registered user %s", user.id)
        return user


__all__ = ["USER_FIELDS", "UserService"]
