from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from sqlalchemy import select, update

from registry_api.db import models
from registry_api.db.session import SessionFactory, get_session


class InstitutionStore(Protocol):
    async def find_page(self, offset: int, limit: int) -> list[models.Institution] | None: ...

    async def find_one_by(self, **filters: Any) -> models.Institution | None: ...

    async def find_by_id(self, institution_id: str) -> models.Institution | None: ...

    async def insert(self, values: Mapping[str, Any]) -> models.Institution: ...

    async def update_partial(self, institution_id: str, patch: Mapping[str, Any]) -> None: ...


class UserLookup(Protocol):
    async def find_by_email(self, email: str) -> models.UserAccount | None: ...


class UserStore(UserLookup, Protocol):
    async def find_by_id(self, user_id: str) -> models.UserAccount | None: ...

    async def insert(self, values: Mapping[str, Any]) -> models.UserAccount: ...


class InstitutionRepository:
    """Institution persistence; each call runs in its own unit of work."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self._session_factory = session_factory

    async def find_page(self, offset: int, limit: int) -> list[models.Institution]:
        stmt = (
            select(models.Institution)
            .order_by(models.Institution.created_at.asc(), models.Institution.id.asc())
            .offset(offset)
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars())

    async def find_one_by(self, **filters: Any) -> models.Institution | None:
        stmt = select(models.Institution).filter_by(**filters).limit(1)
        async with self._session_factory() as session:
            return await session.scalar(stmt)

    async def find_by_id(self, institution_id: str) -> models.Institution | None:
        async with self._session_factory() as session:
            return await session.get(models.Institution, institution_id)

    async def insert(self, values: Mapping[str, Any]) -> models.Institution:
        institution = models.Institution(**values)
        async with self._session_factory() as session:
            session.add(institution)
            await session.flush()
        return institution

    async def update_partial(self, institution_id: str, patch: Mapping[str, Any]) -> None:
        if not patch:
            return
        stmt = (
            update(models.Institution)
            .where(models.Institution.id == institution_id)
            .values(**patch)
        )
        async with self._session_factory() as session:
            await session.execute(stmt)


class UserRepository:
    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> models.UserAccount | None:
        stmt = select(models.UserAccount).where(models.UserAccount.email == email).limit(1)
        async with self._session_factory() as session:
            return await session.scalar(stmt)

    async def find_by_id(self, user_id: str) -> models.UserAccount | None:
        async with self._session_factory() as session:
            return await session.get(models.UserAccount, user_id)

    async def insert(self, values: Mapping[str, Any]) -> models.UserAccount:
        user = models.UserAccount(**values)
        async with self._session_factory() as session:
            session.add(user)
            await session.flush()
        return user

    async def payment_ids(self, user_id: str) -> list[str]:
        stmt = (
            select(models.Payment.id)
            .where(models.Payment.user_id == user_id)
            .order_by(models.Payment.created_at.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars())


__all__ = [
    "InstitutionRepository",
    "InstitutionStore",
    "UserLookup",
    "UserRepository",
    "UserStore",
]
