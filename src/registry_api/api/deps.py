from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from registry_api.core.settings import Settings, get_settings
from registry_api.db.repositories import InstitutionRepository, UserRepository
from registry_api.db.session import SessionFactory, get_session
from registry_api.services.institutions import InstitutionService
from registry_api.services.notifications import EmailNotifier, InstitutionNotifier
from registry_api.services.users import UserService


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Yield a database session for request handlers.

    Uses the get_session context manager internally to handle
    commit/rollback/close lifecycle.
    """
    async with get_session() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_session_factory() -> SessionFactory:
    return get_session


SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]


def get_notifier(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InstitutionNotifier:
    return EmailNotifier(settings=settings)


def get_institution_service(
    session_factory: SessionFactoryDep,
    notifier: Annotated[InstitutionNotifier, Depends(get_notifier)],
) -> InstitutionService:
    return InstitutionService(
        institutions=InstitutionRepository(session_factory),
        users=UserRepository(session_factory),
        notifier=notifier,
    )


def get_user_service(session_factory: SessionFactoryDep) -> UserService:
    return UserService(
        users=UserRepository(session_factory),
        institutions=InstitutionRepository(session_factory),
    )


InstitutionServiceDep = Annotated[InstitutionService, Depends(get_institution_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


__all__ = [
    "InstitutionServiceDep",
    "SessionDep",
    "SessionFactoryDep",
    "UserServiceDep",
    "get_db_session",
    "get_institution_service",
    "get_notifier",
    "get_session_factory",
    "get_user_service",
]
