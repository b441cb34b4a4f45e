from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Final

from registry_api.core.errors import (
    ConflictError,
    InternalError,
    InvalidRequestError,
    NotFoundError,
    RegistryError,
)
from registry_api.db.models import Institution, InstitutionStatus, ReviewDecision, Role
from registry_api.db.repositories import InstitutionStore, UserLookup
from registry_api.services.notifications import InstitutionNotifier

logger = logging.getLogger(__name__)

SIGNUP_MESSAGE: Final[str] = "Institution registered successfully."

EDITABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"name", "email", "account_number", "address", "phone", "logo", "banner"}
)


@dataclass(slots=True)
class SignupResult:
    message: str
    institution: Institution


@contextmanager
def _infrastructure_faults(action: str) -> Iterator[None]:
    """Let workflow errors through untouched and collapse everything else."""
    try:
        yield
    except RegistryError:
        raise
    except Exception as exc:
        logger.exception("Failed to %s", action)
        raise InternalError(f"Failed to {action}") from exc


class InstitutionService:
    """Institution directory: sign-up, maintenance and the approval workflow."""

    def __init__(
        self,
        institutions: InstitutionStore,
        users: UserLookup,
        notifier: InstitutionNotifier,
    ) -> None:
        self._institutions = institutions
        self._users = users
        self._notifier = notifier

    async def list_institutions(self, page: int, limit: int) -> list[Institution]:
        if page < 1 or limit < 1:
            raise InvalidRequestError("page and limit must be positive integers")

        offset = (page - 1) * limit
        institutions = await self._institutions.find_page(offset, limit)
        if institutions is None:
            raise InvalidRequestError("No institutions available")
        return institutions

    async def get_institution(self, institution_id: str) -> Institution:
        institution = await self._institutions.find_by_id(institution_id)
        if institution is None:
            raise NotFoundError(f"No institution found with id {institution_id}")
        return institution

    async def register_institution(self, candidate: Mapping[str, Any] | None) -> SignupResult:
        if not candidate:
            raise InvalidRequestError("Institution data is required")

        email = candidate.get("email")
        name = candidate.get("name")
        if not email or not name:
            raise InvalidRequestError("Institution name and email are required")

        with _infrastructure_faults("register institution"):
            conflicts = await self._find_conflicts(email=email, name=name)
            if conflicts:
                logger.info("Rejected institution sign-up for %s: %s", email, conflicts)
                raise ConflictError(conflicts)

            values = {key: value for key, value in candidate.items() if key in EDITABLE_FIELDS}
            values["status"] = InstitutionStatus.PENDING.value
            values["role"] = Role.INSTITUTION.value
            created = await self._institutions.insert(values)

            stored = await self._institutions.find_by_id(created.id)
            if stored is None:
                raise InvalidRequestError("Institution could not be created")

            await self._notifier.send_submission_received(name=stored.name, email=stored.email)

        logger.info("Registered institution %s (%s)", stored.id, stored.email)
        return SignupResult(message=SIGNUP_MESSAGE, institution=stored)

    async def update_institution(
        self,
        institution_id: str,
        patch: Mapping[str, Any] | None,
    ) -> Institution:
        if not institution_id or not patch:
            raise InvalidRequestError("Institution id and update data are required")

        changes = {key: value for key, value in patch.items() if key in EDITABLE_FIELDS}
        if not changes:
            raise InvalidRequestError("No editable fields supplied")

        with _infrastructure_faults("update institution"):
            current = await self.get_institution(institution_id)

            email = changes.get("email")
            name = changes.get("name")
            conflicts = await self._find_conflicts(
                email=email if email != current.email else None,
                name=name if name != current.name else None,
                exclude_id=institution_id,
            )
            if conflicts:
                raise ConflictError(conflicts)

            await self._institutions.update_partial(institution_id, changes)
            updated = await self._institutions.find_by_id(institution_id)
            if updated is None:
                raise InternalError("Institution disappeared during update")

        logger.info("Updated institution %s fields %s", institution_id, sorted(changes))
        return updated

    async def review_institution(self, institution_id: str, status: str) -> Institution:
        try:
            decision = ReviewDecision(status)
        except ValueError as exc:
            raise InvalidRequestError("Status must be 'approved' or 'denied'") from exc

        with _infrastructure_faults("review institution"):
            institution = await self.get_institution(institution_id)
            if institution.status != InstitutionStatus.PENDING:
                raise InvalidRequestError(
                    f"Institution {institution_id} has already been {institution.status}"
                )

            if decision is ReviewDecision.APPROVED:
                institution.status = InstitutionStatus.APPROVED.value
                await self._notifier.send_approval_notice(institution)
            else:
                institution.status = InstitutionStatus.DENIED.value
                await self._notifier.send_rejection_notice(institution)

            await self._institutions.update_partial(institution_id, {"status": institution.status})
            reviewed = await self._institutions.find_by_id(institution_id)
            if reviewed is None:
                raise InternalError("Institution disappeared during review")

        logger.info("Institution %s %s", institution_id, reviewed.status)
        return reviewed

    async def promote_to_admin(self, institution_id: str) -> Institution:
        with _infrastructure_faults("promote institution"):
            await self.get_institution(institution_id)
            await self._institutions.update_partial(institution_id, {"role": Role.ADMIN.value})
            promoted = await self._institutions.find_by_id(institution_id)
            if promoted is None:
                raise InternalError("Institution disappeared during promotion")

        logger.info("Institution %s promoted to admin", institution_id)
        return promoted

    async def _find_conflicts(
        self,
        *,
        email: str | None,
        name: str | None,
        exclude_id: str | None = None,
    ) -> list[str]:
        """Look up every unique key at once and report each collision in check order."""

        async def _none() -> None:
            return None

        by_email, by_name, user_by_email = await asyncio.gather(
            self._institutions.find_one_by(email=email) if email else _none(),
            self._institutions.find_one_by(name=name) if name else _none(),
            self._users.find_by_email(email) if email else _none(),
        )

        conflicts: list[str] = []
        if by_email is not None and by_email.id != exclude_id:
            conflicts.append("Email")
        if by_name is not None and by_name.id != exclude_id:
            conflicts.append("Name")
        if user_by_email is not None:
            conflicts.append("Email")
        return conflicts


__all__ = ["EDITABLE_FIELDS", "SIGNUP_MESSAGE", "InstitutionService", "SignupResult"]
