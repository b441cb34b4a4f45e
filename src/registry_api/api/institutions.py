from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from registry_api.api.deps import InstitutionServiceDep
from registry_api.core.settings import Settings, get_settings
from registry_api.schemas.institutions import (
    InstitutionOut,
    InstitutionPatch,
    InstitutionPublic,
    InstitutionSignup,
    InstitutionUpdated,
    ReviewRequest,
    SignupResponse,
)
from registry_api.schemas.validation import (
    ensure_valid,
    validate_institution_patch,
    validate_institution_signup,
)

router = APIRouter(prefix="/institutions", tags=["institutions"])


@router.get("", response_model=list[InstitutionOut])
async def list_institutions(
    service: InstitutionServiceDep,
    settings: Annotated[Settings, Depends(get_settings)],
    page: int = 1,
    limit: int | None = None,
) -> list[InstitutionOut]:
    page_size = settings.default_page_size if limit is None else limit
    page_size = min(page_size, settings.max_page_size)
    institutions = await service.list_institutions(page, page_size)
    return [InstitutionOut.model_validate(institution) for institution in institutions]


@router.get("/{institution_id}", response_model=InstitutionOut)
async def get_institution(
    institution_id: str,
    service: InstitutionServiceDep,
) -> InstitutionOut:
    institution = await service.get_institution(institution_id)
    return InstitutionOut.model_validate(institution)


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def sign_up_institution(
    payload: InstitutionSignup,
    service: InstitutionServiceDep,
) -> SignupResponse:
    candidate = payload.as_payload()
    ensure_valid(validate_institution_signup(candidate))
    result = await service.register_institution(candidate)
    return SignupResponse(
        message=result.message,
        institution_response=InstitutionPublic.model_validate(result.institution),
    )


@router.put("/{institution_id}", response_model=InstitutionUpdated)
async def update_institution(
    institution_id: str,
    payload: InstitutionPatch,
    service: InstitutionServiceDep,
) -> InstitutionUpdated:
    patch = payload.as_payload()
    ensure_valid(validate_institution_patch(patch))
    updated = await service.update_institution(institution_id, patch)
    return InstitutionUpdated.model_validate(updated)


@router.put("/{institution_id}/status", response_model=InstitutionOut)
async def review_institution(
    institution_id: str,
    payload: ReviewRequest,
    service: InstitutionServiceDep,
) -> InstitutionOut:
    reviewed = await service.review_institution(institution_id, payload.status)
    return InstitutionOut.model_validate(reviewed)


@router.put("/{institution_id}/admin", response_model=InstitutionOut)
async def promote_institution(
    institution_id: str,
    service: InstitutionServiceDep,
) -> InstitutionOut:
    promoted = await service.promote_to_admin(institution_id)
    return InstitutionOut.model_validate(promoted)
