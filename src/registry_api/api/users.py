from __future__ import annotations

from fastapi import APIRouter, status

from registry_api.api.deps import UserServiceDep
from registry_api.schemas.users import UserOut, UserSignup
from registry_api.schemas.validation import ensure_valid, validate_user_signup

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserSignup, service: UserServiceDep) -> UserOut:
    candidate = payload.as_payload()
    ensure_valid(validate_user_signup(candidate))
    user = await service.register_user(candidate)
    return UserOut.model_validate(user)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, service: UserServiceDep) -> UserOut:
    user = await service.get_user(user_id)
    return UserOut.model_validate(user)
