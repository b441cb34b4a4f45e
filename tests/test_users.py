from __future__ import annotations

import pytest
from httpx import AsyncClient

from registry_api.core.errors import ConflictError, NotFoundError
from registry_api.services.users import UserService


@pytest.fixture
def user_service(user_repository, institution_repository) -> UserService:
    return UserService(users=user_repository, institutions=institution_repository)


class TestUserService:
    async def test_register_defaults_to_student(self, user_service, make_institution):
        institution = await make_institution()

        user = await user_service.register_user(
            {
                "name": "Grace",
                "lastname": "Hopper",
                "email": "grace@example.com",
                "dni": "1234567",
                "institution_id": institution.id,
            }
        )

        assert user.role == "student"
        assert user.is_admin is False
        assert user.institution_id == institution.id
        assert (await user_service.get_user(user.id)).email == "grace@example.com"

    async def test_email_used_by_institution_conflicts(self, user_service, make_institution):
        await make_institution(email="shared@example.edu")

        with pytest.raises(ConflictError) as excinfo:
            await user_service.register_user(
                {"name": "Grace", "lastname": "Hopper", "email": "shared@example.edu"}
            )

        assert excinfo.value.fields == ["Email"]

    async def test_unknown_institution_is_not_found(self, user_service):
        with pytest.raises(NotFoundError):
            await user_service.register_user(
                {
                    "name": "Grace",
                    "lastname": "Hopper",
                    "email": "grace@example.com",
                    "institution_id": "missing",
                }
            )

    async def test_unknown_user_is_not_found(self, user_service):
        with pytest.raises(NotFoundError):
            await user_service.get_user("missing")


class TestUserEndpoints:
    async def test_create_and_fetch(self, async_client: AsyncClient):
        response = await async_client.post(
            "/users",
            json={"name": "Alan", "lastname": "Turing", "email": "alan@example.com"},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["role"] == "student"
        assert created["isAdmin"] is False

        response = await async_client.get(f"/users/{created['id']}")
        assert response.status_code == 200
        assert response.json()["email"] == "alan@example.com"

    async def test_admin_flag_cannot_be_set(self, async_client: AsyncClient):
        response = await async_client.post(
            "/users",
            json={
                "name": "Alan",
                "lastname": "Turing",
                "email": "alan@example.com",
                "isAdmin": True,
            },
        )

        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "isAdmin", "message": "cannot be set by the client"}
        ]

    async def test_duplicate_email_conflicts(self, async_client: AsyncClient, make_user):
        await make_user(email="alan@example.com")

        response = await async_client.post(
            "/users",
            json={"name": "Alan", "lastname": "Turing", "email": "alan@example.com"},
        )

        assert response.status_code == 409
        assert response.json()["errors"] == [{"field": "Email"}]

    async def test_accepts_camel_case_institution_reference(
        self, async_client: AsyncClient, make_institution
    ):
        institution = await make_institution()

        response = await async_client.post(
            "/users",
            json={
                "name": "Alan",
                "lastname": "Turing",
                "email": "alan@example.com",
                "imgProfile": "https://cdn.test/alan.png",
                "institutionId": institution.id,
            },
        )

        assert response.status_code == 201
        created = response.json()
        assert created["institutionId"] == institution.id
        assert created["imgProfile"] == "https://cdn.test/alan.png"
