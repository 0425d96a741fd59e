"""Integration tests for registration and admin user management."""

import pytest
from httpx import AsyncClient
from pytest_check import check

NEW_USER = {
    "email": "squanchy@rickmorty.com",
    "password": "squanchy123",
    "firstName": "Squanchy",
    "lastName": "Squanch",
}


@pytest.mark.integration
class TestRegister:
    """POST /api/auth/register."""

    async def test_creates_user(self, client: AsyncClient) -> None:
        """New accounts get ROLE_USER and never expose the password."""
        response = await client.post("/api/auth/register", json=NEW_USER)

        assert response.status_code == 201
        body = response.json()
        user = body["user"]
        with check:
            assert body["message"] == "User created successfully"
        with check:
            assert user["email"] == NEW_USER["email"]
        with check:
            assert user["firstName"] == "Squanchy"
        with check:
            assert user["roles"] == ["ROLE_USER"]
        with check:
            assert user["createdAt"] == "2024-01-01 12:00:00"
        with check:
            assert "password" not in user
        with check:
            assert "hashedPassword" not in user

    async def test_new_user_can_authenticate(self, client: AsyncClient) -> None:
        """The stored hash verifies against the registered password."""
        await client.post("/api/auth/register", json=NEW_USER)

        response = await client.get(
            "/api/users", auth=(NEW_USER["email"], NEW_USER["password"])
        )

        # Authenticated, but not an admin
        assert response.status_code == 403

    async def test_missing_fields(self, client: AsyncClient) -> None:
        """Missing required fields give 400 with per-field messages."""
        response = await client.post(
            "/api/auth/register", json={"email": "x@rickmorty.com"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Bad Request"
        assert body["message"] == "Request validation failed"
        assert "password" in body["details"]["validation_errors"]

    async def test_invalid_email(self, client: AsyncClient) -> None:
        """Emails without an @ are rejected."""
        response = await client.post(
            "/api/auth/register", json={**NEW_USER, "email": "not-an-email"}
        )

        assert response.status_code == 400

    async def test_duplicate_email(self, client: AsyncClient) -> None:
        """Registering an existing email is a conflict."""
        response = await client.post(
            "/api/auth/register", json={**NEW_USER, "email": "morty@rickmorty.com"}
        )

        assert response.status_code == 409
        assert response.json() == {
            "error": "Conflict",
            "message": "User already exists",
        }


@pytest.mark.integration
class TestUserAuthorization:
    """Access control on /api/users."""

    async def test_no_credentials(self, client: AsyncClient) -> None:
        """Anonymous requests are challenged."""
        response = await client.get("/api/users")

        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith("Basic")
        assert response.json()["error"] == "HTTP Error"

    async def test_wrong_password(self, client: AsyncClient) -> None:
        """Bad credentials are challenged."""
        response = await client.get(
            "/api/users", auth=("admin@rickmorty.com", "wrong")
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": "HTTP Error",
            "message": "Invalid credentials",
        }
        assert response.headers["www-authenticate"] == "Basic"

    async def test_non_admin_forbidden(
        self, client: AsyncClient, user_headers: dict[str, str]
    ) -> None:
        """ROLE_USER alone is not enough."""
        response = await client.get("/api/users", headers=user_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied"


@pytest.mark.integration
class TestUserAdministration:
    """Admin CRUD on /api/users."""

    async def test_list(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """All users are listed in id order."""
        response = await client.get("/api/users", headers=admin_headers)

        assert response.status_code == 200
        assert [user["email"] for user in response.json()] == [
            "admin@rickmorty.com",
            "morty@rickmorty.com",
        ]

    async def test_list_pagination(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """skip and limit page through the users."""
        response = await client.get(
            "/api/users", params={"skip": 1, "limit": 1}, headers=admin_headers
        )

        assert [user["id"] for user in response.json()] == [2]

    async def test_get(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """A single user by id."""
        response = await client.get("/api/users/1", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["roles"] == ["ROLE_ADMIN", "ROLE_USER"]

    async def test_get_missing(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Unknown ids give 404."""
        response = await client.get("/api/users/999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "message": "User not found"}

    async def test_non_integer_id(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Path ids must be integers."""
        response = await client.get("/api/users/abc", headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize("method", ["PUT", "PATCH"])
    async def test_update(
        self, client: AsyncClient, admin_headers: dict[str, str], method: str
    ) -> None:
        """PUT and PATCH both apply partial updates."""
        response = await client.request(
            method,
            "/api/users/2",
            json={"firstName": "Mortimer"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User updated successfully"
        assert body["user"]["firstName"] == "Mortimer"
        assert body["user"]["lastName"] == "Smith"

    async def test_update_password(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """A new password replaces the old one."""
        await client.patch(
            "/api/users/2", json={"password": "new-secret"}, headers=admin_headers
        )

        old = await client.get("/api/users", auth=("morty@rickmorty.com", "morty123"))
        new = await client.get(
            "/api/users", auth=("morty@rickmorty.com", "new-secret")
        )

        assert old.status_code == 401
        assert new.status_code == 403

    async def test_update_to_taken_email(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Changing the email to another user's is a conflict."""
        response = await client.patch(
            "/api/users/2",
            json={"email": "admin@rickmorty.com"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    async def test_update_missing(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Updating an unknown id gives 404."""
        response = await client.put(
            "/api/users/999", json={"firstName": "Nobody"}, headers=admin_headers
        )

        assert response.status_code == 404

    async def test_delete(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Deleted users are gone."""
        response = await client.delete("/api/users/2", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully"}

        response = await client.get("/api/users/2", headers=admin_headers)
        assert response.status_code == 404
