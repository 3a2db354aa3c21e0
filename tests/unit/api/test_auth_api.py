"""Tests for login, registration and email verification endpoints."""

from unittest.mock import MagicMock

from fastapi import status
from httpx import AsyncClient

from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD, CLIENT_PASSWORD


def _registration(**kwargs: object) -> dict[str, object]:
    data: dict[str, object] = {
        "email": "new.owner@example.com",
        "password": "portal-pass-456",
        "firstName": "Nora",
        "lastName": "Owner",
        "phone": "+44 20 7946 0001",
    }
    data.update(kwargs)
    return data


class TestAdminAuth:
    """Admin session lifecycle."""

    async def test_login_sets_cookie(self, client: AsyncClient, admin_headers: dict[str, str]) -> None:
        response = await client.post(
            "/api/auth/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True
        assert response.json()["user"]["email"] == ADMIN_EMAIL
        assert "admin-token" in response.cookies
        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

    async def test_bad_password(self, client: AsyncClient, admin_headers: dict[str, str]) -> None:
        response = await client.post(
            "/api/auth/admin/login", json={"email": ADMIN_EMAIL, "password": "wrong-password"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "error" in response.json()

    async def test_session(self, client: AsyncClient, admin_headers: dict[str, str]) -> None:
        response = await client.get("/api/auth/admin/session", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["authenticated"] is True
        assert body["user"]["email"] == ADMIN_EMAIL

    async def test_session_requires_cookie(self, client: AsyncClient) -> None:
        response = await client.get("/api/auth/admin/session")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_logout_revokes_session(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        response = await client.post("/api/auth/admin/logout", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

        response = await client.get("/api/auth/admin/session", headers=admin_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_login_rate_limited(self, client: AsyncClient) -> None:
        """Test that the sixth attempt in the window is rejected."""
        body = {"email": ADMIN_EMAIL, "password": "wrong-password"}
        for _ in range(5):
            response = await client.post("/api/auth/admin/login", json=body)
            assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = await client.post("/api/auth/admin/login", json=body)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json()["retryAfter"] > 0


class TestClientAuth:
    """Portal registration, verification and login."""

    async def test_register_sends_verification(
        self, client: AsyncClient, mock_email_service: MagicMock
    ) -> None:
        response = await client.post("/api/auth/client/register?locale=fr", json=_registration())

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["success"] is True
        args = mock_email_service.send_verification.await_args.args
        assert args[1] == "new.owner@example.com"
        assert args[3] == "fr"

    async def test_register_unsupported_locale_falls_back(
        self, client: AsyncClient, mock_email_service: MagicMock
    ) -> None:
        await client.post("/api/auth/client/register?locale=xx", json=_registration())

        assert mock_email_service.send_verification.await_args.args[3] == "en"

    async def test_register_validation(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/client/register", json=_registration(password="abc")
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "error" in response.json()

    async def test_register_duplicate(self, client: AsyncClient, portal_client) -> None:  # type: ignore[no-untyped-def]
        response = await client.post(
            "/api/auth/client/register", json=_registration(email=portal_client.email)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_unverified_login_requires_verification(
        self, client: AsyncClient, mock_email_service: MagicMock
    ) -> None:
        await client.post("/api/auth/client/register", json=_registration())

        response = await client.post(
            "/api/auth/client/login",
            json={"email": "new.owner@example.com", "password": "portal-pass-456"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["requiresVerification"] is True

    async def test_verify_then_login(
        self, client: AsyncClient, mock_email_service: MagicMock
    ) -> None:
        await client.post("/api/auth/client/register", json=_registration())
        token = mock_email_service.send_verification.await_args.args[2]

        verified = await client.post("/api/auth/verify-email", json={"token": token})
        assert verified.status_code == status.HTTP_200_OK

        response = await client.post(
            "/api/auth/client/login",
            json={"email": "new.owner@example.com", "password": "portal-pass-456"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["firstName"] == "Nora"
        assert "client-token" in response.cookies

    async def test_verify_rejects_unknown_token(self, client: AsyncClient) -> None:
        response = await client.post("/api/auth/verify-email", json={"token": "nope"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_session(self, client: AsyncClient, client_headers: dict[str, str]) -> None:
        response = await client.get("/api/auth/client/session", headers=client_headers)

        assert response.status_code == status.HTTP_200_OK
        user = response.json()["user"]
        assert user["email"] == "jane.owner@example.com"
        assert user["emailVerified"] is True

    async def test_login_and_logout(self, client: AsyncClient, portal_client) -> None:  # type: ignore[no-untyped-def]
        login = await client.post(
            "/api/auth/client/login",
            json={"email": portal_client.email, "password": CLIENT_PASSWORD},
        )
        assert login.status_code == status.HTTP_200_OK
        headers = {"Cookie": f"client-token={login.cookies['client-token']}"}

        logout = await client.post("/api/auth/client/logout", headers=headers)
        assert logout.status_code == status.HTTP_200_OK

        client.cookies.clear()
        session = await client.get("/api/auth/client/session", headers=headers)
        assert session.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_admin_cookie_is_not_a_client_session(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        response = await client.get("/api/portal/profile", headers=admin_headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_resend_does_not_reveal_accounts(
        self, client: AsyncClient, mock_email_service: MagicMock
    ) -> None:
        unknown = await client.post(
            "/api/auth/client/resend-verification", json={"email": "ghost@example.com"}
        )
        await client.post("/api/auth/client/register", json=_registration())
        known = await client.post(
            "/api/auth/client/resend-verification", json={"email": "new.owner@example.com"}
        )

        assert unknown.json() == known.json()
        assert mock_email_service.send_verification.await_count == 2
