"""Tests for Resend client and template helpers."""

import json

import httpx
import pytest

from continuum.core.config import Settings
from continuum.services.email_client import (
    EmailError,
    ResendClient,
    extract_variables,
    replace_variables,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        redis_url="redis://localhost:6379/0",
        jwt_secret="s",
        client_jwt_secret="c",
        resend_api_key="re_test_key",
    )


def _client_with(settings: Settings, handler) -> ResendClient:  # type: ignore[no-untyped-def]
    client = ResendClient(settings)
    client._client = httpx.AsyncClient(
        base_url=ResendClient.BASE_URL,
        transport=httpx.MockTransport(handler),
    )
    return client


class TestVariables:
    def test_replace(self) -> None:
        assert replace_variables("Hi {{name}}, {{ pet }}!", {"name": "Jane", "pet": "Biscuit"}) == (
            "Hi Jane, Biscuit!"
        )

    def test_unknown_and_none_left_alone(self) -> None:
        assert replace_variables("{{a}} {{b}}", {"b": None}) == "{{a}} {{b}}"

    def test_non_string_values(self) -> None:
        assert replace_variables("{{n}}", {"n": 3}) == "3"

    def test_extract_first_seen_order(self) -> None:
        assert extract_variables("{{b}} {{a}} {{b}} {{ c }}") == ["b", "a", "c"]


class TestResendClient:
    async def test_send_payload(self, settings: Settings) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "msg-123"})

        client = _client_with(settings, handler)
        message_id = await client.send("jane@example.com", "Hello", "<p>Hi</p>", reply_to="vet@x.com")
        await client.close()

        assert message_id == "msg-123"
        assert captured["url"] == "https://api.resend.com/emails"
        assert captured["body"] == {
            "from": settings.email_from,
            "to": ["jane@example.com"],
            "subject": "Hello",
            "html": "<p>Hi</p>",
            "reply_to": "vet@x.com",
        }

    async def test_api_error(self, settings: Settings) -> None:
        client = _client_with(settings, lambda request: httpx.Response(422, text="bad address"))

        with pytest.raises(EmailError) as exc_info:
            await client.send(["a@example.com"], "s", "b")

        assert exc_info.value.status_code == 422
        assert "bad address" in str(exc_info.value)

    async def test_transport_error(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = _client_with(settings, handler)

        with pytest.raises(EmailError) as exc_info:
            await client.send("a@example.com", "s", "b")

        assert exc_info.value.status_code is None

    def test_lazy_client_headers(self, settings: Settings) -> None:
        client = ResendClient(settings)

        assert client.client.headers["Authorization"] == "Bearer re_test_key"
