"""Tests for Auth0IdentityClient using httpx.MockTransport (no network)."""

import asyncio
import json
import logging

import httpx
import pytest

from identity_server.application.dtos.identity import (
    CreateIdentityRequest,
    UpdateIdentityRequest,
)
from identity_server.domain.exceptions import IdentityProviderException
from identity_server.infrastructure.external.identity import Auth0IdentityClient

_SECRET = "very-secret-client-secret"


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class _Router:
    """Answers the token endpoint and delegates /api/v2 calls to a handler."""

    def __init__(self, handler=None, token_status: int = 200) -> None:
        self.handler = handler
        self.token_status = token_status
        self.token_requests = 0
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth/token":
            self.token_requests += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "access_denied"})
            return httpx.Response(
                200, json={"access_token": f"tok-{self.token_requests}", "expires_in": 3600}
            )
        self.requests.append(request)
        return self.handler(request)


def _user_payload(user_id: str = "auth0|abc", **extra) -> dict:
    return {
        "user_id": user_id,
        "email": "a@x.com",
        "name": "A",
        "picture": "https://cdn.test/a.png",
        "blocked": False,
        "email_verified": True,
        "identities": [{"connection": "Username-Password-Authentication"}],
        **extra,
    }


def _client(router: _Router, clock: _Clock | None = None) -> Auth0IdentityClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(router))
    return Auth0IdentityClient(
        http,
        domain="tenant.test.auth0.com",
        client_id="cid",
        client_secret=_SECRET,
        audience="https://tenant.test.auth0.com/api/v2/",
        clock=clock or _Clock(),
    )


async def test_service_token_is_cached_until_refresh_margin() -> None:
    clock = _Clock()
    router = _Router(lambda r: httpx.Response(200, json=_user_payload()))
    client = _client(router, clock)

    await client.get_identity_by_reference("auth0|abc")
    await client.get_identity_by_reference("auth0|abc")
    assert router.token_requests == 1
    assert router.requests[-1].headers["Authorization"] == "Bearer tok-1"

    clock.now += 3600 - 60
    await client.get_identity_by_reference("auth0|abc")
    assert router.token_requests == 2
    assert router.requests[-1].headers["Authorization"] == "Bearer tok-2"


async def test_concurrent_callers_share_one_token_request() -> None:
    router = _Router()
    client = _client(router)

    tokens = await asyncio.gather(*(client.acquire_service_token() for _ in range(5)))

    assert set(tokens) == {"tok-1"}
    assert router.token_requests == 1


async def test_token_request_uses_client_credentials_grant() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"access_token": "t", "expires_in": 60})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = Auth0IdentityClient(
        http, domain="https://tenant.test.auth0.com/", client_id="cid", client_secret=_SECRET, audience="aud"
    )

    assert await client.acquire_service_token() == "t"
    assert seen == [
        {"grant_type": "client_credentials", "client_id": "cid", "client_secret": _SECRET, "audience": "aud"}
    ]


async def test_token_rejection_raises_with_status() -> None:
    client = _client(_Router(token_status=401))

    with pytest.raises(IdentityProviderException) as exc_info:
        await client.acquire_service_token()

    assert exc_info.value.status_code == 401


async def test_create_identity_posts_payload_and_maps_response() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/api/v2/users"
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json=_user_payload("auth0|new"))

    client = _client(_Router(handler))
    identity = await client.create_identity(
        CreateIdentityRequest(
            email="a@x.com",
            password="pw-secret-1",
            name="A",
            connection="Username-Password-Authentication",
            email_verified=True,
            verify_email=True,
        )
    )

    assert identity.user_id == "auth0|new"
    assert identity.connection == "Username-Password-Authentication"
    assert identity.picture == "https://cdn.test/a.png"
    assert bodies == [
        {
            "email": "a@x.com",
            "password": "pw-secret-1",
            "connection": "Username-Password-Authentication",
            "email_verified": True,
            "blocked": False,
            "name": "A",
            "verify_email": True,
        }
    ]


async def test_get_identity_by_reference_returns_none_on_404() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(404, json={"message": "The user does not exist."})

    client = _client(_Router(handler))

    assert await client.get_identity_by_reference("auth0|gone") is None
    assert paths == ["/api/v2/users/auth0|gone"]


async def test_get_identity_by_email_uses_search_query() -> None:
    params: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params.append(dict(request.url.params))
        return httpx.Response(200, json=[_user_payload("auth0|1"), _user_payload("auth0|2")])

    client = _client(_Router(handler))
    identity = await client.get_identity_by_email("a@x.com")

    assert identity.user_id == "auth0|1"
    assert params == [{"q": 'email:"a@x.com"', "search_engine": "v3"}]


async def test_get_identity_by_email_empty_result_is_none() -> None:
    client = _client(_Router(lambda r: httpx.Response(200, json=[])))

    assert await client.get_identity_by_email("nobody@x.com") is None


async def test_update_identity_sends_only_set_fields() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_user_payload(name="New"))

    client = _client(_Router(handler))
    identity = await client.update_identity("auth0|abc", UpdateIdentityRequest(name="New"))

    assert identity.name == "New"
    assert bodies == [{"name": "New"}]


async def test_set_blocked_patches_blocked_flag() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_user_payload(blocked=True))

    client = _client(_Router(handler))
    await client.set_blocked("auth0|abc", True)

    assert bodies == [{"blocked": True}]


async def test_delete_identity_treats_404_as_deleted() -> None:
    client = _client(_Router(lambda r: httpx.Response(404)))

    await client.delete_identity("auth0|gone")


async def test_server_error_raises_with_status() -> None:
    client = _client(_Router(lambda r: httpx.Response(500, json={"message": "oops"})))

    with pytest.raises(IdentityProviderException) as exc_info:
        await client.delete_identity("auth0|abc")

    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint.endswith("/api/v2/users/auth0%7Cabc")


async def test_timeout_raises_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(_Router(handler))

    with pytest.raises(IdentityProviderException) as exc_info:
        await client.set_blocked("auth0|abc", True)

    assert exc_info.value.status_code is None


async def test_non_json_body_raises() -> None:
    client = _client(_Router(lambda r: httpx.Response(200, text="<html>")))

    with pytest.raises(IdentityProviderException):
        await client.get_identity_by_reference("auth0|abc")


async def test_client_secret_and_password_are_not_logged(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    client = _client(_Router(lambda r: httpx.Response(201, json=_user_payload("auth0|new"))))

    await client.create_identity(
        CreateIdentityRequest(
            email="a@x.com", password="pw-secret-1", name=None, connection="Username-Password-Authentication"
        )
    )

    for record in caplog.records:
        assert _SECRET not in record.getMessage()
        assert "pw-secret-1" not in record.getMessage()
        assert "tok-1" not in record.getMessage()
