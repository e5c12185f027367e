"""Auth0 Management API client (httpx.AsyncClient, no auth0 SDK).

Obtains a service token with the client-credentials grant and calls
/api/v2/users. Lookups return None for 404; every other failure (network,
timeout, non-2xx) raises IdentityProviderException. Tokens, client secrets
and passwords are never logged.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from identity_server.application.dtos.identity import (
    CreateIdentityRequest,
    RemoteIdentity,
    UpdateIdentityRequest,
)
from identity_server.domain.exceptions import IdentityProviderException

if TYPE_CHECKING:
    from identity_server.core.config import Settings

logger = logging.getLogger(__name__)

_USERS_PATH = "api/v2/users"
_TOKEN_PATH = "oauth/token"


def _identity_from_payload(data: dict[str, Any]) -> RemoteIdentity:
    """Map an Auth0 user object onto RemoteIdentity."""
    return RemoteIdentity(
        user_id=data["user_id"],
        email=data.get("email"),
        name=data.get("name"),
        picture=data.get("picture"),
        blocked=bool(data.get("blocked", False)),
        email_verified=bool(data.get("email_verified", False)),
        phone_verified=data.get("phone_verified"),
        connection=_connection_of(data),
    )


def _connection_of(data: dict[str, Any]) -> str | None:
    identities = data.get("identities") or []
    if identities and isinstance(identities[0], dict):
        return identities[0].get("connection")
    return data.get("connection")


def _create_payload(request: CreateIdentityRequest) -> dict[str, Any]:
    body: dict[str, Any] = {
        "email": request.email,
        "password": request.password,
        "connection": request.connection,
        "email_verified": request.email_verified,
        "blocked": request.blocked,
    }
    if request.name is not None:
        body["name"] = request.name
    if request.verify_email is not None:
        body["verify_email"] = request.verify_email
    return body


def _update_payload(request: UpdateIdentityRequest) -> dict[str, Any]:
    """Only fields that are set; None means leave unchanged at the IdP."""
    fields = {
        "name": request.name,
        "password": request.password,
        "email": request.email,
        "blocked": request.blocked,
    }
    return {k: v for k, v in fields.items() if v is not None}


class Auth0IdentityClient:
    """Remote identity client for the Auth0 Management API.

    Shares one httpx.AsyncClient (owned by the application lifespan). The
    service token is cached until expires_in minus a refresh margin; refresh
    is serialized so concurrent callers trigger a single token request.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        domain: str,
        client_id: str,
        client_secret: str,
        audience: str,
        request_timeout: float = 10.0,
        token_refresh_margin: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        base = domain.strip()
        if not base.startswith(("http://", "https://")):
            base = f"https://{base}"
        self._base_url = base.rstrip("/") + "/"
        self._http = http_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._audience = audience
        self._request_timeout = request_timeout
        self._token_refresh_margin = token_refresh_margin
        self._clock = clock
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient
    ) -> Auth0IdentityClient:
        return cls(
            http_client,
            domain=settings.idp_domain,
            client_id=settings.idp_client_id,
            client_secret=settings.idp_client_secret.get_secret_value(),
            audience=settings.idp_audience,
            request_timeout=settings.idp_request_timeout_seconds,
            token_refresh_margin=settings.idp_token_refresh_margin_seconds,
        )

    def _url(self, path: str) -> str:
        return self._base_url + path

    def _user_url(self, remote_ref: str) -> str:
        return self._url(f"{_USERS_PATH}/{quote(remote_ref, safe='')}")

    async def _send(
        self,
        method: str,
        url: str,
        *,
        timeout: float | None,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        authorize: bool = True,
        allow_not_found: bool = False,
    ) -> httpx.Response:
        """Send one request. With allow_not_found a 404 response is returned, not raised."""
        headers = {"Accept": "application/json"}
        if authorize:
            token = await self.acquire_service_token(timeout=timeout)
            headers["Authorization"] = f"Bearer {token}"
        try:
            resp = await self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=timeout if timeout is not None else self._request_timeout,
            )
        except httpx.TimeoutException as exc:
            raise IdentityProviderException(
                f"Identity provider timed out: {method} {url}", endpoint=url
            ) from exc
        except httpx.HTTPError as exc:
            raise IdentityProviderException(
                f"Identity provider unreachable: {method} {url} ({exc.__class__.__name__})",
                endpoint=url,
            ) from exc
        if resp.status_code == 404 and allow_not_found:
            return resp
        if not resp.is_success:
            raise IdentityProviderException(
                f"Identity provider returned {resp.status_code} for {method} {url}",
                status_code=resp.status_code,
                endpoint=url,
            )
        return resp

    @staticmethod
    def _json(resp: httpx.Response, url: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise IdentityProviderException(
                "Identity provider returned a non-JSON body",
                status_code=resp.status_code,
                endpoint=url,
            ) from exc

    async def acquire_service_token(self, *, timeout: float | None = None) -> str:
        """Return the cached management token, fetching a new one when near expiry."""
        if self._token and self._clock() < self._token_expires_at:
            return self._token
        async with self._token_lock:
            if self._token and self._clock() < self._token_expires_at:
                return self._token
            url = self._url(_TOKEN_PATH)
            resp = await self._send(
                "POST",
                url,
                timeout=timeout,
                json={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "audience": self._audience,
                },
                authorize=False,
            )
            data = self._json(resp, url)
            token = data.get("access_token") if isinstance(data, dict) else None
            if not token:
                raise IdentityProviderException(
                    "Token response has no access_token",
                    status_code=resp.status_code,
                    endpoint=url,
                )
            expires_in = float(data.get("expires_in", 86400))
            self._token = token
            self._token_expires_at = self._clock() + max(
                expires_in - self._token_refresh_margin, 0.0
            )
            logger.info("Acquired identity provider service token (expires_in=%ss)", int(expires_in))
            return token

    async def create_identity(
        self, request: CreateIdentityRequest, *, timeout: float | None = None
    ) -> RemoteIdentity:
        url = self._url(_USERS_PATH)
        resp = await self._send("POST", url, timeout=timeout, json=_create_payload(request))
        identity = _identity_from_payload(self._json(resp, url))
        logger.info("Created remote identity %s on connection %s", identity.user_id, request.connection)
        return identity

    async def get_identity_by_reference(
        self, remote_ref: str, *, timeout: float | None = None
    ) -> RemoteIdentity | None:
        url = self._user_url(remote_ref)
        resp = await self._send("GET", url, timeout=timeout, allow_not_found=True)
        if resp.status_code == 404:
            return None
        return _identity_from_payload(self._json(resp, url))

    async def get_identity_by_email(
        self, email: str, *, timeout: float | None = None
    ) -> RemoteIdentity | None:
        url = self._url(_USERS_PATH)
        resp = await self._send(
            "GET",
            url,
            timeout=timeout,
            params={"q": f'email:"{email}"', "search_engine": "v3"},
        )
        users = self._json(resp, url)
        if not users:
            return None
        return _identity_from_payload(users[0])

    async def update_identity(
        self,
        remote_ref: str,
        request: UpdateIdentityRequest,
        *,
        timeout: float | None = None,
    ) -> RemoteIdentity:
        url = self._user_url(remote_ref)
        resp = await self._send("PATCH", url, timeout=timeout, json=_update_payload(request))
        return _identity_from_payload(self._json(resp, url))

    async def set_blocked(
        self, remote_ref: str, blocked: bool, *, timeout: float | None = None
    ) -> None:
        url = self._user_url(remote_ref)
        await self._send("PATCH", url, timeout=timeout, json={"blocked": blocked})
        logger.info("Remote identity %s blocked=%s", remote_ref, blocked)

    async def delete_identity(
        self, remote_ref: str, *, timeout: float | None = None
    ) -> None:
        """Delete the identity; a 404 means it is already gone."""
        url = self._user_url(remote_ref)
        resp = await self._send("DELETE", url, timeout=timeout, allow_not_found=True)
        if resp.status_code == 404:
            logger.warning("Remote identity %s already absent on delete", remote_ref)
            return
        logger.info("Deleted remote identity %s", remote_ref)
