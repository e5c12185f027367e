"""Startup admin sync wiring."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from pydantic import SecretStr

from identity_server.application.dtos.sync import SyncResult
from identity_server.core import lifespan
from identity_server.core.config import Settings
from identity_server.core.lifespan import create_lifespan, sync_default_admin
from identity_server.domain.enums import SyncOutcome
from identity_server.domain.exceptions import SyncFailedException

_SETTINGS = SimpleNamespace(
    default_admin_user_id="admin-1",
    default_admin_email="admin@x.com",
    default_admin_password=SecretStr("pw-secret-1"),
    default_admin_name="Admin",
)


async def test_sync_default_admin_passes_settings_through() -> None:
    service = AsyncMock()
    service.sync_default_user.return_value = SyncResult(SyncOutcome.NO_OP, "already")

    await sync_default_admin(_SETTINGS, service)

    service.sync_default_user.assert_awaited_once_with("admin-1", "admin@x.com", "pw-secret-1", "Admin")


async def test_sync_default_admin_failure_aborts_startup() -> None:
    service = AsyncMock()
    service.sync_default_user.side_effect = SyncFailedException("sync_default_user failed: 503")

    with pytest.raises(SyncFailedException):
        await sync_default_admin(_SETTINGS, service)


async def test_failed_admin_sync_closes_http_client_and_disposes_engine(monkeypatch) -> None:
    settings = Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        idp_domain="tenant.test.auth0.com",
        idp_client_id="cid",
        idp_client_secret="csecret",
        idp_audience="aud",
        default_admin_sync_enabled=True,
        default_admin_user_id="admin-1",
        default_admin_email="admin@x.com",
        default_admin_password="pw-secret-1",
        default_admin_name="Admin",
    )
    dispose = AsyncMock()
    monkeypatch.setattr(lifespan, "get_settings", lambda: settings)
    monkeypatch.setattr(lifespan.database, "get_session_factory", lambda: None)
    monkeypatch.setattr(lifespan.database, "dispose_engine", dispose)
    monkeypatch.setattr(
        lifespan, "sync_default_admin", AsyncMock(side_effect=SyncFailedException("sync_default_user failed"))
    )
    app = FastAPI()

    with pytest.raises(SyncFailedException):
        async with create_lifespan(app):
            pass

    assert app.state.http_client is None
    dispose.assert_awaited_once()
