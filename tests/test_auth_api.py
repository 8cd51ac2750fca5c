from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from rinart_cms.core import security
from rinart_cms.core.security import failed_login_delay, generate_session_token
from rinart_cms.repositories.admin import SqlAlchemyAdminRepository

ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "correct-horse"

pytestmark = pytest.mark.asyncio


async def test_wrong_password_gets_generic_error_after_delay(client, admin_user, monkeypatch):
    delays = []

    async def _record_delay() -> None:
        delays.append(True)

    monkeypatch.setattr("rinart_cms.api.routes.auth.failed_login_delay", _record_delay)

    wrong_password = await client.post("/api/admin/login", json={"login": ADMIN_LOGIN, "password": "nope"})
    unknown_user = await client.post("/api/admin/login", json={"login": "ghost", "password": "nope"})

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"error": "Invalid credentials"}
    assert len(delays) == 2
    assert "set-cookie" not in wrong_password.headers


async def test_missing_credentials(client):
    response = await client.post("/api/admin/login", json={"login": " ", "password": ""})

    assert response.status_code == 400
    assert response.json() == {"error": "Login and password are required"}


async def test_login_sets_http_only_cookie_and_session_resolves(client, admin_user, settings_env):
    response = await client.post("/api/admin/login", json={"login": ADMIN_LOGIN, "password": ADMIN_PASSWORD})

    assert response.json() == {"success": True}
    cookie_header = response.headers["set-cookie"]
    assert cookie_header.startswith(f"{settings_env.session_cookie_name}=")
    assert "HttpOnly" in cookie_header
    assert "samesite=lax" in cookie_header.lower()

    session = await client.get("/api/admin/session")
    assert session.status_code == 200
    assert session.json()["login"] == ADMIN_LOGIN


async def test_logout_invalidates_session(admin_client):
    assert (await admin_client.get("/api/admin/session")).status_code == 200

    response = await admin_client.post("/api/admin/logout")

    assert response.json() == {"success": True}
    assert (await admin_client.get("/api/admin/session")).status_code == 401


async def test_expired_session_is_rejected_and_removed(client, admin_user, session_factory, settings_env):
    token = generate_session_token()
    async with session_factory() as session:
        await SqlAlchemyAdminRepository(session).create_session(
            admin_user.id, token, datetime.utcnow() - timedelta(seconds=1)
        )

    client.cookies.set(settings_env.session_cookie_name, token)
    response = await client.get("/api/admin/projects")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    async with session_factory() as session:
        assert await SqlAlchemyAdminRepository(session).find_session(token) is None


async def test_unknown_token_is_rejected(client, settings_env):
    client.cookies.set(settings_env.session_cookie_name, "0" * 64)

    response = await client.get("/api/admin/session")

    assert response.status_code == 401


async def test_recaptcha_failure_blocks_login(client, admin_user, monkeypatch):
    async def _reject(token, remote_ip=None, **kwargs) -> bool:
        return False

    monkeypatch.setattr("rinart_cms.api.routes.auth.recaptcha_enabled", lambda: True)
    monkeypatch.setattr("rinart_cms.api.routes.auth.verify_recaptcha_token", _reject)

    response = await client.post(
        "/api/admin/login",
        json={"login": ADMIN_LOGIN, "password": ADMIN_PASSWORD, "recaptchaToken": "token"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "reCAPTCHA verification failed"}


async def test_failed_login_delay_stays_in_configured_range(monkeypatch):
    slept = []

    async def _sleep(seconds: float) -> None:
        slept.append(seconds)

    monkeypatch.setattr(security, "asyncio", SimpleNamespace(sleep=_sleep))
    for _ in range(20):
        await failed_login_delay()

    assert all(0.2 <= seconds <= 0.4 for seconds in slept)


async def test_expired_sessions_are_purged(db_session, admin_user):
    repo = SqlAlchemyAdminRepository(db_session)
    now = datetime.utcnow()
    await repo.create_session(admin_user.id, "a" * 64, now - timedelta(minutes=1))
    await repo.create_session(admin_user.id, "b" * 64, now + timedelta(days=1))

    assert await repo.delete_expired_sessions(now) == 1
    assert await repo.find_session("b" * 64) is not None
