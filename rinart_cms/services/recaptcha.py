"""reCAPTCHA token verification for the admin login form."""

from __future__ import annotations

import httpx
import structlog

from ..core.config import get_settings

logger = structlog.get_logger(__name__)

VERIFY_TIMEOUT_SECONDS = 10.0


def recaptcha_enabled() -> bool:
    return bool(get_settings().recaptcha_secret_key)


async def verify_recaptcha_token(
    token: str | None,
    remote_ip: str | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Return True when the verification endpoint accepts ``token``."""

    settings = get_settings()
    secret = settings.recaptcha_secret_key
    if not secret:
        logger.warning("recaptcha.secret_missing")
        return False
    if not token:
        return False

    form = {"secret": secret, "response": token}
    if remote_ip:
        form["remoteip"] = remote_ip

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=VERIFY_TIMEOUT_SECONDS)
    try:
        response = await http.post(settings.recaptcha_verify_url, data=form)
        if response.status_code != 200:
            logger.warning("recaptcha.request_failed", status=response.status_code)
            return False
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("recaptcha.error", error=str(exc))
        return False
    finally:
        if owns_client:
            await http.aclose()

    if not payload.get("success"):
        logger.warning("recaptcha.rejected", error_codes=payload.get("error-codes"))
        return False
    return True
