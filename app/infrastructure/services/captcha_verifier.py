"""CAPTCHA token verification against Cloudflare Turnstile or hCaptcha (httpx)."""

from __future__ import annotations

import httpx

from app.domain.exceptions import StoreUnavailableException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"
HCAPTCHA_VERIFY_URL = "https://hcaptcha.com/siteverify"

_PROVIDER = "captcha"


def verify_url_for(site_key: str) -> str:
    """Turnstile site keys start with 0x; anything else is treated as hCaptcha."""
    return TURNSTILE_VERIFY_URL if site_key.startswith("0x") else HCAPTCHA_VERIFY_URL


class HttpCaptchaVerifier:
    """ICaptchaVerifier posting to the provider's siteverify endpoint.

    Both providers take the same form fields (secret, response, remoteip) and
    answer with {"success": bool, "error-codes": [...]}.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        site_key: str,
        secret_key: str,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._client = client
        self._url = verify_url_for(site_key)
        self._secret_key = secret_key
        self._timeout = timeout_seconds

    async def verify(self, token: str, remote_ip: str | None) -> bool:
        form = {"secret": self._secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip
        try:
            response = await self._client.post(self._url, data=form, timeout=self._timeout)
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Captcha verification request failed: %s", e)
            raise StoreUnavailableException(_PROVIDER) from e
        if result.get("success") is True:
            return True
        logger.info("Captcha token refused: %s", result.get("error-codes"))
        return False
