"""
app/verification/recaptcha_verifier.py

reCAPTCHA implementations of the BotVerifier interface.

Verification has two hops so the secret never reaches the browser:

    widget token
      └─ relay endpoint (POST /verify-recaptcha)     RelayVerifier  → hop 1
           └─ Google siteverify (secret + token)     SiteVerifyClient → hop 2

When the relay runs in this same process there is no reason to call it
over HTTP, so InProcessVerifier goes straight to hop 2.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import VerificationError
from app.core.logger import get_logger
from app.verification.base import BotVerifier

logger = get_logger(__name__)


class SiteVerifyClient:
    """Forwards a token plus the server-held secret to the provider's API."""

    def __init__(
        self,
        secret: str | None = None,
        verify_url: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._secret = secret or settings.recaptcha_secret
        self._verify_url = verify_url or settings.recaptcha_verify_url
        self._transport = transport

    async def siteverify(self, token: str) -> Dict[str, Any]:
        """
        Ask the provider about ``token`` and return its JSON reply verbatim.

        Raises:
            VerificationError: Missing token, unreachable provider, or a
                               reply that is not a JSON object.
        """
        if not token:
            raise VerificationError("Missing reCAPTCHA token")

        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._verify_url,
                    data={"secret": self._secret, "response": token},
                )
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise VerificationError(f"reCAPTCHA verification request failed: {exc}") from exc

        if not isinstance(body, dict):
            raise VerificationError("reCAPTCHA verification returned an unexpected payload")

        if not body.get("success"):
            logger.info("reCAPTCHA rejected token — error-codes: %s", body.get("error-codes"))
        return body


class InProcessVerifier(BotVerifier):
    """BotVerifier that calls the provider directly from this process."""

    def __init__(self, client: SiteVerifyClient | None = None) -> None:
        self._client = client or SiteVerifyClient()

    async def verify(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            body = await self._client.siteverify(token)
        except VerificationError as exc:
            logger.warning("Bot verification failed: %s", exc)
            return False
        return body.get("success") is True


class RelayVerifier(BotVerifier):
    """BotVerifier that posts the token to a remote relay endpoint."""

    def __init__(
        self,
        relay_url: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._relay_url = relay_url or settings.recaptcha_relay_url
        self._transport = transport

    async def verify(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout, transport=self._transport
            ) as client:
                response = await client.post(self._relay_url, json={"token": token})
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Bot verification relay unreachable: %s", exc)
            return False

        if not response.is_success:
            logger.warning(
                "Bot verification relay returned %d: %s",
                response.status_code,
                body.get("error") if isinstance(body, dict) else body,
            )
            return False
        return isinstance(body, dict) and body.get("success") is True


def build_verifier() -> BotVerifier:
    """Pick the relay when one is configured, otherwise verify in-process."""
    if settings.recaptcha_relay_url:
        return RelayVerifier()
    return InProcessVerifier()
