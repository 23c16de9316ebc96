"""app/verification/__init__.py — public API of the verification package."""

from app.verification.base import BotVerifier
from app.verification.recaptcha_verifier import (
    InProcessVerifier,
    RelayVerifier,
    SiteVerifyClient,
    build_verifier,
)

__all__ = [
    "BotVerifier",
    "InProcessVerifier",
    "RelayVerifier",
    "SiteVerifyClient",
    "build_verifier",
]
