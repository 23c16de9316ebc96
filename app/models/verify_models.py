"""
app/models/verify_models.py

Pydantic DTOs for the bot-verification relay.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class VerifyRequest(BaseModel):
    """JSON body for POST /verify-recaptcha: { "token": "03AF..." }"""

    token: Optional[str] = None


class VerifyResponse(BaseModel):
    """
    Relay reply. On success this is the provider's JSON passed through
    unchanged, so unknown keys (challenge_ts, hostname, ...) are kept.
    """

    model_config = ConfigDict(extra="allow")

    success: bool
    error: Optional[str] = None
