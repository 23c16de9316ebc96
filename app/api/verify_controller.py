"""
app/api/verify_controller.py

Handles the bot-verification relay at /verify-recaptcha.

The browser cannot hold the verification secret, so it posts the widget
token here and this endpoint forwards it to the provider with the
secret attached.

Responses:
  200  The provider answered.  Body is the provider's JSON verbatim,
       e.g. { "success": true, "challenge_ts": "...", "hostname": "..." }.
       A rejected token is still a 200 with "success": false.
  204  CORS preflight (OPTIONS).
  400  The token was missing, the body was not JSON, or the provider
       could not be reached.  Body: { "success": false, "error": "..." }.

Every response carries permissive CORS headers so the relay can be
called from any origin that hosts the form.
"""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.exceptions import VerificationError
from app.core.logger import get_logger
from app.models.verify_models import VerifyRequest, VerifyResponse
from app.verification.recaptcha_verifier import SiteVerifyClient

logger = get_logger(__name__)

router = APIRouter(prefix="/verify-recaptcha", tags=["Verification"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Controllers import this instance; tests replace it with monkeypatch.
siteverify_client = SiteVerifyClient()


def _err(message: str) -> JSONResponse:
    body = VerifyResponse(success=False, error=message)
    return JSONResponse(
        status_code=400,
        content=body.model_dump(exclude_none=True),
        headers=CORS_HEADERS,
    )


@router.options("", include_in_schema=False)
async def preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("", response_model=VerifyResponse, summary="Verify a reCAPTCHA token")
async def verify(request: Request) -> JSONResponse:
    """Forward { "token": "..." } to the provider and relay its verdict."""
    try:
        body = VerifyRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _err("Invalid JSON body")

    if not body.token:
        return _err("Missing reCAPTCHA token")

    try:
        verdict = await siteverify_client.siteverify(body.token)
    except VerificationError as exc:
        logger.warning("Relay verification failed: %s", exc)
        return _err(str(exc))

    return JSONResponse(status_code=200, content=verdict, headers=CORS_HEADERS)
