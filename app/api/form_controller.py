"""
app/api/form_controller.py

Handles the public upload form at /form/.

This layer is responsible only for HTTP concerns:
  - Resolving the caller's IP and picking up its FormSession.
  - Copying the posted fields (email, file, bot token) into the session.
  - Delegating the submission itself to SubmissionWorkflow.
  - Translating the workflow outcome into an HTTP response.

Endpoints:
  GET  /form/status   Page-load check.  Tells the page whether this IP
                      already submitted and which challenge site key to use.
  POST /form/submit   multipart/form-data with fields
                        email  — submitter's address
                        file   — the PDF (max. 15 MiB)
                        token  — the bot-challenge widget token

Submit responses:
  200  Stored.  The form is now locked for this visitor.
  400  A field was invalid or the bot challenge failed; nothing was stored.
  409  This IP already submitted (permanent), or a submission from this
       visitor is still in progress.
  500  Storage failed; nothing was kept and the visitor may retry.
"""

from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.constants import MAX_FILE_SIZE_BYTES
from app.core.logger import get_logger
from app.models.form_models import FormStatusResponse, SubmitErrorResponse, SubmitResponse
from app.services.ip_resolver import ClientIpResolver
from app.services.submission_workflow import (
    OutcomeKind,
    SubmissionOutcome,
    session_registry,
    submission_workflow,
)
from app.services.validators import SelectedFile

logger = get_logger(__name__)

router = APIRouter(prefix="/form", tags=["Form"])

ip_resolver = ClientIpResolver()

_STATUS_BY_KIND = {
    OutcomeKind.SUCCESS: 200,
    OutcomeKind.FIELD_ERROR: 400,
    OutcomeKind.VERIFICATION_ERROR: 400,
    OutcomeKind.CONFLICT: 409,
    OutcomeKind.BUSY: 409,
    OutcomeKind.INFRASTRUCTURE_ERROR: 500,
}


# ── Helpers ────────────────────────────────────────────────────────────────────

async def _read_upload(upload: UploadFile) -> SelectedFile:
    # One byte past the limit is enough to tell that a file is too large.
    content = await upload.read(MAX_FILE_SIZE_BYTES + 1)
    return SelectedFile(
        name=upload.filename or "",
        content_type=upload.content_type or "",
        content=content,
    )


def _respond(outcome: SubmissionOutcome, locked: bool) -> JSONResponse:
    status = _STATUS_BY_KIND[outcome.kind]
    if outcome.success:
        body = SubmitResponse(message=outcome.message, locked=locked)
    else:
        body = SubmitErrorResponse(error=outcome.message, field=outcome.field, locked=locked)
    return JSONResponse(status_code=status, content=body.model_dump())


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.get("/status", response_model=FormStatusResponse, summary="Page-load form status")
async def form_status(request: Request) -> FormStatusResponse:
    ip_address = await ip_resolver.resolve(request)
    session = session_registry.get(ip_address)
    locked = await submission_workflow.load(session)
    return FormStatusResponse(
        locked=locked,
        site_key=settings.recaptcha_site_key,
        max_file_size_bytes=MAX_FILE_SIZE_BYTES,
    )


@router.post(
    "/submit",
    response_model=SubmitResponse,
    responses={400: {"model": SubmitErrorResponse}, 409: {"model": SubmitErrorResponse},
               500: {"model": SubmitErrorResponse}},
    summary="Submit a PDF with an email address",
)
async def submit(
    request: Request,
    email: str = Form(""),
    token: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> JSONResponse:
    ip_address = await ip_resolver.resolve(request)
    # Read before looking up the session: from the busy check until
    # submit() sets busy there must be no await.
    selected = await _read_upload(file) if file is not None and file.filename else None
    session = session_registry.get(ip_address)

    # A locked or busy session is answered before its fields are touched.
    if session.locked or session.busy:
        return _respond(await submission_workflow.submit(session), session.locked)

    logger.info("Submission received from %s.", ip_address)

    try:
        session.set_email(email)
        session.set_bot_token(token)

        if selected is None:
            session.file = None
            session.file_error = ""
        elif not session.select_file(selected):
            logger.info("Rejected file '%s': %s", selected.name, session.file_error)
            outcome = SubmissionOutcome(OutcomeKind.FIELD_ERROR, session.file_error, field="file")
            return _respond(outcome, session.locked)

        outcome = await submission_workflow.submit(session)
    finally:
        # The browser resends every field; nothing is kept between requests.
        session.reset()

    if outcome.success:
        logger.info("Submission %s from %s complete.", outcome.submission_id, ip_address)
    else:
        logger.info("Submission from %s stopped: %s: %s", ip_address, outcome.kind.value, outcome.message)
    return _respond(outcome, session.locked)
