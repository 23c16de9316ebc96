"""
app/main.py

FastAPI application entry point.

Responsibilities:
  - Create the FastAPI app with metadata from config
  - Register all API routers
  - Add a global exception handler for uncaught AppBaseException
  - Expose a /health endpoint for liveness probes
  - Drain in-flight webhook deliveries on shutdown
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.form_controller import router as form_router
from app.api.verify_controller import router as verify_router
from app.core.config import settings
from app.core.exceptions import AppBaseException
from app.core.logger import get_logger
from app.services.submission_workflow import webhook_notifier

logger = get_logger(__name__)


# ── Lifespan ───────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "%s %s starting — bucket=%s  table=%s  relay=%s  webhook=%s",
        settings.app_name,
        settings.app_version,
        settings.storage_bucket,
        settings.submissions_table,
        settings.recaptcha_relay_url or "in-process",
        "configured" if settings.webhook_url else "disabled",
    )
    yield
    if webhook_notifier.pending:
        logger.info("Waiting for %d webhook delivery(ies).", webhook_notifier.pending)
    await webhook_notifier.drain()


# ── App instance ───────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Accepts a PDF document together with an email address behind a "
        "bot challenge, stores both, and allows one submission per IP address."
    ),
    lifespan=lifespan,
)

# ── Routers ────────────────────────────────────────────────────────────────────

app.include_router(form_router)
app.include_router(verify_router)

# ── Global exception handler ───────────────────────────────────────────────────

@app.exception_handler(AppBaseException)
async def app_exception_handler(request: Request, exc: AppBaseException) -> JSONResponse:
    """
    Safety-net for any AppBaseException that escapes controller-level handling.
    Returns the error shape: { "error": "..." }
    """
    logger.exception("Unhandled application error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ── Health endpoint ────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health() -> dict:
    """Returns 200 OK when the service is running."""
    return {"status": "ok", "version": settings.app_version}
