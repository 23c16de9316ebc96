"""
app/core/exceptions.py

Custom exception hierarchy for the application.

Collaborators raise these internally and convert them to typed outcomes
at their own boundary, so the submission workflow never sees a raw fault.
"""

from typing import Optional


class AppBaseException(Exception):
    """Root exception — catch-all for any application-level error."""


# ── Managed backend exceptions ─────────────────────────────────────────────────

class BackendError(AppBaseException):
    """
    Raised when the managed backend (storage or database) rejects a request.

    Attributes:
        code    : Backend error code, e.g. "23505" or "PGRST116" (may be None).
        message : Human-readable message from the backend.
        status  : HTTP status of the backend response (0 if unknown).
    """

    def __init__(self, message: str, code: Optional[str] = None, status: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# ── Bot verification exceptions ────────────────────────────────────────────────

class VerificationError(AppBaseException):
    """Raised when a bot-challenge token cannot be checked with the provider."""
