"""
app/core/constants.py

Application-wide fixed constants.

These are business rules that are part of the system's contract and are
NOT configurable via environment variables.
"""

# ── Uploaded file rules ────────────────────────────────────────────────────────

#: Largest accepted upload: 15 MiB. A file of exactly this size is accepted.
MAX_FILE_SIZE_BYTES: int = 15 * 1024 * 1024

#: The declared MIME type must contain this marker (e.g. "application/pdf").
PDF_MIME_MARKER: str = "pdf"

#: Folder segment every stored object key starts with.
UPLOAD_FOLDER: str = "uploads"

# ── Submission identity ────────────────────────────────────────────────────────

#: Stored in place of the caller's address when it cannot be resolved.
UNKNOWN_IP: str = "unknown"

#: Event name sent in every outbound webhook payload.
WEBHOOK_EVENT: str = "new_submission"

# ── Backend error codes ────────────────────────────────────────────────────────

#: PostgreSQL unique_violation, raised by the ip_address constraint.
UNIQUE_VIOLATION_CODE: str = "23505"

#: PostgREST "single object requested, zero rows returned".
NO_ROWS_CODE: str = "PGRST116"

# ── In-memory form sessions ────────────────────────────────────────────────────

#: Most form sessions kept at once; the least recently used idle one goes first.
MAX_TRACKED_SESSIONS: int = 10_000
