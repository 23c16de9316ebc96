"""
app/models/form_models.py

Pydantic DTOs for the form flow.
The submit request has no DTO — FastAPI handles multipart/form-data
natively in the controller; only the response shapes are defined here.
"""

from typing import Optional

from pydantic import BaseModel


class FormStatusResponse(BaseModel):
    """
    Response for GET /form/status, fetched when the page loads.

        {
            "locked": false,
            "site_key": "6Le...",
            "max_file_size_bytes": 15728640
        }
    """

    locked: bool
    site_key: str
    max_file_size_bytes: int


class SubmitResponse(BaseModel):
    """
    Successful response for POST /form/submit.

        { "message": "Twój dokument został pomyślnie przesłany.", "locked": true }
    """

    message: str
    locked: bool


class SubmitErrorResponse(BaseModel):
    """
    Error response for POST /form/submit.

    ``field`` names the form input the message belongs to ("email" or
    "file") and is null for form-level notices. ``locked`` tells the
    page to disable the form for the rest of the session.
    """

    error: str
    field: Optional[str] = None
    locked: bool = False
