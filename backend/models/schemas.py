from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Contact Form Schemas
class ContactFormRequest(BaseModel):
    """Raw contact form submission.

    Fields are deliberately loose: sanitization and validation run in the
    service layer so that the client receives a single readable message
    instead of a list of schema errors.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    tel: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactFormResponse(BaseModel):
    success: bool
    message: str


class ContactMessage(BaseModel):
    """Sanitized, validated submission ready to be relayed by email."""

    name: str
    email: str
    tel: str = ""
    subject: str
    message: str
    client_ip: str
    received_at: datetime = Field(..., description="Server-observed receive time")


class ErrorResponse(BaseModel):
    error: str
    correlation_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
