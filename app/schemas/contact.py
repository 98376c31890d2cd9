"""Pydantic schemas for the contact endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContactRequest(BaseModel):
    """Raw contact form payload.

    Fields are loosely typed on purpose: presence, length and format rules
    are enforced by the submission gate so every failure gets the same
    JSON envelope and message.
    """

    model_config = ConfigDict(extra="ignore")

    name: Any = Field(default=None, description="Sender name (min 2 characters).")
    email: Any = Field(default=None, description="Sender email address.")
    message: Any = Field(default=None, description="Message body (min 10 characters).")
    package: Any = Field(
        default=None,
        description="Package of interest. Defaults to 'General Inquiry'.",
    )
    phone: Any = Field(default=None, description="Optional phone number.")


class ContactResponse(BaseModel):
    """Successful submission response."""

    success: bool = Field(True, description="Always true for accepted submissions.")
    message: str = Field(..., description="Confirmation text for the user.")
    id: str = Field(..., description="Email provider message id.")


class ErrorResponse(BaseModel):
    """Error envelope shared by every non-2xx response."""

    success: bool = Field(False, description="Always false for errors.")
    message: str = Field(..., description="Human-readable reason.")
    request_id: str | None = Field(
        default=None,
        description="Correlation id, also returned in the X-Request-ID header.",
    )
