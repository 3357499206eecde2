"""
Pydantic models for demo service request/response validation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class UpsertContactRequest(BaseModel):
    """
    Documented body of POST /upsert-contact.

    The route parses the body leniently; this model only feeds the OpenAPI schema.
    """

    email: Optional[str] = Field(
        default=None,
        description="Identifying key of the contact (required)",
    )
    name: Optional[str] = Field(default=None, description="Display name")
    city: Optional[str] = Field(default=None, description="City")
    tags: Optional[List[str]] = Field(
        default=None,
        description="Free-form labels; replaces existing tags when given as a list",
    )


class ResultResponse(BaseModel):
    """Envelope for single-result endpoints."""

    ok: bool = True
    result: Dict[str, Any]


class DemoRunResponse(BaseModel):
    """Envelope for POST /run-demo."""

    ok: bool = True
    results: Dict[str, Any]


class ErrorResponse(BaseModel):
    """Envelope returned on 4xx/5xx."""

    ok: bool = False
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    timestamp: datetime
    version: str
