"""Pydantic request/response models for the CSP generation API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GenerateCSPRequest(BaseModel):
    """Request body for POST /api/generate-csp.

    ``url`` may omit the protocol; ``https://`` is assumed.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str | None = Field(default=None, max_length=2048)
    use_wildcards: bool = Field(default=True, alias="useWildcards")


class GenerateCSPResponse(BaseModel):
    """Response body for a successful generation."""

    csp: str


class ErrorResponse(BaseModel):
    """Structured failure: short label, human-readable details."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    details: str | None = None
    full_error: str | None = Field(default=None, alias="fullError")
