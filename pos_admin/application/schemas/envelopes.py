"""Pydantic DTOs for the REST/JSON record envelopes.

Shared by the HTTP record repository (parsing) and the mock backend
(serialising), so both sides agree on the wire shape.
"""

from typing import Any

from pydantic import BaseModel, Field


class RecordListEnvelope(BaseModel):
    """Body of ``GET /api/<resource>``."""

    success: bool
    data: list[dict[str, Any]] = Field(default_factory=list)
    message: str | None = None


class RecordMutationEnvelope(BaseModel):
    """Body of ``POST``/``PUT``/``DELETE`` responses and of every failure."""

    success: bool
    data: dict[str, Any] | None = None
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    resources: list[str] = Field(default_factory=list)
