"""
Side Quest Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI uses these models to validate JSON bodies, serialize responses,
       and generate the OpenAPI document.

Cards are serialized with the record store's snake_case column names; the
multipart submission form uses camelCase field names (see routes/cards.py).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Card models
# ══════════════════════════════════════════════════════════════════════════


class CardSubmission(BaseModel):
    """
    Text fields of a POST /cards form, exactly as received.

    Everything is optional here: missing or blank required fields are
    rejected by CardService.submit() with a 400, not by FastAPI with a 422.
    """
    business_name: Optional[str] = None
    employee_name: Optional[str] = None
    webpage_url: Optional[str] = None
    description: Optional[str] = None


class CardDraft(BaseModel):
    """A validated card with resolved image URLs, ready for insert."""
    business_name: str
    employee_name: str
    webpage_url: Optional[str] = None
    description: str
    cover_image_url: Optional[str] = None
    product_image_urls: List[str] = Field(default_factory=list)


class CardResponse(BaseModel):
    """
    What:  Full representation of a stored card.
    Who:   Returned by GET /cards (as a list) and POST /cards (201).
    """
    id: uuid.UUID = Field(description="Unique card identifier (UUID)")
    business_name: str
    employee_name: str
    webpage_url: Optional[str] = None
    description: str
    cover_image_url: Optional[str] = Field(default=None, description="Public URL of the cover image")
    product_image_urls: List[str] = Field(default_factory=list, description="Public URLs, in upload order")
    created_at: datetime = Field(description="Insert time (UTC ISO 8601)")
    expires_at: datetime = Field(description="After this instant the card is no longer listed")

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    success: bool = True


class CleanupResponse(BaseModel):
    success: bool = True
    deleted: int = Field(description="Number of expired cards removed")


# ══════════════════════════════════════════════════════════════════════════
# Polish models
# ══════════════════════════════════════════════════════════════════════════


class PolishRequest(BaseModel):
    # Optional so an absent field becomes a 400 "Description is required"
    description: Optional[str] = None


class PolishResponse(BaseModel):
    polished: str = Field(description="Rewritten description, whitespace-trimmed")


# ══════════════════════════════════════════════════════════════════════════
# Service models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every failing endpoint.

    Example:
        {"error": "Card not found"}

    The request id travels in the X-Request-ID header, not the body.
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
    timestamp: str = Field(description="Server time, ISO 8601 UTC")
