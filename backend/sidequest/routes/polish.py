"""
Side Quest Backend — Polish Route Handler
===========================================

What:  POST /polish rewrites a card description with the configured LLM.
How:   Rejects empty text with a 400, then delegates to the injected LLMService.
       ConfigError / UpstreamError from the service become 500s in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from sidequest.dependencies import get_text_polisher
from sidequest.exceptions import ValidationError
from sidequest.schemas.card import ErrorResponse, PolishRequest, PolishResponse
from sidequest.services.llm_base import LLMService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Polish"])


@router.post(
    "/polish",
    response_model=PolishResponse,
    responses={
        400: {"description": "Description missing or blank", "model": ErrorResponse},
        500: {"description": "AI service not configured or failed", "model": ErrorResponse},
    },
    summary="Polish a description with AI",
)
async def polish_description(
    body: Optional[PolishRequest] = None,
    polisher: LLMService = Depends(get_text_polisher),
) -> PolishResponse:
    description = body.description if body is not None else None
    if description is None or not description.strip():
        raise ValidationError(message="Description is required", field="description")

    polished = await polisher.polish(description)
    return PolishResponse(polished=polished)
