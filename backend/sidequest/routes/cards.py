"""
Side Quest Backend — Card Route Handlers
==========================================

What:  GET /cards, POST /cards, DELETE /cards/{id}, DELETE /cards/cleanup/expired.
How:   Parses the request, runs upload pre-validation, delegates to CardService.
Who:   Called by the Side Quest frontend; the cleanup endpoint can be hit by an
       external cron.

Request Flow (POST /cards):
    1. Client sends multipart/form-data (businessName, employeeName,
       webpageUrl?, description, coverImage? ×1, productImages? ×≤10)
    2. Files are read into memory and pre-validated (type, size, count)
    3. CardService checks required fields, uploads, inserts
    4. 201 Created with the stored card

Errors are raised, not returned; the global handlers in main.py shape them.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from sidequest.config import settings
from sidequest.dependencies import get_card_service
from sidequest.schemas.card import (
    CardResponse,
    CardSubmission,
    CleanupResponse,
    DeleteResponse,
    ErrorResponse,
)
from sidequest.services.card_service import CardService
from sidequest.services.upload_validation import UploadedImage, validate_uploads

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cards"])


async def _read_images(
    files: Optional[List[UploadFile]], max_size: int
) -> List[UploadedImage]:
    """
    Read each upload into memory, at most max_size + 1 bytes per file.

    An oversized file is cut one byte past the limit, which is enough for
    check_image() to reject it without buffering the rest. An empty file
    input (no name, no bytes) is skipped.
    """
    images = []
    for upload in files or []:
        try:
            content = await upload.read(max_size + 1)
        finally:
            await upload.close()
        if not upload.filename and not content:
            continue
        images.append(
            UploadedImage(
                filename=upload.filename or "",
                content_type=upload.content_type or "",
                content=content,
            )
        )
    return images


@router.get(
    "/cards",
    response_model=List[CardResponse],
    responses={500: {"description": "Record store unavailable", "model": ErrorResponse}},
    summary="List active cards",
    description="Returns every card whose expiry time is in the future, newest first.",
)
async def list_cards(
    card_service: CardService = Depends(get_card_service),
) -> List[CardResponse]:
    return await card_service.list_active()


@router.post(
    "/cards",
    status_code=201,
    response_model=CardResponse,
    responses={
        201: {"description": "Card created", "model": CardResponse},
        400: {"description": "Missing required field or invalid image", "model": ErrorResponse},
        500: {"description": "Upload or insert failed", "model": ErrorResponse},
    },
    summary="Submit a new card",
    description=(
        "Multipart form with businessName, employeeName, description, optional "
        "webpageUrl, an optional coverImage and up to 10 productImages "
        "(JPEG or PNG, max 10MB each)."
    ),
)
async def create_card(
    business_name: Optional[str] = Form(None, alias="businessName"),
    employee_name: Optional[str] = Form(None, alias="employeeName"),
    webpage_url: Optional[str] = Form(None, alias="webpageUrl"),
    description: Optional[str] = Form(None),
    cover_image: Optional[List[UploadFile]] = File(None, alias="coverImage"),
    product_images: Optional[List[UploadFile]] = File(None, alias="productImages"),
    card_service: CardService = Depends(get_card_service),
) -> CardResponse:
    """
    Create a card.

    File checks run here, before CardService sees the request, so a bad
    file never causes an upload. Required text fields are checked by
    CardService.submit() (also before any upload).
    """
    covers = await _read_images(cover_image, settings.max_file_size)
    products = await _read_images(product_images, settings.max_file_size)

    logger.info(
        "Received card submission: business=%r, cover=%d, products=%d",
        business_name,
        len(covers),
        len(products),
    )

    validate_uploads(
        covers,
        products,
        max_size=settings.max_file_size,
        max_products=settings.max_product_images,
    )

    submission = CardSubmission(
        business_name=business_name,
        employee_name=employee_name,
        webpage_url=webpage_url,
        description=description,
    )
    return await card_service.submit(
        submission,
        cover=covers[0] if covers else None,
        products=products,
    )


@router.delete(
    "/cards/cleanup/expired",
    response_model=CleanupResponse,
    responses={500: {"description": "Cleanup failed", "model": ErrorResponse}},
    summary="Delete all expired cards",
    description="Deletes every expired card and its images. Safe to call from a cron job.",
)
async def cleanup_expired_cards(
    card_service: CardService = Depends(get_card_service),
) -> CleanupResponse:
    deleted = await card_service.cleanup_expired()
    return CleanupResponse(success=True, deleted=deleted)


@router.delete(
    "/cards/{card_id}",
    response_model=DeleteResponse,
    responses={
        404: {"description": "Card not found", "model": ErrorResponse},
        500: {"description": "Delete failed", "model": ErrorResponse},
    },
    summary="Delete one card and its images",
)
async def delete_card(
    card_id: str,
    card_service: CardService = Depends(get_card_service),
) -> DeleteResponse:
    await card_service.delete_one(card_id)
    return DeleteResponse(success=True)
