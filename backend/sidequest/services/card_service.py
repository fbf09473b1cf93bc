"""
Side Quest Backend — Card Service (Business Logic Orchestrator)
================================================================

What:  Coordinates the storage and persistence gateways for every card operation.
How:   Receives its gateways in the constructor (built per request by
       dependencies.get_card_service) and runs each step strictly in order.
Who:   Called by the /cards route handlers.

Orchestration Flow (POST /cards):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │ Required │───▶│ Upload      │───▶│ Upload       │───▶│ Insert   │
    │ fields   │    │ cover       │    │ products     │    │ card row │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    An upload failure aborts before the insert. Images already uploaded by
    the same request stay in the bucket (no rollback).

Deletion (DELETE /cards/{id} and expiry cleanup):
    fetch → batch-delete images → delete row
    The row is only removed after the image delete returned without error.
    A crash between the two steps leaves a row pointing at deleted images.
"""

import logging
from typing import List, Optional, Sequence

from sidequest.exceptions import (
    CardOperationError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from sidequest.schemas.card import CardDraft, CardResponse, CardSubmission
from sidequest.services.card_repository import CardRepository
from sidequest.services.storage_gateway import StorageGateway
from sidequest.services.upload_validation import UploadedImage

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "businessName, employeeName, and description are required"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class CardService:
    """
    Business logic layer for card operations.

    Responsibilities:
        - submit(): validate → upload images → insert
        - list_active(): passthrough to the repository
        - delete_one(): fetch → delete images → delete row
        - cleanup_expired(): delete_one semantics for every expired card
    """

    def __init__(
        self,
        repository: CardRepository,
        storage: StorageGateway,
        max_product_images: int = 10,
    ):
        self.repository = repository
        self.storage = storage
        self.max_product_images = max_product_images

    def image_paths(self, card) -> List[str]:
        """Storage paths for the cover image and every product image of `card`."""
        paths = []
        if card.cover_image_url:
            paths.append(self.storage.storage_path(card.cover_image_url))
        for url in card.product_image_urls or []:
            paths.append(self.storage.storage_path(url))
        return paths

    async def submit(
        self,
        submission: CardSubmission,
        cover: Optional[UploadedImage] = None,
        products: Sequence[UploadedImage] = (),
    ) -> CardResponse:
        """
        Create a card from a form submission.

        Workflow Steps:
            1. Reject missing/blank businessName, employeeName, description
               and more than max_product_images product images
            2. Upload the cover image, if any
            3. Upload product images one at a time, keeping their order
            4. Insert the card with the resolved URLs

        Raises:
            ValidationError: step 1 failed; nothing was uploaded or inserted.
            UploadError: an upload failed; nothing was inserted.
            DatabaseError: the insert failed.
        """
        missing = [
            name
            for name, value in (
                ("businessName", submission.business_name),
                ("employeeName", submission.employee_name),
                ("description", submission.description),
            )
            if _is_blank(value)
        ]
        if missing:
            raise ValidationError(
                message=REQUIRED_FIELDS_MESSAGE,
                context={"missing": missing},
            )
        if len(products) > self.max_product_images:
            raise ValidationError(
                message="Too many files",
                field="productImages",
                context={"count": len(products), "limit": self.max_product_images},
            )

        cover_image_url = None
        if cover is not None:
            cover_image_url = await self.storage.upload_image(cover.content, cover.content_type)

        product_image_urls = []
        for image in products:
            url = await self.storage.upload_image(image.content, image.content_type)
            product_image_urls.append(url)

        draft = CardDraft(
            business_name=submission.business_name,
            employee_name=submission.employee_name,
            webpage_url=submission.webpage_url or None,
            description=submission.description,
            cover_image_url=cover_image_url,
            product_image_urls=product_image_urls,
        )
        card = await self.repository.insert(draft)
        return CardResponse.model_validate(card)

    async def list_active(self) -> List[CardResponse]:
        """Unexpired cards, newest first."""
        cards = await self.repository.list_active()
        return [CardResponse.model_validate(card) for card in cards]

    async def delete_one(self, card_id: str) -> None:
        """
        Delete a card and every image it references.

        Raises:
            NotFoundError: no card with this id (no storage call was made).
            CardOperationError: fetching, image deletion or row deletion
                failed; when the image delete fails the row is kept.
        """
        try:
            card = await self.repository.get_by_id(card_id)
            if card is None:
                raise NotFoundError(resource_id=card_id)

            paths = self.image_paths(card)
            if paths:
                await self.storage.delete_images(paths)

            await self.repository.delete_by_id(card_id)
        except DependencyError as e:
            raise CardOperationError(
                message="Failed to delete card",
                context={"card_id": card_id, "cause": type(e).__name__, **e.context},
            ) from e

        logger.info("Card %s deleted with %d images", card_id, len(paths))

    async def cleanup_expired(self) -> int:
        """
        Delete every expired card and its images, one card at a time.

        Cards are processed in the order list_expired() returns them. The
        first storage or database failure stops the batch; cards processed
        before it stay deleted. A row that disappeared between the fetch
        and the delete (concurrent DELETE) is logged and still counted.

        Returns:
            Number of cards processed.

        Raises:
            CardOperationError: "Cleanup failed", with the progress so far
                in its context.
        """
        deleted = 0
        card_id = None
        try:
            expired = await self.repository.list_expired()
            logger.info("Expiry cleanup: %d expired cards found", len(expired))

            for card in expired:
                card_id = str(card.id)
                paths = self.image_paths(card)
                if paths:
                    await self.storage.delete_images(paths)
                try:
                    await self.repository.delete_by_id(card_id)
                except NotFoundError:
                    logger.warning("Expiry cleanup: card %s was already gone", card_id)
                deleted += 1
        except DependencyError as e:
            raise CardOperationError(
                message="Cleanup failed",
                context={
                    "deleted_before_failure": deleted,
                    "failed_card_id": card_id,
                    "cause": type(e).__name__,
                    **e.context,
                },
            ) from e

        logger.info("Expiry cleanup complete: %d cards deleted", deleted)
        return deleted
