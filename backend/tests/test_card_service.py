"""
Side Quest Backend — Card Service Unit Tests
==============================================

What:  Tests for CardService orchestration (submit, list, delete, cleanup).
How:   Real CardService over a mocked repository and a mocked storage gateway.

What we test:
    ✅ Submission echoes input and resolved image URLs
    ✅ Nothing is uploaded or inserted when validation fails
    ✅ Upload failures abort before the insert
    ✅ Delete removes images in one batch, then the row
    ✅ A failed image delete keeps the row
    ✅ Expiry cleanup counts, keeps order, and halts on the first failure
"""

import pytest

from sidequest.exceptions import (
    CardOperationError,
    DatabaseError,
    DeleteError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from sidequest.schemas.card import CardSubmission
from sidequest.services.card_service import REQUIRED_FIELDS_MESSAGE
from sidequest.services.upload_validation import UploadedImage

PUBLIC_PREFIX = "https://project.supabase.co/storage/v1/object/public/side-quest-images/"


def _submission(**overrides):
    fields = {
        "business_name": "Sunrise Bakery",
        "employee_name": "Sam Lee",
        "description": "Fresh bread every morning.",
        "webpage_url": "https://sunrise.example",
    }
    fields.update(overrides)
    return CardSubmission(**fields)


def _image(name="photo.jpg", content_type="image/jpeg", content=b"\xff\xd8data"):
    return UploadedImage(filename=name, content_type=content_type, content=content)


class TestSubmit:
    """Tests for CardService.submit()."""

    @pytest.mark.asyncio
    async def test_submit_without_images(self, card_service, mock_storage, mock_repository):
        """A text-only card is stored with no cover and an empty product list."""
        card = await card_service.submit(_submission())

        assert card.business_name == "Sunrise Bakery"
        assert card.employee_name == "Sam Lee"
        assert card.description == "Fresh bread every morning."
        assert card.webpage_url == "https://sunrise.example"
        assert card.cover_image_url is None
        assert card.product_image_urls == []
        assert card.expires_at > card.created_at
        mock_storage.upload_image.assert_not_awaited()
        mock_repository.insert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_webpage_url_is_stored_as_null(self, card_service, mock_repository):
        await card_service.submit(_submission(webpage_url=""))

        draft = mock_repository.insert.await_args.args[0]
        assert draft.webpage_url is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["business_name", "employee_name", "description"])
    async def test_blank_required_field_rejected(
        self, field, card_service, mock_storage, mock_repository
    ):
        """Missing or whitespace-only required fields → 400 before any side effect."""
        with pytest.raises(ValidationError) as exc_info:
            await card_service.submit(_submission(**{field: "   "}), cover=_image())

        assert exc_info.value.message == REQUIRED_FIELDS_MESSAGE
        mock_storage.upload_image.assert_not_awaited()
        mock_repository.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_too_many_products_rejected_before_upload(
        self, card_service, mock_storage, mock_repository
    ):
        products = [_image(f"p{i}.jpg") for i in range(11)]

        with pytest.raises(ValidationError) as exc_info:
            await card_service.submit(_submission(), products=products)

        assert exc_info.value.message == "Too many files"
        mock_storage.upload_image.assert_not_awaited()
        mock_repository.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cover_uploaded_first_and_product_order_kept(
        self, card_service, mock_storage
    ):
        cover = _image("cover.png", "image/png", b"cover")
        products = [_image("a.jpg", content=b"a"), _image("b.jpg", content=b"b")]

        card = await card_service.submit(_submission(), cover=cover, products=products)

        uploaded = [c.args for c in mock_storage.upload_image.await_args_list]
        assert uploaded == [
            (b"cover", "image/png"),
            (b"a", "image/jpeg"),
            (b"b", "image/jpeg"),
        ]
        assert card.cover_image_url == f"{PUBLIC_PREFIX}img-1.jpg"
        assert card.product_image_urls == [
            f"{PUBLIC_PREFIX}img-2.jpg",
            f"{PUBLIC_PREFIX}img-3.jpg",
        ]

    @pytest.mark.asyncio
    async def test_upload_failure_skips_insert(self, card_service, mock_storage, mock_repository):
        """The second product upload fails: the error surfaces and no row is written."""
        mock_storage.upload_image.side_effect = [
            f"{PUBLIC_PREFIX}img-1.jpg",
            UploadError(context={"status": 400}),
        ]

        with pytest.raises(UploadError):
            await card_service.submit(_submission(), products=[_image(), _image()])

        assert mock_storage.upload_image.await_count == 2
        mock_repository.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insert_failure_propagates(self, card_service, mock_repository):
        mock_repository.insert.side_effect = DatabaseError(message="Failed to create card")

        with pytest.raises(DatabaseError) as exc_info:
            await card_service.submit(_submission())

        assert exc_info.value.message == "Failed to create card"


class TestListActive:

    @pytest.mark.asyncio
    async def test_returns_repository_order(self, card_service, mock_repository, make_card):
        newer = make_card(business_name="Newer")
        older = make_card(business_name="Older")
        mock_repository.list_active.return_value = [newer, older]

        cards = await card_service.list_active()

        assert [c.business_name for c in cards] == ["Newer", "Older"]

    @pytest.mark.asyncio
    async def test_database_error_propagates(self, card_service, mock_repository):
        mock_repository.list_active.side_effect = DatabaseError(message="Failed to fetch cards")

        with pytest.raises(DatabaseError):
            await card_service.list_active()


class TestDeleteOne:
    """Tests for CardService.delete_one()."""

    @pytest.mark.asyncio
    async def test_missing_card_raises_not_found(self, card_service, mock_storage, mock_repository):
        mock_repository.get_by_id.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await card_service.delete_one("999")

        assert exc_info.value.message == "Card not found"
        mock_storage.delete_images.assert_not_awaited()
        mock_repository.delete_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deletes_all_images_in_one_batch_then_row(
        self, card_service, mock_storage, mock_repository, make_card
    ):
        card = make_card(
            cover_image_url=f"{PUBLIC_PREFIX}cover.png",
            product_image_urls=[f"{PUBLIC_PREFIX}p1.jpg", f"{PUBLIC_PREFIX}p2.jpg"],
        )
        mock_repository.get_by_id.return_value = card
        calls = []
        mock_storage.delete_images.side_effect = lambda paths: calls.append(("images", list(paths)))
        mock_repository.delete_by_id.side_effect = lambda card_id: calls.append(("row", card_id))

        await card_service.delete_one(str(card.id))

        assert calls == [
            ("images", ["cover.png", "p1.jpg", "p2.jpg"]),
            ("row", str(card.id)),
        ]

    @pytest.mark.asyncio
    async def test_card_without_images_skips_storage(
        self, card_service, mock_storage, mock_repository, make_card
    ):
        card = make_card()
        mock_repository.get_by_id.return_value = card

        await card_service.delete_one(str(card.id))

        mock_storage.delete_images.assert_not_awaited()
        mock_repository.delete_by_id.assert_awaited_once_with(str(card.id))

    @pytest.mark.asyncio
    async def test_image_delete_failure_keeps_row(
        self, card_service, mock_storage, mock_repository, make_card
    ):
        card = make_card(cover_image_url=f"{PUBLIC_PREFIX}cover.png")
        mock_repository.get_by_id.return_value = card
        mock_storage.delete_images.side_effect = DeleteError(context={"status": 500})

        with pytest.raises(CardOperationError) as exc_info:
            await card_service.delete_one(str(card.id))

        assert exc_info.value.message == "Failed to delete card"
        assert isinstance(exc_info.value.__cause__, DeleteError)
        mock_repository.delete_by_id.assert_not_awaited()


class TestCleanupExpired:
    """Tests for CardService.cleanup_expired()."""

    @pytest.mark.asyncio
    async def test_nothing_expired(self, card_service, mock_storage):
        assert await card_service.cleanup_expired() == 0
        mock_storage.delete_images.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deletes_every_expired_card_in_order(
        self, card_service, mock_storage, mock_repository, make_card
    ):
        first = make_card(cover_image_url=f"{PUBLIC_PREFIX}a.jpg")
        second = make_card()
        third = make_card(product_image_urls=[f"{PUBLIC_PREFIX}c.jpg"])
        mock_repository.list_expired.return_value = [first, second, third]

        deleted = await card_service.cleanup_expired()

        assert deleted == 3
        assert [c.args[0] for c in mock_repository.delete_by_id.await_args_list] == [
            str(first.id),
            str(second.id),
            str(third.id),
        ]
        assert [c.args[0] for c in mock_storage.delete_images.await_args_list] == [
            ["a.jpg"],
            ["c.jpg"],
        ]

    @pytest.mark.asyncio
    async def test_halts_on_first_failure(
        self, card_service, mock_storage, mock_repository, make_card
    ):
        first = make_card(cover_image_url=f"{PUBLIC_PREFIX}a.jpg")
        second = make_card(cover_image_url=f"{PUBLIC_PREFIX}b.jpg")
        third = make_card(cover_image_url=f"{PUBLIC_PREFIX}c.jpg")
        mock_repository.list_expired.return_value = [first, second, third]
        mock_storage.delete_images.side_effect = [None, DeleteError(), None]

        with pytest.raises(CardOperationError) as exc_info:
            await card_service.cleanup_expired()

        assert exc_info.value.message == "Cleanup failed"
        assert exc_info.value.context["deleted_before_failure"] == 1
        assert exc_info.value.context["failed_card_id"] == str(second.id)
        mock_repository.delete_by_id.assert_awaited_once_with(str(first.id))
        assert mock_storage.delete_images.await_count == 2

    @pytest.mark.asyncio
    async def test_row_already_gone_is_counted(
        self, card_service, mock_repository, make_card
    ):
        """A card removed concurrently between fetch and delete does not stop the batch."""
        first = make_card()
        second = make_card()
        mock_repository.list_expired.return_value = [first, second]
        mock_repository.delete_by_id.side_effect = [NotFoundError(resource_id=str(first.id)), None]

        assert await card_service.cleanup_expired() == 2

    @pytest.mark.asyncio
    async def test_listing_failure_is_cleanup_failure(self, card_service, mock_repository):
        mock_repository.list_expired.side_effect = DatabaseError(message="Failed to fetch expired cards")

        with pytest.raises(CardOperationError) as exc_info:
            await card_service.cleanup_expired()

        assert exc_info.value.message == "Cleanup failed"
        assert exc_info.value.context["deleted_before_failure"] == 0
