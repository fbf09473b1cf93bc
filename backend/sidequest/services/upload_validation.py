"""
Side Quest Backend — Upload Pre-validation
============================================

What:  Checks uploaded images (type, size, count) before any of them is
       handed to CardService or the object store.
How:   check_image() returns a typed RejectionReason instead of raising, so
       callers can decide how to report it; validate_uploads() applies the
       checks to a whole submission and raises ValidationError (→ 400) on
       the first rejection.
Who:   Called by the POST /cards route after the multipart body is parsed.

Rules:
    - Content type, lower-cased, must be image/jpeg, image/jpg or image/png
    - At most max_file_size bytes per file (10MB by default)
    - At most one cover image and max_product_images product images
"""

import enum
from dataclasses import dataclass
from typing import Optional, Sequence

from sidequest.exceptions import ValidationError

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})


class RejectionReason(str, enum.Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    FILE_TOO_LARGE = "file_too_large"
    TOO_MANY_FILES = "too_many_files"


REJECTION_MESSAGES = {
    RejectionReason.UNSUPPORTED_TYPE: "Only JPEG and PNG images are allowed",
    RejectionReason.FILE_TOO_LARGE: "File too large",
    RejectionReason.TOO_MANY_FILES: "Too many files",
}


@dataclass(frozen=True)
class UploadedImage:
    """An uploaded file read fully into memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def check_image(image: UploadedImage, max_size: int) -> Optional[RejectionReason]:
    """
    Return why `image` cannot be accepted, or None when it can.

    Type is checked before size, matching the order a client is most
    likely to be able to fix.
    """
    if (image.content_type or "").lower() not in ALLOWED_MIME_TYPES:
        return RejectionReason.UNSUPPORTED_TYPE
    if image.size > max_size:
        return RejectionReason.FILE_TOO_LARGE
    return None


def _reject(reason: RejectionReason, field: str, **context) -> ValidationError:
    return ValidationError(
        message=REJECTION_MESSAGES[reason],
        field=field,
        context={"reason": reason.value, **context},
    )


def validate_uploads(
    covers: Sequence[UploadedImage],
    products: Sequence[UploadedImage],
    max_size: int,
    max_products: int,
) -> None:
    """
    Validate every file of one card submission.

    Raises:
        ValidationError with the reason in its context. Counts are checked
        first so an oversized batch is refused without inspecting any file.
    """
    if len(covers) > 1:
        raise _reject(RejectionReason.TOO_MANY_FILES, "coverImage", count=len(covers), limit=1)
    if len(products) > max_products:
        raise _reject(
            RejectionReason.TOO_MANY_FILES,
            "productImages",
            count=len(products),
            limit=max_products,
        )

    for field, images in (("coverImage", covers), ("productImages", products)):
        for image in images:
            reason = check_image(image, max_size)
            if reason is not None:
                raise _reject(
                    reason,
                    field,
                    filename=image.filename,
                    content_type=image.content_type,
                    size=image.size,
                )
