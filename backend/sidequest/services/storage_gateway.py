"""
Side Quest Backend — Object Storage Gateway
=============================================

What:  Uploads card images to the hosted object store and deletes them again.
How:   Talks to the Supabase Storage REST API with a shared httpx.AsyncClient:
           upload:  POST   {base}/storage/v1/object/{bucket}/{filename}
           delete:  DELETE {base}/storage/v1/object/{bucket}  {"prefixes": [...]}
           public:         {base}/storage/v1/object/public/{bucket}/{filename}
Who:   Called by CardService during submission, deletion and expiry cleanup.

Filenames:
    <epoch-millis>-<7 random base36 chars>.<png|jpg>
    e.g. 1718000000000-k3j9x2a.jpg. No user input reaches the filename,
    and uploads never overwrite an existing object (x-upsert: false).
"""

import logging
import secrets
import string
import time
from typing import Dict, List, Sequence

import httpx

from sidequest.exceptions import DeleteError, UploadError

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def extension_for(mime_type: str) -> str:
    """`png` for image/png, `jpg` for everything else that passed validation."""
    return "png" if (mime_type or "").lower() == "image/png" else "jpg"


def generate_filename(mime_type: str) -> str:
    """Time-based prefix plus random suffix; collisions would need the same millisecond."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{int(time.time() * 1000)}-{suffix}.{extension_for(mime_type)}"


def url_to_storage_path(url: str, bucket: str) -> str:
    """
    Extract the storage path from a full public URL.

    Public URLs look like:
        https://<project>.supabase.co/storage/v1/object/public/<bucket>/<filename>

    Returns the part after `/<bucket>/`. A string without the marker is
    returned unchanged, which also makes the function idempotent.
    """
    marker = f"/{bucket}/"
    idx = url.find(marker)
    return url[idx + len(marker):] if idx != -1 else url


class StorageGateway:
    """
    Thin client for one bucket of the object store.

    The httpx client is owned by the application lifespan; the gateway only
    borrows it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        bucket: str,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket

    @property
    def _object_url(self) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
        }

    def build_public_url(self, filename: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{filename}"

    def storage_path(self, url: str) -> str:
        return url_to_storage_path(url, self.bucket)

    async def upload_image(self, content: bytes, mime_type: str) -> str:
        """
        Store one image and return its public URL.

        Raises:
            UploadError: the store answered with a non-2xx status or the
                request never completed.
        """
        filename = generate_filename(mime_type)
        headers = self._headers()
        headers["Content-Type"] = mime_type
        headers["x-upsert"] = "false"

        try:
            response = await self.client.post(
                f"{self._object_url}/{filename}",
                content=content,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("Image upload transport failure for %s: %s", filename, e)
            raise UploadError(context={"filename": filename, "error": str(e)}) from e

        if response.is_error:
            logger.error(
                "Object store rejected upload %s: HTTP %d %s",
                filename,
                response.status_code,
                response.text[:200],
            )
            raise UploadError(
                context={
                    "filename": filename,
                    "status": response.status_code,
                    "body": response.text[:500],
                }
            )

        logger.info("Image stored: %s (%d bytes)", filename, len(content))
        return self.build_public_url(filename)

    async def delete_images(self, paths: Sequence[str]) -> None:
        """
        Remove a batch of objects in a single request. No-op when empty.

        Raises:
            DeleteError: the store answered with a non-2xx status or the
                request never completed.
        """
        prefixes: List[str] = list(paths)
        if not prefixes:
            return

        try:
            response = await self.client.request(
                "DELETE",
                self._object_url,
                json={"prefixes": prefixes},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error("Image delete transport failure for %d paths: %s", len(prefixes), e)
            raise DeleteError(context={"paths": prefixes, "error": str(e)}) from e

        if response.is_error:
            logger.error(
                "Object store rejected delete of %d paths: HTTP %d %s",
                len(prefixes),
                response.status_code,
                response.text[:200],
            )
            raise DeleteError(
                context={
                    "paths": prefixes,
                    "status": response.status_code,
                    "body": response.text[:500],
                }
            )

        logger.info("Deleted %d images from bucket %s", len(prefixes), self.bucket)
