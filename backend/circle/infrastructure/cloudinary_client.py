"""Cloudinary Asset Store — remote image hosting behind the AssetStore protocol.

Invariants:
    - Never raises on SDK or network failure: uploads report a non-ok status,
      destroys report the public id as not deleted
    - "not_found" on destroy counts as deleted (the object is gone either way)
    - Every requested public id lands in exactly one of deleted / not_deleted

Design Decisions:
    - The SDK is blocking: each call runs in a worker thread via asyncio.to_thread
    - upload_many fans out with asyncio.gather and keeps the input order
    - Missing credentials short-circuit to failures instead of calling the SDK
      (ADR: local dev without CDN)
"""

import asyncio
import logging
from typing import Sequence

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader

from circle.config import Settings, get_settings
from circle.core.repository_protocols import (
    UPLOAD_OK, AssetStore, DestroyResult, UploadedFile, UploadResult,
)

logger = logging.getLogger(__name__)

DESTROY_BATCH_SIZE = 100
GONE_STATUSES = ("deleted", "not_found")


class CloudinaryAssetStore(AssetStore):
    """AssetStore backed by the Cloudinary upload and admin APIs."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.configured = bool(
            self.settings.cloudinary_cloud_name
            and self.settings.cloudinary_api_key
            and self.settings.cloudinary_api_secret
        )
        if self.configured:
            cloudinary.config(
                cloud_name=self.settings.cloudinary_cloud_name,
                api_key=self.settings.cloudinary_api_key,
                api_secret=self.settings.cloudinary_api_secret,
                secure=True,
            )
        else:
            logger.warning("Cloudinary credentials missing, asset store disabled")

    async def _upload(self, file: UploadedFile, transformation: dict) -> UploadResult:
        if not self.configured:
            return UploadResult(url=None, public_id=None, status="not_configured")

        payload = await file.read()
        if not payload:
            return UploadResult(url=None, public_id=None, status="empty_file")

        try:
            response = await asyncio.to_thread(
                cloudinary.uploader.upload,
                payload,
                folder=self.settings.cloudinary_folder,
                resource_type="image",
                transformation=[transformation],
            )
        except cloudinary.exceptions.Error as e:
            logger.warning(f"Cloudinary upload failed for {file.filename}: {e}")
            return UploadResult(url=None, public_id=None, status=str(e) or "error")

        url = response.get("secure_url") or response.get("url")
        public_id = response.get("public_id")
        if not url or not public_id:
            return UploadResult(url=None, public_id=None, status="incomplete_response")
        return UploadResult(url=url, public_id=public_id, status=UPLOAD_OK)

    async def upload(
        self, file: UploadedFile, width: int, height: int,
    ) -> UploadResult:
        """Single image cropped to exactly width x height."""
        return await self._upload(
            file, {"width": width, "height": height, "crop": "fill"},
        )

    async def upload_many(self, files: Sequence[UploadedFile]) -> list[UploadResult]:
        """Post images, width-limited, one result per file in input order."""
        limit = {"width": self.settings.post_image_max_width, "crop": "limit"}
        return list(await asyncio.gather(*(self._upload(f, limit) for f in files)))

    async def destroy(self, public_ids: Sequence[str]) -> DestroyResult:
        result = DestroyResult()
        ids = [p for p in dict.fromkeys(public_ids) if p]
        if not ids:
            return result
        if not self.configured:
            result.not_deleted.extend(ids)
            return result

        for start in range(0, len(ids), DESTROY_BATCH_SIZE):
            batch = ids[start:start + DESTROY_BATCH_SIZE]
            try:
                response = await asyncio.to_thread(
                    cloudinary.api.delete_resources, batch,
                )
            except cloudinary.exceptions.Error as e:
                logger.warning(
                    f"Cloudinary destroy failed: {e}", extra={"public_ids": batch},
                )
                result.not_deleted.extend(batch)
                continue

            statuses = response.get("deleted", {})
            for public_id in batch:
                if statuses.get(public_id) in GONE_STATUSES:
                    result.deleted.append(public_id)
                else:
                    result.not_deleted.append(public_id)
        return result
