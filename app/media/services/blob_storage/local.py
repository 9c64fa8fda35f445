"""
Local implementation of blob storage.

Blobs live in Django's default storage (FileSystemStorage in development,
InMemoryStorage in tests). Clients upload through this server:

1. request_upload_target() signs the new reference into an expiring token
   and returns /api/v1/media/uploads/<token>/
2. The client PUTs the bytes there; receive_upload() verifies the token and
   writes the blob
3. A token is single-use: once the blob exists, replays are rejected
"""

from __future__ import annotations

import logging

from django.core import signing
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.urls import reverse

from core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from media.services.blob_storage.base import BlobStorageBase, UploadTarget

logger = logging.getLogger(__name__)

UPLOAD_TOKEN_SALT = "media.blob_storage.upload"


class LocalBlobStorage(BlobStorageBase):
    """Blob storage on the Django default storage with server-side uploads."""

    def request_upload_target(self, content_type: str | None = None) -> UploadTarget:
        reference = self.new_reference()
        token = signing.dumps(
            {"ref": reference, "ct": content_type or ""},
            salt=UPLOAD_TOKEN_SALT,
        )
        return UploadTarget(
            reference=reference,
            upload_url=reverse("media:blob-upload", kwargs={"token": token}),
            method="PUT",
            direct=False,
            expires_in=self.upload_url_expiry,
        )

    def receive_upload(self, token: str, data: bytes) -> str:
        """
        Store uploaded bytes for a signed upload token.

        Args:
            token: Token from the upload URL
            data: Raw request body

        Returns:
            The blob reference the bytes were stored under.

        Raises:
            ValidationError: Token invalid, expired or already used, or
                the body is empty
        """
        try:
            payload = signing.loads(
                token,
                salt=UPLOAD_TOKEN_SALT,
                max_age=self.upload_url_expiry,
            )
        except signing.SignatureExpired as e:
            raise ValidationError("Upload URL has expired", error_code="UPLOAD_EXPIRED") from e
        except signing.BadSignature as e:
            raise ValidationError("Invalid upload URL", error_code="INVALID_UPLOAD_TOKEN") from e

        reference = payload["ref"]
        if not self.is_reference(reference):
            raise ValidationError("Invalid upload URL", error_code="INVALID_UPLOAD_TOKEN")

        if not data:
            raise ValidationError("Upload body is empty", details={"reference": reference})

        if default_storage.exists(reference):
            raise ValidationError(
                "Upload URL has already been used",
                error_code="UPLOAD_ALREADY_USED",
                details={"reference": reference},
            )

        try:
            stored_name = default_storage.save(reference, ContentFile(data))
        except OSError as e:
            raise ExternalServiceError(
                "Failed to store upload",
                details={"reference": reference, "original_error": str(e)},
            ) from e

        logger.info(f"Stored blob {stored_name} ({len(data)} bytes)")
        return stored_name

    def resolve_to_url(self, reference: str) -> str:
        return default_storage.url(reference)

    def exists(self, reference: str) -> bool:
        return default_storage.exists(reference)

    def delete(self, reference: str) -> None:
        if not self.is_reference(reference) or not default_storage.exists(reference):
            raise NotFoundError("Blob not found", details={"reference": reference})

        try:
            default_storage.delete(reference)
        except OSError as e:
            raise ExternalServiceError(
                "Blob deletion failed",
                details={"reference": reference, "original_error": str(e)},
            ) from e
