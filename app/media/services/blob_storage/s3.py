"""
S3 implementation of blob storage.

Clients upload directly to S3 with a presigned PUT URL; reads use
presigned GET URLs. Existence checks and deletes go through the S3 API.

All botocore failures are wrapped in ExternalServiceError.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.core.files.storage import default_storage

from core.exceptions import ExternalServiceError, NotFoundError
from media.services.blob_storage.base import BlobStorageBase, UploadTarget

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


class S3BlobStorage(BlobStorageBase):
    """Blob storage backed by an S3 bucket."""

    def __init__(self, bucket_name: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.bucket_name = bucket_name or getattr(default_storage, "bucket_name", None)
        self._s3_client = None

    @property
    def s3_client(self):
        """Get or create S3 client."""
        if self._s3_client is None:
            self._s3_client = boto3.client("s3")
        return self._s3_client

    def _error(self, message: str, reference: str, exc: Exception) -> ExternalServiceError:
        logger.error(f"{message}: {reference}: {exc}")
        return ExternalServiceError(
            message,
            details={"reference": reference, "original_error": str(exc)},
        )

    def request_upload_target(self, content_type: str | None = None) -> UploadTarget:
        reference = self.new_reference()
        params = {"Bucket": self.bucket_name, "Key": reference}
        headers = None
        if content_type:
            params["ContentType"] = content_type
            headers = {"Content-Type": content_type}

        try:
            url = self.s3_client.generate_presigned_url(
                "put_object",
                Params=params,
                ExpiresIn=self.upload_url_expiry,
            )
        except (BotoCoreError, ClientError) as e:
            raise self._error("Failed to generate upload URL", reference, e) from e

        return UploadTarget(
            reference=reference,
            upload_url=url,
            method="PUT",
            direct=True,
            expires_in=self.upload_url_expiry,
            headers=headers,
        )

    def resolve_to_url(self, reference: str) -> str:
        try:
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": reference},
                ExpiresIn=self.download_url_expiry,
            )
        except (BotoCoreError, ClientError) as e:
            raise self._error("Failed to generate download URL", reference, e) from e

    def exists(self, reference: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=reference)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                return False
            raise self._error("Failed to check blob", reference, e) from e
        except BotoCoreError as e:
            raise self._error("Failed to check blob", reference, e) from e
        return True

    def delete(self, reference: str) -> None:
        # S3 deletes of missing keys succeed silently
        if not self.is_reference(reference) or not self.exists(reference):
            raise NotFoundError("Blob not found", details={"reference": reference})

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=reference)
        except (BotoCoreError, ClientError) as e:
            raise self._error("Blob deletion failed", reference, e) from e
