"""
Base types and abstract base class for blob storage backends.

A blob reference is the opaque key a backend issues with an upload target
("<KEY_PREFIX>/<hex>"). Clients upload to the target, then hand the
reference to the API (message content, group image). References are
resolved to display URLs only when read.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass

from django.conf import settings


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class UploadTarget:
    """
    Information about where and how to upload a blob.

    Attributes:
        reference: Blob reference to send back to the API after uploading
        upload_url: URL to upload the bytes to
        method: HTTP method to use ('PUT')
        direct: True if client uploads directly to the object store (S3),
                False if upload goes through our server (local)
        expires_in: Seconds until the URL expires
        headers: Headers the client must send with the upload
    """

    reference: str
    upload_url: str
    method: str = "PUT"
    direct: bool = False
    expires_in: int | None = None
    headers: dict[str, str] | None = None


# =============================================================================
# Abstract Base Class
# =============================================================================


class BlobStorageBase(ABC):
    """
    Abstract base class for blob storage backends.

    Backend failures raise core.exceptions.ExternalServiceError; deleting a
    blob that does not exist raises core.exceptions.NotFoundError.
    """

    def __init__(
        self,
        key_prefix: str | None = None,
        upload_url_expiry: int | None = None,
        download_url_expiry: int | None = None,
    ) -> None:
        config = settings.BLOB_STORAGE
        self.key_prefix = (key_prefix or config["KEY_PREFIX"]).strip("/")
        self.upload_url_expiry = upload_url_expiry or config["UPLOAD_URL_EXPIRY_SECONDS"]
        self.download_url_expiry = (
            download_url_expiry or config["DOWNLOAD_URL_EXPIRY_SECONDS"]
        )

    def new_reference(self) -> str:
        """Generate a fresh, unguessable blob reference."""
        return f"{self.key_prefix}/{uuid.uuid4().hex}"

    def is_reference(self, value: object) -> bool:
        """
        Check whether a value is shaped like a reference this backend issues.

        Says nothing about whether the blob was actually uploaded; use
        exists() for that.
        """
        if not isinstance(value, str):
            return False
        prefix = f"{self.key_prefix}/"
        if not value.startswith(prefix):
            return False
        key = value[len(prefix):]
        return len(key) == 32 and all(c in "0123456789abcdef" for c in key)

    @abstractmethod
    def request_upload_target(self, content_type: str | None = None) -> UploadTarget:
        """
        Issue a short-lived upload target for a new blob.

        Args:
            content_type: MIME type the client will upload (optional)

        Returns:
            UploadTarget with the reference and where to send the bytes.
        """

    @abstractmethod
    def resolve_to_url(self, reference: str) -> str:
        """
        Resolve a reference to a URL clients can display or download.

        Does not check that the blob exists.
        """

    @abstractmethod
    def exists(self, reference: str) -> bool:
        """Check whether a blob has been uploaded for the reference."""

    @abstractmethod
    def delete(self, reference: str) -> None:
        """
        Delete the blob behind a reference.

        Raises:
            NotFoundError: No blob exists for the reference
            ExternalServiceError: The backend failed
        """
