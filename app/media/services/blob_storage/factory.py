"""
Factory function for blob storage backend selection.

Picks the backend from the configured default storage: S3 when
STORAGES["default"] is django-storages S3Storage, local otherwise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.files.storage import default_storage

if TYPE_CHECKING:
    from media.services.blob_storage.base import BlobStorageBase


def is_s3_storage() -> bool:
    """
    Check if the default storage backend is S3.

    Detects S3Storage by checking for the 'bucket' attribute, which is
    present on S3 storage backends but not on local or in-memory storage.
    """
    return hasattr(default_storage, "bucket")


def get_blob_storage() -> "BlobStorageBase":
    """
    Get the blob storage backend for the current default storage.

    Returns:
        S3BlobStorage when the default storage is S3, LocalBlobStorage otherwise

    Usage:
        storage = get_blob_storage()
        if storage.exists(reference):
            url = storage.resolve_to_url(reference)
    """
    if is_s3_storage():
        from media.services.blob_storage.s3 import S3BlobStorage

        return S3BlobStorage()

    from media.services.blob_storage.local import LocalBlobStorage

    return LocalBlobStorage()
