"""
Blob storage for chat media and group images.

Provides a consistent interface for uploading, resolving, checking and
deleting blobs regardless of the configured storage backend:
- LocalBlobStorage: Django default storage, uploads go through this server
- S3BlobStorage: Presigned URLs for direct client uploads to S3

Usage:
    from media.services.blob_storage import get_blob_storage

    storage = get_blob_storage()
    target = storage.request_upload_target(content_type="image/png")
    # client PUTs the bytes to target.upload_url, then sends target.reference
"""

from media.services.blob_storage.base import BlobStorageBase, UploadTarget
from media.services.blob_storage.factory import get_blob_storage, is_s3_storage

__all__ = [
    "BlobStorageBase",
    "UploadTarget",
    "get_blob_storage",
    "is_s3_storage",
]
