"""
Test fixtures for the media app.

Provides:
- API clients (anonymous and identity-authenticated)
- Local and S3 blob storage backends (S3 client mocked)
"""

from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient

from media.services.blob_storage.local import LocalBlobStorage
from media.services.blob_storage.s3 import S3BlobStorage
from users.tests.factories import UserFactory, issue_identity_token


@pytest.fixture
def api_client() -> APIClient:
    """Return unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(db) -> APIClient:
    """Return API client authenticated with an identity token."""
    user = UserFactory()
    client = APIClient()
    client.credentials(
        HTTP_AUTHORIZATION=f"Bearer {issue_identity_token(user.token_identifier)}"
    )
    return client


@pytest.fixture
def local_storage() -> LocalBlobStorage:
    return LocalBlobStorage()


@pytest.fixture
def s3_client():
    """Mocked boto3 S3 client."""
    client = MagicMock()
    client.generate_presigned_url.return_value = (
        "https://chat-bucket.s3.amazonaws.com/presigned?X-Amz-Signature=abc"
    )
    with patch("media.services.blob_storage.s3.boto3") as mock_boto3:
        mock_boto3.client.return_value = client
        yield client


@pytest.fixture
def s3_storage(s3_client) -> S3BlobStorage:
    return S3BlobStorage(bucket_name="chat-bucket")
