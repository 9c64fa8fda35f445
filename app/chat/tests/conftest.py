"""
Test configuration and fixtures for chat tests.

This module provides:
- Users and their identities (alice, bob, carol)
- Direct and group conversation fixtures
- API clients authenticated with identity tokens
- Blob storage helpers for media messages

Usage:
    def test_example(direct_conversation, alice_client):
        response = alice_client.get(
            f"/api/v1/chat/conversations/{direct_conversation.id}/messages/"
        )
        assert response.status_code == 200
"""

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from rest_framework.test import APIClient

from chat.tests.factories import make_direct_conversation, make_group_conversation
from media.services.blob_storage.local import LocalBlobStorage
from users.tests.factories import UserFactory, identity_for, issue_identity_token


def client_for(user):
    client = APIClient()
    client.credentials(
        HTTP_AUTHORIZATION=f"Bearer {issue_identity_token(user.token_identifier)}"
    )
    return client


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(name="Alice", email="alice@example.com", is_online=True)


@pytest.fixture
def bob(db):
    return UserFactory(name="Bob", email="bob@example.com")


@pytest.fixture
def carol(db):
    return UserFactory(name="Carol", email="carol@example.com")


@pytest.fixture
def alice_identity(alice):
    return identity_for(alice)


@pytest.fixture
def bob_identity(bob):
    return identity_for(bob)


@pytest.fixture
def carol_identity(carol):
    return identity_for(carol)


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def direct_conversation(alice, bob):
    """Direct conversation between alice and bob."""
    return make_direct_conversation(alice, bob)


@pytest.fixture
def group_conversation(alice, bob, carol):
    """Group conversation of alice, bob and carol, administered by alice."""
    return make_group_conversation(alice, bob, carol, name="Weekend", admin=alice)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def alice_client(alice):
    return client_for(alice)


@pytest.fixture
def carol_client(carol):
    return client_for(carol)


# =============================================================================
# Blob Storage Fixtures
# =============================================================================


@pytest.fixture
def blob_storage():
    """Local blob storage on the in-memory default storage."""
    return LocalBlobStorage()


@pytest.fixture
def uploaded_blob(blob_storage):
    """Reference of a blob that has been uploaded."""
    reference = blob_storage.new_reference()
    default_storage.save(reference, ContentFile(b"\x89PNG fake image bytes"))
    return reference
