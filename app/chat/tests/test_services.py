"""
Tests for the chat service layer.

This module tests:
- ConversationService: create-or-get, kick, cascade delete, members
- MessageService: append, latest, list
- ConversationListService: the caller's enriched conversation list

Test Organization:
    - Each service method has its own test class
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from django.core.files.storage import default_storage
from django.db import IntegrityError
from django.utils import timezone
from freezegun import freeze_time

from chat.models import Conversation, DirectConversationPair, Message, MessageType, Participant
from chat.services import (
    ConversationListService,
    ConversationService,
    MessageService,
)
from chat.tests.factories import MessageFactory, make_group_conversation
from core.exceptions import ExternalServiceError, NotFoundError
from core.services import ErrorCode
from media.services.blob_storage.local import LocalBlobStorage
from users.tests.factories import IdentityFactory, UserFactory


# =============================================================================
# ConversationService.create_or_get
# =============================================================================


class TestCreateOrGetDirect:
    """Direct conversations are unique per unordered user pair."""

    def test_creates_direct_conversation(self, alice, bob, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, bob.id], is_group=False
        )

        assert result.success is True
        assert result.data.created is True
        conversation = result.data.conversation
        assert conversation.is_group is False
        assert conversation.participant_ids() == [alice.id, bob.id]
        assert DirectConversationPair.objects.filter(conversation=conversation).exists()

    def test_returns_existing_for_same_pair(self, alice, bob, alice_identity):
        first = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, bob.id], is_group=False
        )
        second = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, bob.id], is_group=False
        )

        assert second.data.created is False
        assert second.data.conversation.id == first.data.conversation.id
        assert Conversation.objects.count() == 1

    def test_pair_order_does_not_matter(self, alice, bob, alice_identity, bob_identity):
        first = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, bob.id], is_group=False
        )
        second = ConversationService.create_or_get(
            bob_identity, participant_ids=[bob.id, alice.id], is_group=False
        )

        assert second.data.conversation.id == first.data.conversation.id

    def test_pair_is_stored_in_canonical_order(self, alice, bob, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[bob.id, alice.id], is_group=False
        )

        pair = result.data.conversation.direct_pair
        assert pair.user_lower_id == min(alice.id, bob.id)
        assert pair.user_higher_id == max(alice.id, bob.id)

    def test_direct_needs_exactly_two(self, alice, bob, carol, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, bob.id, carol.id], is_group=False
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert Conversation.objects.count() == 0

    def test_concurrent_insert_returns_winner(self, alice, bob, alice_identity, monkeypatch):
        winner = Conversation.objects.create(is_group=False)
        lookups = iter([None, winner])

        def losing_create(**kwargs):
            raise IntegrityError("duplicate pair")

        monkeypatch.setattr(
            ConversationService, "_find_direct", classmethod(lambda cls, a, b: next(lookups))
        )
        monkeypatch.setattr(DirectConversationPair.objects, "create", losing_create)

        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, bob.id], is_group=False
        )

        assert result.success is True
        assert result.data.created is False
        assert result.data.conversation == winner
        assert Conversation.objects.count() == 1


class TestCreateOrGetGroup:
    def test_creates_group_with_ordered_participants(self, alice, bob, carol, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity,
            participant_ids=[carol.id, alice.id, bob.id],
            is_group=True,
            group_name="Weekend",
            admin_id=alice.id,
        )

        assert result.data.created is True
        conversation = result.data.conversation
        assert conversation.is_group is True
        assert conversation.group_name == "Weekend"
        assert conversation.admin == alice
        assert conversation.participant_ids() == [carol.id, alice.id, bob.id]
        assert not DirectConversationPair.objects.exists()

    def test_same_members_create_separate_groups(self, alice, bob, alice_identity):
        for _ in range(2):
            ConversationService.create_or_get(
                alice_identity, participant_ids=[alice.id, bob.id], is_group=True
            )

        assert Conversation.objects.filter(is_group=True).count() == 2

    def test_group_image_reference_is_resolved(
        self, alice, bob, alice_identity, blob_storage, uploaded_blob
    ):
        result = ConversationService.create_or_get(
            alice_identity,
            participant_ids=[alice.id, bob.id],
            is_group=True,
            group_image=uploaded_blob,
            blob_storage=blob_storage,
        )

        assert result.data.conversation.group_image == blob_storage.resolve_to_url(uploaded_blob)

    def test_group_image_must_be_reference(self, alice, bob, alice_identity, blob_storage):
        result = ConversationService.create_or_get(
            alice_identity,
            participant_ids=[alice.id, bob.id],
            is_group=True,
            group_image="https://example.com/cat.png",
            blob_storage=blob_storage,
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert "group_image" in result.errors

    def test_group_image_must_be_uploaded(self, alice, bob, alice_identity, blob_storage):
        result = ConversationService.create_or_get(
            alice_identity,
            participant_ids=[alice.id, bob.id],
            is_group=True,
            group_image=blob_storage.new_reference(),
            blob_storage=blob_storage,
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_storage_failure_is_dependency_failure(self, alice, bob, alice_identity, blob_storage):
        storage = MagicMock()
        storage.is_reference.return_value = True
        storage.exists.side_effect = ExternalServiceError("S3 down")

        result = ConversationService.create_or_get(
            alice_identity,
            participant_ids=[alice.id, bob.id],
            is_group=True,
            group_image=blob_storage.new_reference(),
            blob_storage=storage,
        )

        assert result.error_code == ErrorCode.DEPENDENCY_FAILURE
        assert Conversation.objects.count() == 0


class TestCreateOrGetValidation:
    def test_anonymous_is_unauthenticated(self, alice, bob):
        result = ConversationService.create_or_get(
            None, participant_ids=[alice.id, bob.id], is_group=False
        )

        assert result.error_code == ErrorCode.UNAUTHENTICATED

    def test_empty_participants(self, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[], is_group=True
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_duplicate_participants(self, alice, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, alice.id], is_group=False
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_unknown_participant(self, alice, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity, participant_ids=[alice.id, 999999], is_group=False
        )

        assert result.error_code == ErrorCode.NOT_FOUND
        assert "999999" in result.error

    def test_unknown_admin(self, alice, bob, alice_identity):
        result = ConversationService.create_or_get(
            alice_identity,
            participant_ids=[alice.id, bob.id],
            is_group=True,
            admin_id=999999,
        )

        assert result.error_code == ErrorCode.NOT_FOUND


# =============================================================================
# ConversationService.kick_participant
# =============================================================================


class TestKickParticipant:
    def test_removes_participant(self, group_conversation, bob, alice_identity):
        result = ConversationService.kick_participant(
            alice_identity, group_conversation.id, bob.id
        )

        assert result.success is True
        assert bob.id not in group_conversation.participant_ids()

    def test_keeps_remaining_order(self, group_conversation, alice, bob, carol, alice_identity):
        ConversationService.kick_participant(alice_identity, group_conversation.id, bob.id)

        assert group_conversation.participant_ids() == [alice.id, carol.id]

    def test_non_participant_is_noop(self, group_conversation, alice_identity):
        stranger = UserFactory()

        result = ConversationService.kick_participant(
            alice_identity, group_conversation.id, stranger.id
        )

        assert result.success is True
        assert len(group_conversation.participant_ids()) == 3

    def test_direct_kick_drops_pair(self, direct_conversation, bob, alice_identity):
        ConversationService.kick_participant(alice_identity, direct_conversation.id, bob.id)

        assert not DirectConversationPair.objects.filter(
            conversation=direct_conversation
        ).exists()

    def test_unknown_conversation(self, alice, alice_identity):
        result = ConversationService.kick_participant(alice_identity, 999999, alice.id)

        assert result.error_code == ErrorCode.NOT_FOUND

    def test_anonymous_is_unauthenticated(self, group_conversation, bob):
        result = ConversationService.kick_participant(None, group_conversation.id, bob.id)

        assert result.error_code == ErrorCode.UNAUTHENTICATED
        assert bob.id in group_conversation.participant_ids()


# =============================================================================
# ConversationService.delete_conversation
# =============================================================================


class TestDeleteConversation:
    def test_deletes_conversation_and_messages(
        self, direct_conversation, alice, alice_identity, blob_storage
    ):
        MessageFactory.create_batch(3, conversation=direct_conversation, sender=alice)

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=blob_storage
        )

        assert result.success is True
        assert result.data.messages_deleted == 3
        assert not Conversation.objects.filter(id=direct_conversation.id).exists()
        assert not Message.objects.exists()
        assert not Participant.objects.exists()
        assert not DirectConversationPair.objects.exists()

    def test_deletes_media_blobs(
        self, direct_conversation, alice, alice_identity, blob_storage, uploaded_blob
    ):
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.IMAGE,
            content=uploaded_blob,
        )

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=blob_storage
        )

        assert result.data.blobs_deleted == 1
        assert result.data.blob_failures == 0
        assert not default_storage.exists(uploaded_blob)

    def test_missing_blob_does_not_block_deletion(
        self, direct_conversation, alice, alice_identity, blob_storage
    ):
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.FILE,
            content=blob_storage.new_reference(),
        )
        MessageFactory(conversation=direct_conversation, sender=alice)

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=blob_storage
        )

        assert result.success is True
        assert result.data.messages_deleted == 2
        assert result.data.blob_failures == 1
        assert not Message.objects.exists()

    def test_storage_outage_does_not_block_deletion(
        self, direct_conversation, alice, alice_identity, uploaded_blob
    ):
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.VIDEO,
            content=uploaded_blob,
        )
        storage = MagicMock()
        storage.delete.side_effect = ExternalServiceError("S3 down")

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=storage
        )

        assert result.success is True
        assert result.data.blob_failures == 1
        assert not Conversation.objects.filter(id=direct_conversation.id).exists()

    def test_text_messages_never_touch_storage(
        self, direct_conversation, alice, alice_identity
    ):
        MessageFactory(conversation=direct_conversation, sender=alice)
        storage = MagicMock()

        ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=storage
        )

        storage.delete.assert_not_called()

    @pytest.mark.parametrize(
        "content",
        ["", "not-a-reference", "../../etc/passwd", "chat-uploads/", "chat-uploads/../x"],
    )
    def test_malformed_reference_does_not_block_deletion(
        self, direct_conversation, alice, alice_identity, blob_storage, content
    ):
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.FILE,
            content=content,
        )
        MessageFactory(conversation=direct_conversation, sender=alice)

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=blob_storage
        )

        assert result.success is True
        assert result.data.messages_deleted == 2
        assert result.data.blob_failures == 1
        assert not Conversation.objects.filter(id=direct_conversation.id).exists()
        assert not Message.objects.exists()

    def test_empty_reference_on_filesystem_storage(
        self, direct_conversation, alice, alice_identity, settings, tmp_path
    ):
        settings.STORAGES = {
            **settings.STORAGES,
            "default": {
                "BACKEND": "django.core.files.storage.FileSystemStorage",
                "OPTIONS": {"location": str(tmp_path)},
            },
        }
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.FILE,
            content="",
        )

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=LocalBlobStorage()
        )

        assert result.success is True
        assert result.data.blob_failures == 1
        assert not Conversation.objects.filter(id=direct_conversation.id).exists()

    def test_unexpected_storage_error_does_not_block_deletion(
        self, direct_conversation, alice, alice_identity, uploaded_blob
    ):
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.AUDIO,
            content=uploaded_blob,
        )
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.IMAGE,
            content=uploaded_blob,
        )
        storage = MagicMock()
        storage.delete.side_effect = [RuntimeError("boom"), None]

        result = ConversationService.delete_conversation(
            alice_identity, direct_conversation.id, blob_storage=storage
        )

        assert result.success is True
        assert result.data.messages_deleted == 2
        assert result.data.blobs_deleted == 1
        assert result.data.blob_failures == 1
        assert not Conversation.objects.filter(id=direct_conversation.id).exists()

    def test_unknown_conversation(self, alice_identity):
        result = ConversationService.delete_conversation(alice_identity, 999999)

        assert result.error_code == ErrorCode.NOT_FOUND

    def test_anonymous_is_unauthenticated(self, direct_conversation):
        result = ConversationService.delete_conversation(None, direct_conversation.id)

        assert result.error_code == ErrorCode.UNAUTHENTICATED
        assert Conversation.objects.filter(id=direct_conversation.id).exists()


# =============================================================================
# ConversationService.list_member_users
# =============================================================================


class TestListMemberUsers:
    def test_returns_users_in_participant_order(
        self, group_conversation, alice, bob, carol, alice_identity
    ):
        result = ConversationService.list_member_users(alice_identity, group_conversation.id)

        assert result.data == [alice, bob, carol]

    def test_anonymous_gets_empty_list(self, group_conversation):
        result = ConversationService.list_member_users(None, group_conversation.id)

        assert result.success is True
        assert result.data == []

    def test_unknown_conversation_gets_empty_list(self, alice_identity):
        result = ConversationService.list_member_users(alice_identity, 999999)

        assert result.data == []


# =============================================================================
# MessageService.append
# =============================================================================


class TestAppendMessage:
    def test_appends_text_message(self, direct_conversation, alice, alice_identity):
        result = MessageService.append(
            alice_identity, direct_conversation.id, message_type="text", content="Hello!"
        )

        assert result.success is True
        message = result.data
        assert message.sender == alice
        assert message.conversation == direct_conversation
        assert message.content == "Hello!"
        assert message.message_type == MessageType.TEXT

    def test_appends_media_message(
        self, direct_conversation, alice_identity, blob_storage, uploaded_blob
    ):
        result = MessageService.append(
            alice_identity,
            direct_conversation.id,
            message_type="image",
            content=uploaded_blob,
            file_name="cat.png",
            blob_storage=blob_storage,
        )

        assert result.success is True
        assert result.data.content == uploaded_blob
        assert result.data.file_name == "cat.png"

    def test_unknown_type_is_rejected(self, direct_conversation, alice_identity):
        result = MessageService.append(
            alice_identity, direct_conversation.id, message_type="sticker", content="x"
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert "message_type" in result.errors

    def test_blank_text_is_rejected(self, direct_conversation, alice_identity):
        result = MessageService.append(
            alice_identity, direct_conversation.id, message_type="text", content="   "
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_oversized_text_is_rejected(self, direct_conversation, alice_identity):
        result = MessageService.append(
            alice_identity, direct_conversation.id, message_type="text", content="x" * 10001
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_long_file_name_is_rejected(self, direct_conversation, alice_identity):
        result = MessageService.append(
            alice_identity,
            direct_conversation.id,
            message_type="text",
            content="hi",
            file_name="a" * 256,
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_media_content_must_be_reference(
        self, direct_conversation, alice_identity, blob_storage
    ):
        result = MessageService.append(
            alice_identity,
            direct_conversation.id,
            message_type="file",
            content="not-a-reference",
            blob_storage=blob_storage,
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_media_blob_must_be_uploaded(
        self, direct_conversation, alice_identity, blob_storage
    ):
        result = MessageService.append(
            alice_identity,
            direct_conversation.id,
            message_type="audio",
            content=blob_storage.new_reference(),
            blob_storage=blob_storage,
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert not Message.objects.exists()

    def test_storage_outage_is_dependency_failure(
        self, direct_conversation, alice_identity, blob_storage
    ):
        storage = MagicMock()
        storage.is_reference.return_value = True
        storage.exists.side_effect = ExternalServiceError("S3 down")

        result = MessageService.append(
            alice_identity,
            direct_conversation.id,
            message_type="voice",
            content=blob_storage.new_reference(),
            blob_storage=storage,
        )

        assert result.error_code == ErrorCode.DEPENDENCY_FAILURE

    def test_non_participant_is_rejected(self, direct_conversation, carol_identity):
        result = MessageService.append(
            carol_identity, direct_conversation.id, message_type="text", content="Hi"
        )

        assert result.error_code == ErrorCode.NOT_PARTICIPANT
        assert not Message.objects.exists()

    def test_caller_without_record_is_not_found(self, direct_conversation):
        result = MessageService.append(
            IdentityFactory(), direct_conversation.id, message_type="text", content="Hi"
        )

        assert result.error_code == ErrorCode.NOT_FOUND

    def test_unknown_conversation(self, alice_identity):
        result = MessageService.append(
            alice_identity, 999999, message_type="text", content="Hi"
        )

        assert result.error_code == ErrorCode.NOT_FOUND

    def test_anonymous_is_unauthenticated(self, direct_conversation):
        result = MessageService.append(
            None, direct_conversation.id, message_type="text", content="Hi"
        )

        assert result.error_code == ErrorCode.UNAUTHENTICATED


# =============================================================================
# MessageService.latest_for / list_for
# =============================================================================


class TestLatestAndList:
    def test_latest_is_newest_message(self, direct_conversation, alice, bob):
        with freeze_time(timezone.now() - timedelta(minutes=5)):
            MessageFactory(conversation=direct_conversation, sender=alice, content="first")
        newest = MessageFactory(conversation=direct_conversation, sender=bob, content="second")

        assert MessageService.latest_for(direct_conversation.id).data == newest

    def test_latest_of_empty_conversation_is_none(self, direct_conversation):
        assert MessageService.latest_for(direct_conversation.id).data is None

    def test_list_is_oldest_first(self, direct_conversation, alice, bob, alice_identity):
        with freeze_time(timezone.now() - timedelta(minutes=5)):
            first = MessageFactory(conversation=direct_conversation, sender=alice)
        second = MessageFactory(conversation=direct_conversation, sender=bob)

        result = MessageService.list_for(alice_identity, direct_conversation.id)

        assert list(result.data) == [first, second]

    def test_list_requires_participation(self, direct_conversation, carol_identity):
        result = MessageService.list_for(carol_identity, direct_conversation.id)

        assert result.error_code == ErrorCode.NOT_PARTICIPANT


# =============================================================================
# ConversationListService.my_conversations
# =============================================================================


class TestMyConversations:
    def test_direct_entry_carries_counterpart_profile(
        self, direct_conversation, bob, alice_identity
    ):
        result = ConversationListService.my_conversations(alice_identity)

        assert result.success is True
        [entry] = result.data
        assert entry["id"] == direct_conversation.id
        assert entry["name"] == "Bob"
        assert entry["email"] == "bob@example.com"
        assert entry["image"] == bob.image
        assert entry["is_online"] is False
        assert entry["last_message"] is None

    def test_group_entry_has_no_counterpart_fields(
        self, group_conversation, alice_identity
    ):
        [entry] = ConversationListService.my_conversations(alice_identity).data

        assert entry["id"] == group_conversation.id
        assert entry["group_name"] == "Weekend"
        assert "name" not in entry
        assert "is_online" not in entry

    def test_includes_last_message(self, direct_conversation, alice, alice_identity):
        message = MessageFactory(conversation=direct_conversation, sender=alice)

        [entry] = ConversationListService.my_conversations(alice_identity).data

        assert entry["last_message"] == message

    def test_only_callers_conversations_in_creation_order(
        self, direct_conversation, group_conversation, alice, bob, carol, carol_identity
    ):
        make_group_conversation(alice, bob)
        later = make_group_conversation(carol, bob)

        result = ConversationListService.my_conversations(carol_identity)

        assert [entry["id"] for entry in result.data] == [group_conversation.id, later.id]

    def test_caller_without_record_is_not_found(self, db):
        result = ConversationListService.my_conversations(IdentityFactory())

        assert result.error_code == ErrorCode.NOT_FOUND

    def test_anonymous_is_unauthenticated(self, db):
        result = ConversationListService.my_conversations(None)

        assert result.error_code == ErrorCode.UNAUTHENTICATED


class TestDeleteAllFor:
    def test_counts_missing_blob_as_failure(self, direct_conversation, alice):
        MessageFactory(
            conversation=direct_conversation,
            sender=alice,
            message_type=MessageType.IMAGE,
            content="chat-uploads/" + "0" * 32,
        )
        storage = MagicMock()
        storage.delete.side_effect = NotFoundError("Blob not found")

        summary = MessageService.delete_all_for(direct_conversation.id, storage)

        assert summary.messages_deleted == 1
        assert summary.blob_failures == 1
        storage.delete.assert_called_once_with("chat-uploads/" + "0" * 32)
