"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on conversations, participants, and messages.

Services:
    ConversationService: Conversation lifecycle (create-or-get, kick, delete, members)
    MessageService: Message operations (append, latest, list, cascade delete)
    ConversationListService: The caller's enriched conversation list

Design Principles:
    - Services are stateless (use class methods)
    - Caller identity is an explicit parameter, never read from ambient state
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions
    - Blob storage is injectable (defaults to get_blob_storage())

Usage:
    from chat.services import ConversationService, MessageService

    # Create or get a direct conversation
    result = ConversationService.create_or_get(
        identity, participant_ids=[me.id, other.id], is_group=False
    )
    if result.success:
        conversation = result.data.conversation

    # Send a message
    result = MessageService.append(
        identity,
        conversation_id=conversation.id,
        message_type="text",
        content="Hello!",
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction

from core.exceptions import BaseApplicationError, ExternalServiceError
from core.services import BaseService, ErrorCode, ServiceResult
from chat.constants import MESSAGE_CONFIG
from chat.models import (
    Conversation,
    DirectConversationPair,
    Message,
    MessageType,
    Participant,
)
from media.services.blob_storage import get_blob_storage
from users.models import User
from users.services import UserService

if TYPE_CHECKING:
    from typing import Any

    from django.db.models import QuerySet

    from media.services.blob_storage import BlobStorageBase
    from users.identity import Identity


@dataclass
class CreateOrGetResult:
    """
    Outcome of ConversationService.create_or_get.

    Attributes:
        conversation: The new or existing conversation
        created: False when an existing direct conversation was returned
    """

    conversation: Conversation
    created: bool


@dataclass
class DeletionSummary:
    """
    Outcome of a cascade delete.

    Attributes:
        conversation_id: Id of the deleted conversation
        messages_deleted: Message records removed
        blobs_deleted: Media blobs removed from storage
        blob_failures: Media blobs that could not be removed (logged, skipped)
    """

    conversation_id: int
    messages_deleted: int = 0
    blobs_deleted: int = 0
    blob_failures: int = 0


def _caller_user(identity: Identity) -> User | None:
    return UserService.get_by_token(identity.token_identifier)


class ConversationService(BaseService):
    """
    Service for conversation lifecycle operations.

    Methods:
        create_or_get: Create a conversation, or return the existing direct one
        kick_participant: Remove a user from a conversation
        delete_conversation: Delete a conversation with its messages and blobs
        list_member_users: Users in a conversation, in participant order
    """

    @classmethod
    def create_or_get(
        cls,
        identity: Identity | None,
        participant_ids: list[int],
        is_group: bool,
        group_name: str | None = None,
        group_image: str | None = None,
        admin_id: int | None = None,
        blob_storage: BlobStorageBase | None = None,
    ) -> ServiceResult[CreateOrGetResult]:
        """
        Create a conversation, or return the existing direct conversation.

        Direct conversations are unique per unordered user pair: (a, b) and
        (b, a) resolve to the same conversation. Group conversations are
        always created.

        Implementation:
            1. Validate participant ids (non-empty, distinct, two for direct)
            2. Check that every participant and the admin exist
            3. Direct: look up DirectConversationPair by canonical order
            4. Resolve the group image reference to a display URL
            5. Create conversation, participants and pair in one transaction;
               a concurrent insert of the same pair loses on the unique
               constraint and returns the winner's conversation

        Args:
            identity: Caller identity
            participant_ids: User ids, in display order
            is_group: Whether to create a group conversation
            group_name: Group display name
            group_image: Blob reference of an uploaded group image
            admin_id: Group administrator user id
            blob_storage: Storage backend (defaults to get_blob_storage())

        Error codes:
            UNAUTHENTICATED: No identity presented
            VALIDATION_ERROR: Bad participant list or group image reference
            NOT_FOUND: A participant or the admin does not exist
            DEPENDENCY_FAILURE: Group image could not be resolved
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        participant_ids = list(participant_ids or [])
        if not participant_ids:
            return ServiceResult.failure(
                "At least one participant is required",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"participants": ["This list may not be empty."]},
            )
        if len(set(participant_ids)) != len(participant_ids):
            return ServiceResult.failure(
                "Participants must be distinct",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"participants": ["Duplicate entries are not allowed."]},
            )
        if not is_group and len(participant_ids) != 2:
            return ServiceResult.failure(
                "A direct conversation needs exactly two participants",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"participants": ["Expected exactly two entries."]},
            )

        users = User.objects.in_bulk(participant_ids)
        missing = [pid for pid in participant_ids if pid not in users]
        if missing:
            return ServiceResult.failure(
                f"Users not found: {', '.join(str(pid) for pid in missing)}",
                ErrorCode.NOT_FOUND,
            )

        admin = None
        if admin_id is not None:
            admin = users.get(admin_id) or User.objects.filter(id=admin_id).first()
            if admin is None:
                return ServiceResult.failure("Admin user not found", ErrorCode.NOT_FOUND)

        if not is_group:
            existing = cls._find_direct(*participant_ids)
            if existing is not None:
                cls.get_logger().debug(
                    f"Found existing direct conversation {existing.id} "
                    f"between users {participant_ids[0]} and {participant_ids[1]}"
                )
                return ServiceResult.success(
                    CreateOrGetResult(conversation=existing, created=False)
                )

        group_image_url = None
        if group_image:
            resolved = cls._resolve_group_image(
                group_image, blob_storage or get_blob_storage()
            )
            if not resolved.success:
                return resolved
            group_image_url = resolved.data

        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    is_group=is_group,
                    group_name=group_name,
                    group_image=group_image_url,
                    admin=admin,
                )
                Participant.objects.bulk_create(
                    [
                        Participant(conversation=conversation, user=users[pid], position=i)
                        for i, pid in enumerate(participant_ids)
                    ]
                )
                if not is_group:
                    lower, higher = DirectConversationPair.canonical(*participant_ids)
                    DirectConversationPair.objects.create(
                        conversation=conversation,
                        user_lower_id=lower,
                        user_higher_id=higher,
                    )
        except IntegrityError:
            if is_group:
                raise
            existing = cls._find_direct(*participant_ids)
            if existing is None:
                raise
            cls.get_logger().info(
                f"Lost direct conversation race for users {participant_ids}, "
                f"returning {existing.id}"
            )
            return ServiceResult.success(
                CreateOrGetResult(conversation=existing, created=False)
            )

        cls.get_logger().info(
            f"Created {'group' if is_group else 'direct'} conversation "
            f"{conversation.id} with participants {participant_ids}"
        )

        return ServiceResult.success(
            CreateOrGetResult(conversation=conversation, created=True)
        )

    @classmethod
    def _find_direct(cls, first_id: int, second_id: int) -> Conversation | None:
        lower, higher = DirectConversationPair.canonical(first_id, second_id)
        pair = (
            DirectConversationPair.objects.select_related("conversation")
            .filter(user_lower_id=lower, user_higher_id=higher)
            .first()
        )
        return pair.conversation if pair else None

    @classmethod
    def _resolve_group_image(
        cls,
        reference: str,
        storage: BlobStorageBase,
    ) -> ServiceResult[str]:
        if not storage.is_reference(reference):
            return ServiceResult.failure(
                "Group image must be an uploaded blob reference",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"group_image": ["Not a blob reference."]},
            )
        try:
            if not storage.exists(reference):
                return ServiceResult.failure(
                    "Group image has not been uploaded",
                    error_code=ErrorCode.VALIDATION_ERROR,
                    errors={"group_image": ["No uploaded blob for this reference."]},
                )
            return ServiceResult.success(storage.resolve_to_url(reference))
        except ExternalServiceError as e:
            cls.get_logger().error(f"Group image resolution failed for {reference}: {e}")
            return ServiceResult.failure(
                "Could not resolve group image", ErrorCode.DEPENDENCY_FAILURE
            )

    @classmethod
    def kick_participant(
        cls,
        identity: Identity | None,
        conversation_id: int,
        user_id: int,
    ) -> ServiceResult[Conversation]:
        """
        Remove a user from a conversation's participant list.

        Removing a user who is not a participant is a no-op. Removing a
        participant of a direct conversation also drops its pair record, so
        the two users can start a new direct conversation later.

        Error codes:
            UNAUTHENTICATED: No identity presented
            NOT_FOUND: Conversation does not exist
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return ServiceResult.failure("Conversation not found", ErrorCode.NOT_FOUND)

        with cls.atomic():
            removed, _ = Participant.objects.filter(
                conversation=conversation, user_id=user_id
            ).delete()
            if removed and not conversation.is_group:
                DirectConversationPair.objects.filter(conversation=conversation).delete()

        if removed:
            cls.get_logger().info(
                f"Removed user {user_id} from conversation {conversation.id}"
            )

        return ServiceResult.success(conversation)

    @classmethod
    def delete_conversation(
        cls,
        identity: Identity | None,
        conversation_id: int,
        blob_storage: BlobStorageBase | None = None,
    ) -> ServiceResult[DeletionSummary]:
        """
        Delete a conversation together with all of its messages.

        Media blobs are deleted best effort: a blob that cannot be deleted
        is logged and skipped, and never blocks the deletion of its message
        or the conversation.

        Error codes:
            UNAUTHENTICATED: No identity presented
            NOT_FOUND: Conversation does not exist
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return ServiceResult.failure("Conversation not found", ErrorCode.NOT_FOUND)

        summary = MessageService.delete_all_for(
            conversation.id, blob_storage or get_blob_storage()
        )
        conversation.delete()

        cls.get_logger().info(
            f"Deleted conversation {summary.conversation_id}: "
            f"{summary.messages_deleted} messages, {summary.blobs_deleted} blobs, "
            f"{summary.blob_failures} blob failures"
        )

        return ServiceResult.success(summary)

    @classmethod
    def list_member_users(
        cls,
        identity: Identity | None,
        conversation_id: int,
    ) -> ServiceResult[list[User]]:
        """
        List the users of a conversation in participant order.

        Anonymous callers and missing conversations get an empty list.
        """
        if identity is None:
            return ServiceResult.success([])

        participants = (
            Participant.objects.filter(conversation_id=conversation_id)
            .select_related("user")
            .order_by("position", "id")
        )
        return ServiceResult.success([p.user for p in participants])


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        append: Send a message of any content type
        latest_for: Newest message of a conversation
        list_for: Conversation messages, oldest first
        delete_all_for: Cascade helper for conversation deletion
    """

    @classmethod
    def append(
        cls,
        identity: Identity | None,
        conversation_id: int,
        message_type: str,
        content: str,
        file_name: str | None = None,
        blob_storage: BlobStorageBase | None = None,
    ) -> ServiceResult[Message]:
        """
        Append a message to a conversation.

        Text content is stored inline. Every other type carries the blob
        reference of an already uploaded file.

        Args:
            identity: Caller identity (the sender)
            conversation_id: Target conversation
            message_type: One of MessageType values
            content: Text, or blob reference for media types
            file_name: Original file name (optional)
            blob_storage: Storage backend (defaults to get_blob_storage())

        Error codes:
            UNAUTHENTICATED: No identity presented
            VALIDATION_ERROR: Unknown type, bad text, or missing blob
            NOT_FOUND: Caller has no user record, or conversation missing
            NOT_PARTICIPANT: Caller is not in the conversation
            DEPENDENCY_FAILURE: Blob storage unavailable
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        if message_type not in MessageType.values:
            return ServiceResult.failure(
                f"Unsupported message type: {message_type}",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"message_type": [f"Must be one of: {', '.join(MessageType.values)}."]},
            )

        if file_name is not None and len(file_name) > MESSAGE_CONFIG.MAX_FILE_NAME_LENGTH:
            return ServiceResult.failure(
                "File name is too long",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"file_name": [
                    f"Ensure this field has no more than "
                    f"{MESSAGE_CONFIG.MAX_FILE_NAME_LENGTH} characters."
                ]},
            )

        sender = _caller_user(identity)
        if sender is None:
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return ServiceResult.failure("Conversation not found", ErrorCode.NOT_FOUND)

        if not Participant.objects.filter(conversation=conversation, user=sender).exists():
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                ErrorCode.NOT_PARTICIPANT,
            )

        if message_type == MessageType.TEXT:
            content_check = cls._validate_text(content)
        else:
            content_check = cls._validate_blob(content, blob_storage or get_blob_storage())
        if not content_check.success:
            return content_check

        message = Message.objects.create(
            conversation=conversation,
            sender=sender,
            message_type=message_type,
            content=content_check.data,
            file_name=file_name,
        )

        cls.get_logger().debug(
            f"User {sender.id} sent {message_type} message {message.id} "
            f"to conversation {conversation.id}"
        )

        return ServiceResult.success(message)

    @classmethod
    def _validate_text(cls, content: str) -> ServiceResult[str]:
        if not isinstance(content, str) or not content.strip():
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"content": ["This field may not be blank."]},
            )
        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message exceeds {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"content": ["Message is too long."]},
            )
        return ServiceResult.success(content)

    @classmethod
    def _validate_blob(cls, reference: str, storage: BlobStorageBase) -> ServiceResult[str]:
        if not storage.is_reference(reference):
            return ServiceResult.failure(
                "Content must be an uploaded blob reference",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"content": ["Not a blob reference."]},
            )
        try:
            uploaded = storage.exists(reference)
        except ExternalServiceError as e:
            cls.get_logger().error(f"Blob existence check failed for {reference}: {e}")
            return ServiceResult.failure(
                "Blob storage is unavailable", ErrorCode.DEPENDENCY_FAILURE
            )
        if not uploaded:
            return ServiceResult.failure(
                "Blob has not been uploaded",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"content": ["No uploaded blob for this reference."]},
            )
        return ServiceResult.success(reference)

    @classmethod
    def latest_for(cls, conversation_id: int) -> ServiceResult[Message | None]:
        """Return the newest message of a conversation, or None."""
        message = (
            Message.objects.filter(conversation_id=conversation_id)
            .select_related("sender")
            .order_by("-created_at", "-id")
            .first()
        )
        return ServiceResult.success(message)

    @classmethod
    def list_for(
        cls,
        identity: Identity | None,
        conversation_id: int,
    ) -> ServiceResult[QuerySet[Message]]:
        """
        List a conversation's messages, oldest first.

        Error codes:
            UNAUTHENTICATED: No identity presented
            NOT_FOUND: Caller has no user record, or conversation missing
            NOT_PARTICIPANT: Caller is not in the conversation
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        caller = _caller_user(identity)
        if caller is None:
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return ServiceResult.failure("Conversation not found", ErrorCode.NOT_FOUND)

        if not Participant.objects.filter(conversation=conversation, user=caller).exists():
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                ErrorCode.NOT_PARTICIPANT,
            )

        messages = (
            Message.objects.filter(conversation=conversation)
            .select_related("sender")
            .order_by("created_at", "id")
        )
        return ServiceResult.success(messages)

    @classmethod
    def delete_all_for(
        cls,
        conversation_id: int,
        blob_storage: BlobStorageBase,
    ) -> DeletionSummary:
        """
        Delete every message of a conversation, media blobs first.

        Only called from ConversationService.delete_conversation. Each
        message is handled on its own: a failed blob delete is logged with
        the message id, reference and content type, then the message record
        is deleted anyway.
        """
        summary = DeletionSummary(conversation_id=conversation_id)

        for message in Message.objects.filter(conversation_id=conversation_id).iterator():
            if not message.is_text_message:
                try:
                    blob_storage.delete(message.content)
                    summary.blobs_deleted += 1
                except BaseApplicationError as e:
                    summary.blob_failures += 1
                    cls.get_logger().warning(
                        f"Failed to delete blob for message {message.id} "
                        f"(reference={message.content!r}, type={message.message_type}): {e}"
                    )
                except Exception as e:
                    summary.blob_failures += 1
                    cls.get_logger().exception(
                        f"Unexpected error deleting blob for message {message.id} "
                        f"(reference={message.content!r}, type={message.message_type}): {e}"
                    )
            message.delete()
            summary.messages_deleted += 1

        return summary


class ConversationListService(BaseService):
    """Assembles the caller's conversation list for the sidebar."""

    COUNTERPART_FIELDS = ("id", "name", "email", "image", "is_online")

    @classmethod
    def my_conversations(
        cls,
        identity: Identity | None,
    ) -> ServiceResult[list[dict[str, Any]]]:
        """
        List the caller's conversations, enriched for display.

        Each entry is built in three layers, later layers winning:
            1. Direct conversations: the other participant's id, name,
               email, image and is_online
            2. The conversation's own fields (so "id" is always the
               conversation id)
            3. last_message: newest Message, or None

        Conversations are returned in creation order.

        Error codes:
            UNAUTHENTICATED: No identity presented
            NOT_FOUND: Caller has no user record
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        caller = _caller_user(identity)
        if caller is None:
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

        conversations = (
            Conversation.objects.filter(participants__user=caller)
            .prefetch_related("participants__user")
            .order_by("created_at", "id")
            .distinct()
        )

        entries = []
        for conversation in conversations:
            participants = list(conversation.participants.all())
            entry: dict[str, Any] = {}

            if not conversation.is_group:
                counterpart = next(
                    (p.user for p in participants if p.user_id != caller.id), None
                )
                if counterpart is not None:
                    entry.update(
                        {field: getattr(counterpart, field) for field in cls.COUNTERPART_FIELDS}
                    )

            entry.update(
                {
                    "id": conversation.id,
                    "participants": [p.user_id for p in participants],
                    "is_group": conversation.is_group,
                    "group_name": conversation.group_name,
                    "group_image": conversation.group_image,
                    "admin": conversation.admin_id,
                    "created_at": conversation.created_at,
                }
            )
            entry["last_message"] = MessageService.latest_for(conversation.id).data
            entries.append(entry)

        return ServiceResult.success(entries)
