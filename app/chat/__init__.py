"""
Chat app for real-time messaging.

This app handles:
- Conversations (direct and group)
- Message sending and history
- The enriched "my conversations" list
- Websocket presence

Related apps:
    - users: User model for participants and senders
    - media: Blob storage for media messages and group images

WebSocket Support:
    Uses Django Channels for presence.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import ConversationService, MessageService

    # Create or get a direct conversation
    result = ConversationService.create_or_get(
        identity,
        participant_ids=[me.id, other.id],
        is_group=False,
    )

    # Send message
    result = MessageService.append(
        identity,
        conversation_id=result.data.conversation.id,
        message_type="text",
        content="Hello!",
    )
"""
