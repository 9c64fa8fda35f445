"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Conversations and their nested actions

URL Structure:
    /api/v1/chat/conversations/                 GET, POST
    /api/v1/chat/conversations/{id}/            DELETE
    /api/v1/chat/conversations/{id}/kick/       POST
    /api/v1/chat/conversations/{id}/members/    GET
    /api/v1/chat/conversations/{id}/messages/   GET, POST

Design Decisions:
    - Views only parse input and render output; every rule lives in the
      service layer and comes back as a ServiceResult
    - The caller identity is taken from the request once and passed down
    - Failures map to HTTP statuses through core.views.failure_response
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema, inline_serializer
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from chat.serializers import (
    ConversationCreateSerializer,
    ConversationListItemSerializer,
    ConversationSerializer,
    KickParticipantSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)
from chat.services import ConversationListService, ConversationService, MessageService
from core.views import failure_response
from media.services.blob_storage import get_blob_storage
from users.authentication import get_identity
from users.serializers import UserSerializer


class ConversationViewSet(viewsets.ViewSet):
    """
    ViewSet for conversation operations.

    list:
        The caller's conversations, enriched with the other participant's
        profile (direct) and the last message.

    create:
        Create a conversation. For direct conversations an existing one
        for the same pair is returned (200) instead of creating (201).

    destroy:
        Delete a conversation with its messages and media blobs.

    kick:
        Remove a user from the participant list.

    members:
        Users of the conversation in participant order. Anonymous callers
        and unknown conversations get an empty list.

    messages:
        GET lists messages oldest first; POST sends one.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        """Return permissions based on action."""
        if self.action == "members":
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        summary="List my conversations",
        tags=["Chat - Conversations"],
        responses={200: ConversationListItemSerializer(many=True)},
    )
    def list(self, request):
        result = ConversationListService.my_conversations(get_identity(request))
        if not result.success:
            return failure_response(result)

        serializer = ConversationListItemSerializer(
            result.data,
            many=True,
            context={"request": request, "blob_storage": get_blob_storage()},
        )
        return Response(serializer.data)

    @extend_schema(
        summary="Create or get a conversation",
        tags=["Chat - Conversations"],
        request=ConversationCreateSerializer,
        responses={
            201: ConversationSerializer,
            200: OpenApiResponse(
                response=ConversationSerializer,
                description="Existing direct conversation",
            ),
        },
    )
    def create(self, request):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ConversationService.create_or_get(
            get_identity(request),
            participant_ids=data["participants"],
            is_group=data["is_group"],
            group_name=data.get("group_name") or None,
            group_image=data.get("group_image") or None,
            admin_id=data.get("admin"),
        )
        if not result.success:
            return failure_response(result)

        return Response(
            ConversationSerializer(result.data.conversation).data,
            status=status.HTTP_201_CREATED if result.data.created else status.HTTP_200_OK,
        )

    @extend_schema(
        summary="Delete a conversation",
        tags=["Chat - Conversations"],
        responses={
            200: inline_serializer(
                name="ConversationDeletionSummary",
                fields={
                    "success": serializers.BooleanField(),
                    "message": serializers.CharField(),
                    "conversation_id": serializers.IntegerField(),
                    "messages_deleted": serializers.IntegerField(),
                    "blobs_deleted": serializers.IntegerField(),
                    "blob_failures": serializers.IntegerField(),
                },
            )
        },
    )
    def destroy(self, request, pk=None):
        result = ConversationService.delete_conversation(get_identity(request), int(pk))
        if not result.success:
            return failure_response(result)

        summary = result.data
        return Response(
            {
                "success": True,
                "message": "Conversation and all messages deleted successfully",
                "conversation_id": summary.conversation_id,
                "messages_deleted": summary.messages_deleted,
                "blobs_deleted": summary.blobs_deleted,
                "blob_failures": summary.blob_failures,
            }
        )

    @extend_schema(
        summary="Remove a user from a conversation",
        tags=["Chat - Participants"],
        request=KickParticipantSerializer,
        responses={200: ConversationSerializer},
    )
    @action(detail=True, methods=["post"])
    def kick(self, request, pk=None):
        serializer = KickParticipantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationService.kick_participant(
            get_identity(request),
            int(pk),
            serializer.validated_data["user_id"],
        )
        if not result.success:
            return failure_response(result)
        return Response(ConversationSerializer(result.data).data)

    @extend_schema(
        summary="List conversation members",
        tags=["Chat - Participants"],
        responses={200: UserSerializer(many=True)},
    )
    @action(detail=True, methods=["get"])
    def members(self, request, pk=None):
        result = ConversationService.list_member_users(get_identity(request), int(pk))
        return Response(UserSerializer(result.data, many=True).data)

    @extend_schema(
        methods=["GET"],
        summary="List messages",
        tags=["Chat - Messages"],
        responses={200: MessageSerializer(many=True)},
    )
    @extend_schema(
        methods=["POST"],
        summary="Send a message",
        tags=["Chat - Messages"],
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
    )
    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        identity = get_identity(request)
        blob_storage = get_blob_storage()
        context = {"request": request, "blob_storage": blob_storage}

        if request.method == "GET":
            result = MessageService.list_for(identity, int(pk))
            if not result.success:
                return failure_response(result)
            return Response(MessageSerializer(result.data, many=True, context=context).data)

        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.append(
            identity,
            int(pk),
            message_type=data["message_type"],
            content=data["content"],
            file_name=data.get("file_name") or None,
            blob_storage=blob_storage,
        )
        if not result.success:
            return failure_response(result)

        return Response(
            MessageSerializer(result.data, context=context).data,
            status=status.HTTP_201_CREATED,
        )
