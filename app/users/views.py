"""
User directory views.

This module provides API views for:
- The caller's own record (read, ensure, profile update)
- Duplicate reconciliation for the caller's identity token
- The user picker list (everyone but the caller)

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (UserService)
    - webhooks.py: Identity provider callbacks
    - urls.py: URL routing

Endpoints:
    GET   /api/v1/users/             - Every user except the caller
    GET   /api/v1/users/me/          - Caller's record ({"user": null} if none)
    POST  /api/v1/users/me/          - Create the caller's record if absent
    PATCH /api/v1/users/me/          - Update name and/or avatar
    POST  /api/v1/users/me/reconcile/ - Collapse duplicate records
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema, inline_serializer
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import failure_response
from users.authentication import get_identity
from users.serializers import (
    ProfileUpdateSerializer,
    ReconciliationResultSerializer,
    UserSerializer,
)
from users.services import UserService


class CurrentUserView(APIView):
    """
    API view for the caller's own user record.

    GET: Current record, or {"user": null} (anonymous callers included)
    POST: Ensure the record exists (idempotent)
    PATCH: Update display name and/or avatar

    URL: /api/v1/users/me/
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        summary="Get current user",
        description="Returns the caller's record, or null when none exists.",
        tags=["Users"],
        responses={
            200: inline_serializer(
                name="CurrentUserResponse",
                fields={"user": UserSerializer(allow_null=True)},
            )
        },
    )
    def get(self, request):
        result = UserService.get_current_user(get_identity(request))
        user = result.data
        return Response({"user": UserSerializer(user).data if user else None})

    @extend_schema(
        summary="Ensure current user exists",
        description=(
            "Creates the caller's record from the identity claims on first call. "
            "Later calls return the existing record unchanged."
        ),
        tags=["Users"],
        request=None,
        responses={200: UserSerializer, 401: OpenApiResponse(description="No identity")},
    )
    def post(self, request):
        result = UserService.ensure_user(get_identity(request))
        if not result.success:
            return failure_response(result)
        return Response(UserSerializer(result.data).data)

    @extend_schema(
        summary="Update profile",
        tags=["Users"],
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
    )
    def patch(self, request):
        """
        Partially update the caller's profile.

        Request body:
            {
                "name": "Jane",                    // Optional
                "image": "https://cdn/avatar.png"  // Optional
            }
        """
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        identity = get_identity(request)
        result = UserService.update_profile(
            identity.token_identifier,
            name=serializer.validated_data.get("name"),
            image=serializer.validated_data.get("image"),
        )
        if not result.success:
            return failure_response(result)
        return Response(UserSerializer(result.data).data)


class ReconcileDuplicatesView(APIView):
    """
    Collapse the caller's duplicate user records into the newest one.

    URL: /api/v1/users/me/reconcile/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Reconcile duplicate user records",
        tags=["Users"],
        request=None,
        responses={200: ReconciliationResultSerializer},
    )
    def post(self, request):
        result = UserService.reconcile_duplicates(get_identity(request))
        if not result.success:
            return failure_response(result)
        return Response(ReconciliationResultSerializer(result.data).data)


class UserListView(APIView):
    """
    List every user except the caller (conversation picker).

    URL: /api/v1/users/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List other users",
        tags=["Users"],
        responses={200: UserSerializer(many=True)},
    )
    def get(self, request):
        result = UserService.list_other_users(get_identity(request))
        if not result.success:
            return failure_response(result)
        return Response(UserSerializer(result.data, many=True).data, status=status.HTTP_200_OK)
