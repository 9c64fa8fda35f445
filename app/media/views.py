"""
API views for blob uploads.

Provides:
- UploadTargetView: Issue a short-lived upload target for a new blob
- BlobUploadView: Receive the bytes for a local upload target
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ExternalServiceError, ValidationError
from core.views import ERROR_STATUS_CODES
from media.serializers import UploadTargetRequestSerializer, UploadTargetSerializer
from media.services.blob_storage import get_blob_storage
from media.services.blob_storage.local import LocalBlobStorage

logger = logging.getLogger(__name__)


class UploadTargetView(APIView):
    """
    Issue an upload target.

    POST /api/v1/media/upload-url/

    Authentication:
        Requires a valid identity token.

    Flow:
        1. Client requests a target and receives {reference, upload_url, ...}
        2. Client PUTs the file bytes to upload_url
        3. Client sends reference as message content or group image
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="request_upload_target",
        summary="Request upload URL",
        request=UploadTargetRequestSerializer,
        responses={
            200: UploadTargetSerializer,
            502: OpenApiResponse(description="Storage backend unavailable"),
        },
        tags=["Media - Upload"],
    )
    def post(self, request):
        serializer = UploadTargetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            target = get_blob_storage().request_upload_target(
                content_type=serializer.validated_data.get("content_type") or None
            )
        except ExternalServiceError as e:
            return Response(
                e.to_dict(),
                status=ERROR_STATUS_CODES[e.error_code],
            )

        if not target.direct:
            target.upload_url = request.build_absolute_uri(target.upload_url)

        return Response(UploadTargetSerializer(target).data)


class BlobUploadView(APIView):
    """
    Receive a blob for a local upload target.

    PUT /api/v1/media/uploads/{token}/
        Upload raw binary data.

    Only used with the local storage backend. The signed token in the URL
    is the authorization; it expires and can be used once.
    """

    permission_classes = [AllowAny]
    authentication_classes = []  # Signed-token authorization

    @extend_schema(
        operation_id="upload_blob",
        summary="Upload blob",
        request={"application/octet-stream": {"type": "string", "format": "binary"}},
        responses={
            201: OpenApiResponse(description="Blob stored"),
            400: OpenApiResponse(description="Invalid, expired or used token, or empty body"),
            404: OpenApiResponse(description="Local uploads are disabled"),
        },
        tags=["Media - Upload"],
    )
    def put(self, request, token):
        storage = get_blob_storage()
        if not isinstance(storage, LocalBlobStorage):
            return Response(
                {"error": "Uploads go directly to object storage"},
                status=status.HTTP_404_NOT_FOUND,
            )

        try:
            reference = storage.receive_upload(token, request.body)
        except ValidationError as e:
            logger.info(f"Rejected blob upload: {e}")
            return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)
        except ExternalServiceError as e:
            return Response(e.to_dict(), status=status.HTTP_502_BAD_GATEWAY)

        return Response({"reference": reference}, status=status.HTTP_201_CREATED)
