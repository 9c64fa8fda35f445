"""
Serializers for media upload endpoints.
"""

from rest_framework import serializers


class UploadTargetRequestSerializer(serializers.Serializer):
    """Request body for an upload target."""

    content_type = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=255,
        help_text="MIME type of the file that will be uploaded",
    )


class UploadTargetSerializer(serializers.Serializer):
    """
    Serializer for blob upload target information.

    Tells the client where and how to upload, and which reference to send
    back to the chat API afterwards.
    """

    reference = serializers.CharField(
        help_text="Blob reference to use as message content or group image"
    )
    upload_url = serializers.CharField(help_text="URL to upload the file to")
    method = serializers.CharField(help_text="HTTP method to use (PUT)")
    direct = serializers.BooleanField(
        help_text="True if uploading directly to storage (S3)"
    )
    expires_in = serializers.IntegerField(
        allow_null=True, required=False, help_text="Seconds until the upload URL expires"
    )
    headers = serializers.DictField(
        child=serializers.CharField(),
        allow_null=True,
        required=False,
        help_text="Headers to include in the upload request",
    )
