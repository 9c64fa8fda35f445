"""
Serializers for the user directory.

Related files:
    - models.py: User model
    - views.py: Views that use these serializers
    - services.py: UserService (all writes go through it)
"""

from rest_framework import serializers

from users.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model (read operations).

    Used for the current user, the user picker list and conversation
    member lists.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "token_identifier",
            "name",
            "email",
            "image",
            "is_online",
            "created_at",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Serializer for partial profile updates.

    Both fields are optional; omitted fields are left untouched. Blank
    names are passed through so the service reports them as
    VALIDATION_ERROR.
    """

    name = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=255,
        trim_whitespace=False,
    )
    image = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=1024,
        help_text="Avatar URL",
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one of: name, image.")
        return attrs


class ReconciliationResultSerializer(serializers.Serializer):
    """Response body for duplicate reconciliation."""

    user = UserSerializer(source="kept", read_only=True)
    removed_count = serializers.IntegerField(read_only=True)
