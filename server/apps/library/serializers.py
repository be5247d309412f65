"""Serializers for asset metadata.

``AssetMetadataSerializer`` validates the descriptive fields on commit
and update; ``AssetSerializer`` renders committed assets for the API.
The stored path is internal and never exposed.
"""

from typing import Any, Final

from rest_framework import serializers

from server.apps.library.exceptions import InvalidMetadataError
from server.apps.library.models import (
    DESCRIPTION_MAX_LENGTH,
    THEME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Asset,
)

DESCRIPTIVE_FIELDS: Final = ('title', 'description', 'theme')


class AssetMetadataSerializer(serializers.Serializer):
    """Descriptive fields of an asset.

    All fields are required on commit. With ``partial=True`` only the
    fields that were sent are validated; a sent field must still be
    non-blank after surrounding whitespace is stripped.
    """

    title = serializers.CharField(max_length=TITLE_MAX_LENGTH)
    description = serializers.CharField(max_length=DESCRIPTION_MAX_LENGTH)
    theme = serializers.CharField(max_length=THEME_MAX_LENGTH)


class AssetSerializer(serializers.ModelSerializer):
    """Public representation of a committed asset."""

    owner = serializers.SlugRelatedField(
        slug_field='username',
        read_only=True,
    )

    class Meta:
        model = Asset
        fields = [
            'id',
            'title',
            'description',
            'theme',
            'category',
            'original_name',
            'size_bytes',
            'checksum_sha256',
            'owner',
            'created_at',
            'modified_at',
        ]
        read_only_fields = fields


def _field_errors(serializer: serializers.Serializer) -> dict[str, list[str]]:
    return {
        name: [str(message) for message in messages]
        for name, messages in serializer.errors.items()
    }


def validate_descriptive_fields(fields: dict[str, Any]) -> dict[str, str]:
    """Validate descriptive fields for a new asset.

    Args:
        fields: Raw title, description and theme values.

    Returns:
        Cleaned values (surrounding whitespace stripped).

    Raises:
        InvalidMetadataError: If a field is missing, blank or too long.
    """
    serializer = AssetMetadataSerializer(data=fields)
    if not serializer.is_valid():
        raise InvalidMetadataError(_field_errors(serializer))
    return dict(serializer.validated_data)


def validate_descriptive_update(fields: dict[str, Any]) -> dict[str, str]:
    """Validate a partial update of descriptive fields.

    Args:
        fields: Raw values to change.

    Returns:
        Cleaned values for the fields that were sent.

    Raises:
        InvalidMetadataError: If nothing is sent, an immutable field is
            sent, or a value is blank or too long.
    """
    immutable = sorted(set(fields) - set(DESCRIPTIVE_FIELDS))
    if immutable:
        raise InvalidMetadataError({
            name: ['This field cannot be changed.'] for name in immutable
        })
    if not fields:
        raise InvalidMetadataError({
            'non_field_errors': ['No fields to update.'],
        })

    serializer = AssetMetadataSerializer(data=fields, partial=True)
    if not serializer.is_valid():
        raise InvalidMetadataError(_field_errors(serializer))
    return dict(serializer.validated_data)
