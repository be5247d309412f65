"""Database models for library app."""

from pathlib import Path
from typing import Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
TITLE_MAX_LENGTH: Final = 100
DESCRIPTION_MAX_LENGTH: Final = 500
THEME_MAX_LENGTH: Final = 50
_CATEGORY_MAX_LENGTH: Final = 16
_STORED_PATH_MAX_LENGTH: Final = 255
_ORIGINAL_NAME_MAX_LENGTH: Final = 255
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length


class Category(models.TextChoices):
    """Internal category of a committed asset."""

    DOCUMENT = 'document', 'Document'
    IMAGE = 'image', 'Image'
    AUDIO = 'audio', 'Audio'
    VIDEO = 'video', 'Video'


@final
class Asset(models.Model):
    """File committed to the library with its descriptive metadata.

    The file lives in durable storage under
    ``{partition}/{timestamp}_{random}_{sanitized name}``. Only the
    descriptive fields (title, description, theme) may change after
    commit; category, stored path, size and owner are fixed.
    """

    title = models.CharField(max_length=TITLE_MAX_LENGTH)

    description = models.CharField(max_length=DESCRIPTION_MAX_LENGTH)

    theme = models.CharField(
        max_length=THEME_MAX_LENGTH,
        db_index=True,
    )

    category = models.CharField(
        max_length=_CATEGORY_MAX_LENGTH,
        choices=Category.choices,
    )

    # upload_to='' means the commit pipeline controls the full path
    file = models.FileField(
        upload_to='',
        max_length=_STORED_PATH_MAX_LENGTH,
        help_text='Path in storage: {partition}/{generated name}',
    )

    # Caller-supplied, display only. Never used to build storage paths.
    original_name = models.CharField(max_length=_ORIGINAL_NAME_MAX_LENGTH)

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    checksum_sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        help_text='SHA256 hash for integrity verification',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    # Weak reference: deleting the user keeps the asset
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assets',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Asset'  # type: ignore[mutable-override]
        verbose_name_plural = 'Assets'  # type: ignore[mutable-override]
        ordering = ['-created_at']

        indexes = [
            models.Index(
                fields=['category', '-created_at'],
                name='assets_category_recent_idx',
            ),
        ]

        constraints = [
            # One record per stored file
            models.UniqueConstraint(
                fields=['file'],
                name='assets_file_unique',
            ),
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='assets_size_bytes_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(category__in=Category.values),
                name='assets_category_valid',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.category}:{self.title}'

    @property
    def stored_path(self) -> str:
        """Relative path of the backing file in durable storage."""
        return self.file.name

    def get_filename(self) -> str:
        """Extract generated filename from the stored path.

        Example: 'video/1718000000000_ab12_clip.mp4' -> '1718..._clip.mp4'

        Returns:
            Filename without partition.
        """
        return Path(self.file.name).name

    def get_extension(self) -> str:
        """Extract file extension of the original name.

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.original_name).suffix
        return extension.lstrip('.').lower()
