"""Django admin configuration for library app."""

from typing import Final

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.library.exceptions import LibraryError
from server.apps.library.logic.delete_operations import delete_asset
from server.apps.library.models import Asset

_SIZE_UNITS: Final = ('B', 'KB', 'MB', 'GB')


def _format_size(size_bytes: int) -> str:
    """Render a byte count with the largest unit below 1024 ('1.5 KB')."""
    scaled = float(size_bytes)
    for unit in _SIZE_UNITS[:-1]:
        if scaled < 1024:
            break
        scaled /= 1024
    else:
        unit = _SIZE_UNITS[-1]
    if unit == _SIZE_UNITS[0]:
        return f'{size_bytes} {unit}'
    return f'{scaled:.1f} {unit}'


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin[Asset]):
    """Admin interface for Asset model.

    Assets are created through the upload endpoint only; the admin can
    edit descriptive fields and delete assets. Deletes go through the
    deletion pipeline so backing files are removed as well.
    """

    list_display = [
        'title',
        'category',
        'theme',
        'original_name',
        'filename_display',
        'extension_display',
        'size_display',
        'owner',
        'created_at',
    ]

    list_filter = [
        'category',
        'created_at',
    ]

    search_fields = [
        'title',
        'description',
        'theme',
        'original_name',
    ]

    readonly_fields = [
        'category',
        'file',
        'original_name',
        'size_bytes',
        'checksum_sha256',
        'owner',
        'created_at',
        'modified_at',
    ]

    fieldsets = (
        ('Description', {
            'fields': ('title', 'description', 'theme'),
        }),
        ('Stored File', {
            'fields': (
                'category',
                'file',
                'original_name',
                'size_bytes',
                'checksum_sha256',
            ),
        }),
        ('Audit', {
            'fields': ('owner', 'created_at', 'modified_at'),
        }),
    )

    def filename_display(self, obj: Asset) -> str:
        """Generated name of the stored file, without its partition."""
        return obj.get_filename()
    filename_display.short_description = 'Stored name'  # type: ignore[attr-defined]

    def extension_display(self, obj: Asset) -> str:
        return obj.get_extension()
    extension_display.short_description = 'Extension'  # type: ignore[attr-defined]

    def size_display(self, obj: Asset) -> str:
        """Display asset size in human-readable format.

        Args:
            obj: Asset instance.

        Returns:
            Formatted size string (e.g., '1.5 MB', '234 KB').
        """
        return _format_size(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Assets are only created by committing an upload."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[Asset]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')

    def delete_model(self, request: HttpRequest, obj: Asset) -> None:
        """Delete a single asset through the deletion pipeline."""
        self._delete_assets(request, [obj.id])

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[Asset],
    ) -> None:
        """Delete selected assets through the deletion pipeline."""
        self._delete_assets(request, list(queryset.values_list('id', flat=True)))

    def _delete_assets(self, request: HttpRequest, asset_ids: list[int]) -> None:
        for asset_id in asset_ids:
            try:
                deletion = delete_asset(
                    asset_id,
                    can_mutate=request.user.is_staff,
                )
            except LibraryError as exc:
                self.message_user(request, str(exc), level=messages.ERROR)
                continue
            if deletion.warning:
                self.message_user(
                    request,
                    f'Asset {asset_id}: {deletion.warning}',
                    level=messages.WARNING,
                )
