"""Business logic for browsing and searching asset metadata."""

import logging
from typing import Any, Final

from django.db.models import Count, Q, QuerySet

from server.apps.library.exceptions import AssetNotFoundError
from server.apps.library.models import Asset

_SORTABLE_FIELDS: Final = frozenset((
    'created_at',
    'title',
    'theme',
    'size_bytes',
    'category',
))
_DEFAULT_SORT_FIELD: Final = 'created_at'
_TOP_THEMES_LIMIT: Final = 5

logger = logging.getLogger(__name__)


def get_asset(asset_id: int) -> Asset:
    """Get asset by ID.

    Args:
        asset_id: ID of the asset.

    Returns:
        Asset instance.

    Raises:
        AssetNotFoundError: If asset doesn't exist.
    """
    try:
        return Asset.objects.select_related('owner').get(id=asset_id)
    except Asset.DoesNotExist as exc:
        raise AssetNotFoundError(asset_id) from exc


def _order_by(sort_by: str | None, sort_order: str | None) -> str:
    field_name = sort_by if sort_by in _SORTABLE_FIELDS else _DEFAULT_SORT_FIELD
    if (sort_order or '').lower() == 'asc':
        return field_name
    return f'-{field_name}'


def list_assets(  # noqa: WPS211
    *,
    category: str | None = None,
    theme: str | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> QuerySet[Asset]:
    """List assets with optional filters.

    Unknown sort fields fall back to newest first.

    Args:
        category: Exact category filter.
        theme: Case-insensitive substring filter on theme.
        search: Case-insensitive substring filter on title/description.
        sort_by: Field to sort on.
        sort_order: 'asc' or 'desc' (default).
        limit: Maximum number of assets to return.
        offset: Number of assets to skip (applied only with a limit).

    Returns:
        QuerySet of matching assets.
    """
    queryset = Asset.objects.select_related('owner')

    if category:
        queryset = queryset.filter(category=category)
    if theme:
        queryset = queryset.filter(theme__icontains=theme)
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(description__icontains=search),
        )

    queryset = queryset.order_by(_order_by(sort_by, sort_order), '-id')

    if limit is not None:
        start = max(offset, 0)
        queryset = queryset[start:start + max(limit, 0)]
    return queryset


def search_assets(term: str, category: str | None = None) -> QuerySet[Asset]:
    """Search assets by title, description or theme.

    Args:
        term: Text to look for (case-insensitive substring).
        category: Optional exact category filter.

    Returns:
        QuerySet of matching assets, newest first.
    """
    logger.debug('Searching assets: %r (category=%s)', term, category)
    queryset = Asset.objects.select_related('owner').filter(
        Q(title__icontains=term)
        | Q(description__icontains=term)
        | Q(theme__icontains=term),
    )
    if category:
        queryset = queryset.filter(category=category)
    return queryset.order_by('-created_at', '-id')


def get_library_stats() -> dict[str, Any]:
    """Aggregate statistics over the library.

    Returns:
        Dictionary with total count, counts per category and the
        most used themes.
    """
    by_category = (
        Asset.objects.order_by()
        .values('category')
        .annotate(count=Count('id'))
        .order_by('category')
    )
    top_themes = (
        Asset.objects.order_by()
        .values('theme')
        .annotate(count=Count('id'))
        .order_by('-count', 'theme')[:_TOP_THEMES_LIMIT]
    )
    return {
        'total': Asset.objects.count(),
        'by_category': {row['category']: row['count'] for row in by_category},
        'top_themes': [
            {'theme': row['theme'], 'count': row['count']}
            for row in top_themes
        ],
    }
