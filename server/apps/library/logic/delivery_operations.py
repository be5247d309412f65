"""Business logic for serving asset content.

Audio and video are served with byte-range support so that players can
seek; documents and images are always served whole.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Final, final

from server.apps.library.exceptions import (
    AssetNotFoundError,
    RangeNotSatisfiableError,
)
from server.apps.library.infrastructure.classifier import (
    default_content_type,
    is_streamable,
)
from server.apps.library.infrastructure.storage import get_storage
from server.apps.library.models import Asset

_BYTES_UNIT: Final = 'bytes'
# Offsets longer than this are past any stored file
_MAX_OFFSET_DIGITS: Final = 19
_OFFSET_CEILING: Final = 2**63 - 1

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive byte range ``start..end`` of a resource."""

    start: int
    end: int

    @property
    def length(self) -> int:
        """Number of bytes covered by the range."""
        return self.end - self.start + 1

    def content_range(self, total: int) -> str:
        """Value of the Content-Range header (e.g., 'bytes 0-99/1000')."""
        return f'{_BYTES_UNIT} {self.start}-{self.end}/{total}'


def _is_offset(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _to_offset(text: str) -> int:
    digits = text.lstrip('0')
    if len(digits) > _MAX_OFFSET_DIGITS:
        return _OFFSET_CEILING
    return int(digits or '0')


def parse_byte_range(range_header: str, size_bytes: int) -> ByteRange:
    """Parse a ``bytes=start-end`` Range header against a resource size.

    Only the first range of a multi-range header is honoured. A missing
    end means "to the end of the resource"; an end past the resource is
    clamped to the last byte. Suffix ranges (``bytes=-500``) are not
    supported.

    Args:
        range_header: Raw Range header value.
        size_bytes: Total size of the resource.

    Returns:
        The satisfiable range.

    Raises:
        RangeNotSatisfiableError: If the header is malformed or the range
            lies outside the resource.
    """
    unit, separator, ranges = range_header.strip().partition('=')
    if not separator or unit.strip().lower() != _BYTES_UNIT:
        raise RangeNotSatisfiableError(range_header, size_bytes)

    first_range = ranges.split(',', 1)[0].strip()
    raw_start, dash, raw_end = first_range.partition('-')
    raw_start = raw_start.strip()
    raw_end = raw_end.strip()
    if not dash or not _is_offset(raw_start):
        raise RangeNotSatisfiableError(range_header, size_bytes)
    if raw_end and not _is_offset(raw_end):
        raise RangeNotSatisfiableError(range_header, size_bytes)

    start = _to_offset(raw_start)
    end = _to_offset(raw_end) if raw_end else size_bytes - 1
    end = min(end, size_bytes - 1)

    if start > end or start >= size_bytes:
        raise RangeNotSatisfiableError(range_header, size_bytes)
    return ByteRange(start=start, end=end)


@final
@dataclass(frozen=True, slots=True)
class AssetContent:
    """Content of an asset ready to be sent to a client.

    ``byte_range`` is None for a full body.
    """

    asset: Asset
    content_type: str
    total_size: int
    byte_range: ByteRange | None = None

    @property
    def is_partial(self) -> bool:
        """Whether only a byte range is served."""
        return self.byte_range is not None

    @property
    def status_code(self) -> int:
        """HTTP status: 206 for partial content, 200 otherwise."""
        return 206 if self.is_partial else 200

    @property
    def content_length(self) -> int:
        """Number of bytes in the body."""
        if self.byte_range is None:
            return self.total_size
        return self.byte_range.length

    def headers(self) -> dict[str, str]:
        """Response headers describing the body."""
        headers = {
            'Content-Type': self.content_type,
            'Content-Length': str(self.content_length),
        }
        if is_streamable(self.asset.category):
            headers['Accept-Ranges'] = _BYTES_UNIT
        if self.byte_range is not None:
            headers['Content-Range'] = self.byte_range.content_range(
                self.total_size,
            )
        return headers

    def iter_chunks(self) -> Iterator[bytes]:
        """Stream the body bytes from storage."""
        if self.total_size == 0:
            return iter(())
        byte_range = self.byte_range or ByteRange(0, self.total_size - 1)
        return get_storage().open_range(
            self.asset.stored_path,
            byte_range.start,
            byte_range.end,
        )


def read_asset(asset_id: int, range_header: str | None = None) -> AssetContent:
    """Prepare asset content for delivery, whole or as a byte range.

    Args:
        asset_id: ID of asset to read.
        range_header: Raw Range header, if the client sent one.

    Returns:
        AssetContent describing status, headers and body.

    Raises:
        AssetNotFoundError: If the record or its backing file is missing.
        RangeNotSatisfiableError: If the requested range is invalid.
    """
    try:
        asset = Asset.objects.get(id=asset_id)
    except Asset.DoesNotExist as exc:
        raise AssetNotFoundError(asset_id) from exc

    if not get_storage().exists(asset.stored_path):
        logger.warning(
            'Backing file missing for asset ID=%d: %s',
            asset_id,
            asset.stored_path,
        )
        raise AssetNotFoundError(asset_id)

    content_type = default_content_type(asset.category)
    total_size = asset.size_bytes

    if not range_header or not is_streamable(asset.category):
        return AssetContent(
            asset=asset,
            content_type=content_type,
            total_size=total_size,
        )

    byte_range = parse_byte_range(range_header, total_size)
    logger.debug(
        'Serving range %d-%d/%d of asset ID=%d',
        byte_range.start,
        byte_range.end,
        total_size,
        asset_id,
    )
    return AssetContent(
        asset=asset,
        content_type=content_type,
        total_size=total_size,
        byte_range=byte_range,
    )
