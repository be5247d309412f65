"""Exceptions for library app.

Every failure of the ingestion and delivery pipelines is reported with
one of the ``LibraryError`` subclasses below. ``kind`` is a stable
machine-readable tag, ``status_code`` is the HTTP status the view layer
answers with, and ``public_message`` is safe to show to the caller
(it never contains storage paths).
"""

from typing import ClassVar, Final

_GENERIC_SERVER_MESSAGE: Final = 'Internal server error'


class LibraryError(Exception):
    """Base class for library errors."""

    kind: ClassVar[str] = 'library_error'
    status_code: ClassVar[int] = 500

    @property
    def public_message(self) -> str:
        """Message that can be returned to the client."""
        return str(self)


class UnsupportedTypeError(LibraryError):
    """Raised when the declared MIME type is not in the allow-list."""

    kind = 'unsupported_type'
    status_code = 400

    def __init__(self, mime_type: str, accepted: tuple[str, ...] = ()) -> None:
        """Initialize UnsupportedTypeError.

        Args:
            mime_type: The rejected MIME type as declared by the caller.
            accepted: MIME types that would have been accepted.
        """
        self.mime_type = mime_type
        self.accepted = accepted
        message = f'Unsupported file type: {mime_type or "<missing>"}'
        if accepted:
            message = f'{message}. Accepted types: {", ".join(accepted)}'
        super().__init__(message)


class InvalidMetadataError(LibraryError):
    """Raised when descriptive fields fail validation."""

    kind = 'invalid_metadata'
    status_code = 400

    def __init__(self, errors: dict[str, list[str]]) -> None:
        """Initialize InvalidMetadataError.

        Args:
            errors: Mapping of field name to validation messages.
        """
        self.errors = errors
        fields = ', '.join(sorted(errors))
        super().__init__(f'Invalid metadata: {fields}')


class TooLargeError(LibraryError):
    """Raised when an inbound stream exceeds the upload size limit."""

    kind = 'too_large'
    status_code = 400

    def __init__(self, limit_bytes: int) -> None:
        """Initialize TooLargeError.

        Args:
            limit_bytes: Maximum accepted size in bytes.
        """
        self.limit_bytes = limit_bytes
        super().__init__(
            f'File is too large. Maximum size: {limit_bytes} bytes',
        )


class StorageFailureError(LibraryError):
    """Raised when writing or relocating content in storage fails."""

    kind = 'storage_failure'

    @property
    def public_message(self) -> str:
        """Hide storage details from the client."""
        return _GENERIC_SERVER_MESSAGE


class MetadataFailureError(LibraryError):
    """Raised when the metadata store rejects an insert, update or delete."""

    kind = 'metadata_failure'

    @property
    def public_message(self) -> str:
        """Hide database details from the client."""
        return _GENERIC_SERVER_MESSAGE


class AssetNotFoundError(LibraryError):
    """Raised when an asset record or its backing file is absent."""

    kind = 'not_found'
    status_code = 404

    def __init__(self, asset_id: int) -> None:
        """Initialize AssetNotFoundError.

        Args:
            asset_id: Requested asset ID.
        """
        self.asset_id = asset_id
        super().__init__(f'Asset not found: {asset_id}')


class RangeNotSatisfiableError(LibraryError):
    """Raised when a byte range cannot be served for an asset."""

    kind = 'range_not_satisfiable'
    status_code = 416

    def __init__(self, range_header: str, size_bytes: int) -> None:
        """Initialize RangeNotSatisfiableError.

        Args:
            range_header: Raw value of the Range header.
            size_bytes: Total size of the asset content.
        """
        self.range_header = range_header
        self.size_bytes = size_bytes
        super().__init__(
            f'Range not satisfiable: {range_header!r} '
            f'(content length: {size_bytes})',
        )


class UnauthorizedError(LibraryError):
    """Raised when a caller without elevated rights attempts a mutation."""

    kind = 'unauthorized'
    status_code = 403

    def __init__(self, operation: str) -> None:
        """Initialize UnauthorizedError.

        Args:
            operation: Name of the refused operation.
        """
        self.operation = operation
        super().__init__(f'Elevated rights required to {operation}')
