"""API views for library app.

Views only translate requests into calls to the logic layer and
results into responses. ``LibraryError`` subclasses raised by the logic
layer are rendered by ``library_exception_handler``, installed as the
REST framework ``EXCEPTION_HANDLER``.

Identity comes from ``django.contrib.auth``: every endpoint needs an
authenticated user and mutations need a staff user.
"""

import logging
from typing import Any, Final

from django.http import StreamingHttpResponse
from django.utils.http import content_disposition_header
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    ParseError,
    ValidationError,
)
from rest_framework.negotiation import BaseContentNegotiation
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView, exception_handler

from server.apps.library.exceptions import (
    LibraryError,
    RangeNotSatisfiableError,
    UnauthorizedError,
)
from server.apps.library.infrastructure.staging import staged_upload
from server.apps.library.logic.commit_operations import (
    commit_asset,
    update_asset,
)
from server.apps.library.logic.delete_operations import delete_asset
from server.apps.library.logic.delivery_operations import (
    AssetContent,
    read_asset,
)
from server.apps.library.logic.query_operations import (
    get_asset,
    get_library_stats,
    list_assets,
    search_assets,
)
from server.apps.library.serializers import (
    DESCRIPTIVE_FIELDS,
    AssetSerializer,
)

_DOWNLOAD_CONTENT_TYPE: Final = 'application/octet-stream'

logger = logging.getLogger(__name__)


def library_exception_handler(
    exc: Exception,
    context: dict[str, Any],
) -> Response | None:
    """Render errors as ``{"error": {"kind", "message", "fields"?}}``.

    Library errors are mapped by their ``kind`` and ``status_code``;
    REST framework errors keep their status and headers.

    Args:
        exc: Raised exception.
        context: Handler context (view, request, args).

    Returns:
        Error response, or None to let Django handle the exception.
    """
    if isinstance(exc, LibraryError):
        return _library_error_response(exc, context['request'])

    response = exception_handler(exc, context)
    if response is None or not isinstance(exc, APIException):
        return response

    payload: dict[str, Any] = {'kind': exc.default_code}
    if isinstance(exc, ValidationError):
        payload['message'] = str(exc.default_detail)
        payload['fields'] = response.data
    else:
        payload['message'] = str(exc.detail)
    response.data = {'error': payload}
    return response


def _library_error_response(error: LibraryError, request: Request) -> Response:
    if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error('Request failed: %s %s', request.method, error)
    else:
        logger.info('Request rejected: %s', error)

    payload: dict[str, Any] = {
        'kind': error.kind,
        'message': error.public_message,
    }
    errors = getattr(error, 'errors', None)
    if errors:
        payload['fields'] = errors

    headers = None
    if isinstance(error, RangeNotSatisfiableError):
        headers = {'Content-Range': f'bytes */{error.size_bytes}'}
    return Response(
        {'error': payload},
        status=error.status_code,
        headers=headers,
    )


class _FirstRendererNegotiation(BaseContentNegotiation):
    """Skip Accept matching; media players send narrow Accept headers."""

    def select_parser(self, request: Request, parsers: list[Any]) -> Any:
        return parsers[0] if parsers else None

    def select_renderer(
        self,
        request: Request,
        renderers: list[Any],
        format_suffix: str | None = None,
    ) -> tuple[Any, str]:
        return (renderers[0], renderers[0].media_type)


def _can_mutate(request: Request) -> bool:
    return bool(request.user.is_staff)


def _int_param(request: Request, name: str) -> int | None:
    raw_value = request.query_params.get(name)
    if raw_value in {None, ''}:
        return None
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValidationError({
            name: ['A valid integer is required.'],
        }) from exc


def _json_object(request: Request) -> dict[str, Any]:
    body = request.data
    if not isinstance(body, dict):
        raise ParseError('Request body must be a JSON object')
    return dict(body)


def _stream_response(
    content: AssetContent,
    content_type: str | None = None,
) -> StreamingHttpResponse:
    response = StreamingHttpResponse(
        content.iter_chunks(),
        status=content.status_code,
        content_type=content_type or content.content_type,
    )
    for header, header_value in content.headers().items():
        if header != 'Content-Type':
            response[header] = header_value
    response['ETag'] = f'"{content.asset.checksum_sha256}"'
    return response


class AssetListAPIView(APIView):
    """List assets with optional filters."""

    def get(self, request: Request) -> Response:
        assets = list_assets(
            category=(
                request.query_params.get('type')
                or request.query_params.get('category')
            ),
            theme=request.query_params.get('theme'),
            search=request.query_params.get('search'),
            sort_by=request.query_params.get('sortBy'),
            sort_order=request.query_params.get('sortOrder'),
            limit=_int_param(request, 'limit'),
            offset=_int_param(request, 'offset') or 0,
        )
        serialized = AssetSerializer(assets, many=True).data
        return Response({'assets': serialized, 'count': len(serialized)})


class AssetSearchAPIView(APIView):
    """Search assets by title, description or theme."""

    def get(self, request: Request) -> Response:
        term = request.query_params.get('q', '').strip()
        if not term:
            raise ValidationError({'q': ['Search term is required.']})

        assets = search_assets(
            term,
            category=request.query_params.get('type'),
        )
        serialized = AssetSerializer(assets, many=True).data
        return Response({
            'assets': serialized,
            'count': len(serialized),
            'search_term': term,
        })


class AssetStatsAPIView(APIView):
    """Aggregate statistics over the library."""

    def get(self, request: Request) -> Response:
        return Response(get_library_stats())


class AssetUploadAPIView(APIView):
    """Stage an uploaded file and commit it as a new asset."""

    parser_classes = [MultiPartParser, FormParser]

    def post(self, request: Request) -> Response:
        can_mutate = _can_mutate(request)
        if not can_mutate:
            # Refuse before anything is written to the staging area
            raise UnauthorizedError('commit assets')

        uploaded = request.FILES.get('file')
        if uploaded is None:
            raise ValidationError({'file': ['No file was submitted.']})

        fields = {
            name: request.data[name]
            for name in DESCRIPTIVE_FIELDS
            if name in request.data
        }
        with staged_upload(uploaded, uploaded.name or '') as staged:
            asset = commit_asset(
                staged,
                uploaded.content_type,
                fields,
                request.user,
                can_mutate=can_mutate,
            )
        return Response(
            {'asset': AssetSerializer(asset).data},
            status=status.HTTP_201_CREATED,
        )


class AssetDetailAPIView(APIView):
    """Get, update or delete a single asset."""

    def get(self, request: Request, asset_id: int) -> Response:
        return Response({'asset': AssetSerializer(get_asset(asset_id)).data})

    def put(self, request: Request, asset_id: int) -> Response:
        return self._update(request, asset_id)

    def patch(self, request: Request, asset_id: int) -> Response:
        return self._update(request, asset_id)

    def delete(self, request: Request, asset_id: int) -> Response:
        deletion = delete_asset(asset_id, can_mutate=_can_mutate(request))
        return Response({
            'deleted': deletion.asset_id,
            'file_removed': deletion.file_removed,
            'warning': deletion.warning,
        })

    def _update(self, request: Request, asset_id: int) -> Response:
        asset = update_asset(
            asset_id,
            _json_object(request),
            can_mutate=_can_mutate(request),
        )
        return Response({'asset': AssetSerializer(asset).data})


class AssetDownloadAPIView(APIView):
    """Send the whole asset as an attachment under its original name."""

    content_negotiation_class = _FirstRendererNegotiation

    def get(self, request: Request, asset_id: int) -> StreamingHttpResponse:
        content = read_asset(asset_id)
        response = _stream_response(
            content,
            content_type=_DOWNLOAD_CONTENT_TYPE,
        )
        response['Content-Disposition'] = content_disposition_header(
            as_attachment=True,
            filename=content.asset.original_name,
        )
        return response


class AssetServeAPIView(APIView):
    """Serve asset content inline, honouring Range for audio and video."""

    content_negotiation_class = _FirstRendererNegotiation

    def get(self, request: Request, asset_id: int) -> StreamingHttpResponse:
        content = read_asset(asset_id, request.headers.get('Range'))
        return _stream_response(content)
