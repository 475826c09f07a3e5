"""JSON envelope and download responses shared by the API views.

Every JSON answer uses the same envelope: ``{"code": <status>, "data": ...}``.
Errors from the logic layer are translated here, in one place.
"""

import functools
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Final

from django.http import HttpRequest, HttpResponse, JsonResponse, StreamingHttpResponse
from django.utils.http import content_disposition_header

from sharebox.apps.files.exceptions import (
    ErrorKind,
    FileAccessError,
    UnauthorizedError,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

    from sharebox.apps.files.logic.download_operations import DownloadPayload

logger = logging.getLogger(__name__)

ERROR_STATUS: Final = {
    ErrorKind.INVALID_PATH: HTTPStatus.BAD_REQUEST,
    ErrorKind.INVALID_REQUEST: HTTPStatus.BAD_REQUEST,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorKind.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.IO_FAILURE: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def api_response(data: Any, status: int = HTTPStatus.OK) -> JsonResponse:
    """Wrap data in the JSON envelope.

    Args:
        data: JSON-serializable payload.
        status: HTTP status code.

    Returns:
        JsonResponse with the envelope.
    """
    return JsonResponse({'code': int(status), 'data': data}, status=status, safe=False)


def error_response(error: FileAccessError) -> JsonResponse:
    """Translate a logic error into an enveloped JSON response.

    Args:
        error: Error raised by the logic layer.

    Returns:
        JsonResponse with the status mapped from the error kind.
    """
    status = ERROR_STATUS[error.kind]
    return api_response(error.detail, status=status)


def download_response(payload: 'DownloadPayload') -> StreamingHttpResponse:
    """Build a streaming attachment response.

    Args:
        payload: Download prepared by the logic layer.

    Returns:
        StreamingHttpResponse consuming the payload chunks lazily.
    """
    response = StreamingHttpResponse(
        payload.chunks,
        content_type=payload.content_type,
    )
    response['Content-Disposition'] = content_disposition_header(
        as_attachment=True,
        filename=payload.filename,
    )
    if payload.content_length is not None:
        response['Content-Length'] = str(payload.content_length)
    return response


def json_api_view(
    view: Callable[..., HttpResponse],
) -> Callable[..., HttpResponse]:
    """Decorate a view so logic errors become enveloped JSON responses.

    Args:
        view: View function that may raise FileAccessError.

    Returns:
        Wrapped view.
    """
    @functools.wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except FileAccessError as error:
            logger.info(
                '%s %s rejected: %s (%s)',
                request.method,
                request.path,
                error.detail,
                error.kind.value,
            )
            return error_response(error)
    return wrapper


def require_user(request: HttpRequest) -> 'User':
    """Get the authenticated identity of a request.

    Args:
        request: Incoming request.

    Returns:
        Authenticated user.

    Raises:
        UnauthorizedError: If the request is anonymous.
    """
    if not request.user.is_authenticated:
        raise UnauthorizedError('Authentication required')
    return request.user  # type: ignore[return-value]


def optional_user(request: HttpRequest) -> 'User | None':
    """Get the authenticated identity of a request, if any.

    Args:
        request: Incoming request.

    Returns:
        Authenticated user, or None for anonymous requests.
    """
    if request.user.is_authenticated:
        return request.user  # type: ignore[return-value]
    return None
