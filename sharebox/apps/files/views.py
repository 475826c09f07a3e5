"""HTTP views for the caller's personal directory."""

from http import HTTPStatus

from django.http import HttpRequest, HttpResponse, HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from sharebox.apps.files.exceptions import InvalidRequestError
from sharebox.apps.files.logic.directory_operations import (
    delete_path,
    list_directory,
    make_directory,
    save_file,
)
from sharebox.apps.files.logic.download_operations import fetch_personal_file
from sharebox.apps.files.responses import (
    api_response,
    download_response,
    json_api_view,
    require_user,
)

# PUT and DELETE always need a target below the sandbox root
_ROOT_METHODS = ('GET', 'POST')


@csrf_exempt
@require_http_methods(['GET', 'PUT', 'POST', 'DELETE'])
@json_api_view
def personal_directory(request: HttpRequest, path: str = '') -> HttpResponse:
    """List, create, upload to or delete a path of the caller's sandbox.

    GET lists the directory, PUT creates it, POST stores the multipart
    ``file`` field inside it and DELETE removes it recursively.
    """
    user = require_user(request)

    if not path and request.method not in _ROOT_METHODS:
        return HttpResponseNotAllowed(_ROOT_METHODS)

    if request.method == 'GET':
        entries = list_directory(user, path)
        return api_response([entry.as_dict() for entry in entries])

    if request.method == 'PUT':
        return api_response(make_directory(user, path).as_dict())

    if request.method == 'POST':
        upload = request.FILES.get('file')
        if upload is None:
            raise InvalidRequestError('Missing multipart field: file')
        entry = save_file(user, path, upload.name, upload)
        return api_response(entry.as_dict(), status=HTTPStatus.CREATED)

    return api_response(delete_path(user, path).as_dict())


@require_GET
@json_api_view
def personal_file(request: HttpRequest, path: str) -> HttpResponse:
    """Download a file from the caller's own sandbox."""
    user = require_user(request)
    return download_response(fetch_personal_file(user, path))
