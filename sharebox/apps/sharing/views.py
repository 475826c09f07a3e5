"""HTTP views for creating, listing and downloading shares."""

import json
import uuid
from http import HTTPStatus
from typing import Any

from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from sharebox.apps.files.exceptions import InvalidRequestError
from sharebox.apps.files.responses import (
    api_response,
    download_response,
    json_api_view,
    optional_user,
    require_user,
)
from sharebox.apps.sharing.logic.access_operations import (
    download_share,
    fetch_direct_link,
    list_share,
)
from sharebox.apps.sharing.logic.share_operations import (
    create_share,
    delete_share,
    list_owned_shares,
)
from sharebox.apps.sharing.models import ShareRecord


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@json_api_view
def shares(request: HttpRequest) -> HttpResponse:
    """Create a share (POST) or list the caller's own shares (GET).

    POST body (JSON)::

        {"share_type": "WEBSITE", "paths": ["docs/a.pdf"],
         "password": "optional", "recipients": [2, 3]}
    """
    user = require_user(request)

    if request.method == 'GET':
        return api_response([
            _share_summary(share) for share in list_owned_shares(user)
        ])

    body = _parse_json_body(request)
    share_uri = create_share(
        user,
        paths=_string_list(body, 'paths'),
        share_type=body.get('share_type', ''),
        password=_optional_string(body, 'password'),
        recipients=_id_list(body, 'recipients'),
    )
    return api_response({'share_uri': str(share_uri)}, status=HTTPStatus.CREATED)


@csrf_exempt
@require_http_methods(['GET', 'DELETE'])
@json_api_view
def share_detail(request: HttpRequest, share_uri: uuid.UUID) -> HttpResponse:
    """List a share's files (GET, ``?password=``) or delete own share."""
    if request.method == 'DELETE':
        delete_share(require_user(request), share_uri)
        return api_response({'share_uri': str(share_uri)})

    entries = list_share(share_uri, request.GET.get('password', ''))
    return api_response([entry.as_dict() for entry in entries])


@require_GET
@json_api_view
def share_download(request: HttpRequest, share_uri: uuid.UUID) -> HttpResponse:
    """Download files of a share.

    Query: ``file`` (repeatable file_id from the listing), ``password``.
    """
    file_ids = [_parse_uuid(raw) for raw in request.GET.getlist('file')]
    payload = download_share(
        share_uri,
        file_ids,
        optional_user(request),
        request.GET.get('password', ''),
    )
    return download_response(payload)


@require_GET
@json_api_view
def direct_link(request: HttpRequest, share_uri: uuid.UUID) -> HttpResponse:
    """Fetch the single file bound to a direct link share."""
    return download_response(fetch_direct_link(share_uri))


def _share_summary(share: ShareRecord) -> dict[str, Any]:
    return {
        'share_uri': str(share.id),
        'share_type': share.share_type,
        'files': share.files,
        'has_password': share.has_password,
        'recipients': [recipient.pk for recipient in share.recipients.all()],
        'created_at': share.created_at.isoformat(),
    }


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    try:
        body = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRequestError('Request body must be JSON') from exc
    if not isinstance(body, dict):
        raise InvalidRequestError('Request body must be a JSON object')
    return body


def _string_list(body: dict[str, Any], key: str) -> list[str]:
    values = body.get(key)
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise InvalidRequestError(f'{key} must be a list of strings')
    return values


def _id_list(body: dict[str, Any], key: str) -> list[int]:
    values = body.get(key) or []
    if not isinstance(values, list):
        raise InvalidRequestError(f'{key} must be a list of account IDs')
    try:
        return [int(value) for value in values]
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f'{key} must be a list of account IDs') from exc


def _parse_uuid(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError as exc:
        raise InvalidRequestError(f'Invalid file id: {raw}') from exc


def _optional_string(body: dict[str, Any], key: str) -> str | None:
    value = body.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidRequestError(f'{key} must be a string')
    return value
