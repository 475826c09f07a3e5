"""HTTP Basic authentication for API clients.

Browsers use the regular Django session. Scripts and native clients may
instead send HTTP Basic credentials with every request; they are checked
against Django's authentication backends and, when valid, the user is
attached to the request like a session login would.
"""

import base64
import binascii
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Final, final

from django.contrib.auth import authenticate
from django.http import HttpRequest, HttpResponse

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

_BASIC_PREFIX: Final = 'basic '


@final
class BasicAuthMiddleware:
    """Populate ``request.user`` from an ``Authorization: Basic`` header.

    Must run after AuthenticationMiddleware. Invalid credentials leave the
    request anonymous; protected views then answer 401.
    """

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
    ) -> None:
        """Initialize the middleware.

        Args:
            get_response: Next handler in the middleware chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Authenticate the request if it carries Basic credentials.

        Args:
            request: Incoming request.

        Returns:
            Response from the rest of the chain.
        """
        header = request.META.get('HTTP_AUTHORIZATION', '')
        if header.lower().startswith(_BASIC_PREFIX) and not request.user.is_authenticated:
            user = _authenticate_basic(request, header[len(_BASIC_PREFIX):])
            if user is not None:
                request.user = user
        return self.get_response(request)


def _authenticate_basic(request: HttpRequest, encoded: str) -> 'User | None':
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError):
        logger.warning('Malformed Basic credentials')
        return None

    username, separator, password = decoded.partition(':')
    if not separator:
        logger.warning('Malformed Basic credentials')
        return None

    logger.debug('Authenticating user: %s', username)

    user: User | None = authenticate(
        request=request,
        username=username,
        password=password,
    )

    if user is None:
        logger.warning('Authentication failed for user: %s', username)
        return None

    if not user.is_active:
        logger.warning('Inactive user attempted login: %s', username)
        return None

    return user
