"""Bearer token authentication for WSGI applications."""

from __future__ import annotations

import functools
import json
import logging
from http import HTTPStatus
from typing import Any, Callable, Iterable

from dumpapi.tokens import TokenError, TokenFactory

USER_ID_KEY = "user_id"
_PREFIX = "Bearer: "

_log = logging.getLogger(__name__)


class Unauthorized(Exception):
    """The request does not carry a valid access token."""

    status = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str, *, as_json: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.as_json = as_json

    def response(self) -> tuple[str, bytes]:
        """Content type and body of the error response."""
        if self.as_json:
            body = json.dumps({"message": self.message}, separators=(",", ":")) + "\n"
            return "application/json; charset=UTF-8", body.encode("utf-8")
        return "text/plain; charset=UTF-8", self.message.encode("utf-8")


def authenticate(factory: TokenFactory, authorization: str | None) -> int:
    """Return the user id from an Authorization header value."""
    if authorization is None or not authorization.startswith(_PREFIX):
        raise Unauthorized("No access token provided")
    token_string = authorization[len(_PREFIX):]
    try:
        claims = factory.parse_access_token(token_string)
    except TokenError as exc:
        _log.error("error authenticating user: %s", exc)
        raise Unauthorized("invalid access token", as_json=True) from exc
    return claims.user_id


def auth_middleware(factory: TokenFactory) -> Callable[[Callable], Callable]:
    """Wrap a WSGI application so that only authenticated requests reach it.

    The authenticated user id is stored in the environ under USER_ID_KEY.
    """

    def wrap(app: Callable) -> Callable:
        @functools.wraps(app)
        def wrapped(environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
            try:
                user_id = authenticate(factory, environ.get("HTTP_AUTHORIZATION"))
            except Unauthorized as exc:
                content_type, body = exc.response()
                status = f"{exc.status.value} {exc.status.phrase}"
                start_response(
                    status,
                    [("Content-Type", content_type), ("Content-Length", str(len(body)))],
                )
                return [body]
            environ[USER_ID_KEY] = user_id
            return app(environ, start_response)

        return wrapped

    return wrap