import json
import os

import pytest

from dumpapi.middleware import USER_ID_KEY, Unauthorized, auth_middleware, authenticate
from dumpapi.tokens import TokenFactory


@pytest.fixture
def factory():
    return TokenFactory(60, 120, os.urandom(32))


def bearer(factory, user_id):
    return "Bearer: " + factory.signed_string(factory.create_access_token(user_id))


def inner_app(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [str(environ[USER_ID_KEY]).encode()]


def call(app, environ):
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


def test_authenticate_returns_user_id(factory):
    assert authenticate(factory, bearer(factory, 7)) == 7


def test_authenticate_missing_header(factory):
    with pytest.raises(Unauthorized) as info:
        authenticate(factory, None)
    assert info.value.message == "No access token provided"


def test_authenticate_wrong_prefix(factory):
    with pytest.raises(Unauthorized) as info:
        authenticate(factory, "Bearer token")
    assert info.value.message == "No access token provided"


def test_authenticate_invalid_token(factory):
    with pytest.raises(Unauthorized) as info:
        authenticate(factory, "Bearer: token")
    assert info.value.message == "invalid access token"
    assert info.value.as_json is True


def test_authenticate_expired_token():
    expiring = TokenFactory(0, 0, os.urandom(32))
    with pytest.raises(Unauthorized) as info:
        authenticate(expiring, bearer(expiring, 1))
    assert info.value.message == "invalid access token"


def test_middleware_passes_user_id(factory):
    app = auth_middleware(factory)(inner_app)
    environ = {"HTTP_AUTHORIZATION": bearer(factory, 42)}
    status, _, body = call(app, environ)
    assert status == "200 OK"
    assert body == b"42"
    assert environ[USER_ID_KEY] == 42


def test_middleware_rejects_missing_token(factory):
    app = auth_middleware(factory)(inner_app)
    status, headers, body = call(app, {})
    assert status.startswith("401")
    assert headers["Content-Type"].startswith("text/plain")
    assert body == b"No access token provided"


def test_middleware_rejects_invalid_token(factory):
    app = auth_middleware(factory)(inner_app)
    status, headers, body = call(app, {"HTTP_AUTHORIZATION": "Bearer: token"})
    assert status.startswith("401")
    assert headers["Content-Type"].startswith("application/json")
    assert json.loads(body) == {"message": "invalid access token"}
    assert headers["Content-Length"] == str(len(body))