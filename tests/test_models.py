import json

from dumpapi.hashing import validate_password
from dumpapi.models import AuthPayload, ClientCredentials, StoredCredentials


def test_to_storage_model_hashes_password():
    password = "password"
    creds = ClientCredentials(username="alice", password=password)
    stored = creds.to_storage_model()
    assert isinstance(stored, StoredCredentials)
    assert stored.username == "alice"
    assert stored.user_id == 0
    assert stored.passhash != password
    assert validate_password(password, stored.passhash)


def test_auth_payload_both_tokens():
    payload = AuthPayload(access_token="token", refresh_token="token")
    assert json.loads(payload.to_json()) == {"access": "token", "refresh": "token"}


def test_auth_payload_omits_empty():
    assert AuthPayload().to_json() == "{}"


def test_auth_payload_only_access():
    payload = AuthPayload(access_token="token")
    assert json.loads(payload.to_json()) == {"access": "token"}


def test_auth_payload_only_refresh():
    payload = AuthPayload(refresh_token="token")
    assert json.loads(payload.to_json()) == {"refresh": "token"}