import sqlite3

import pytest

from dumpapi.models import StoredCredentials, User
from dumpapi.store import (
    NotFoundError,
    create_user_with_credentials,
    get_passhash_for_username,
    get_user_by_id,
    get_user_id_from_username,
    insert_credentials,
    insert_user,
    username_exists,
)


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    connection.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, username TEXT UNIQUE)"
    )
    connection.execute(
        "CREATE TABLE credentials (user_id INTEGER, username TEXT UNIQUE, passhash TEXT)"
    )
    yield connection
    connection.close()


def test_insert_and_get_user(conn):
    insert_user(conn, User(id=7, username="alice"))
    insert_user(conn, User(id=9, username="bob"))
    assert get_user_by_id(conn, 9) == User(id=9, username="bob")
    assert get_user_by_id(conn, 7) == User(id=7, username="alice")


def test_get_missing_user_raises(conn):
    with pytest.raises(NotFoundError):
        get_user_by_id(conn, 1)


def test_username_exists(conn):
    insert_user(conn, User(id=1, username="alice"))
    assert username_exists(conn, "alice") is True
    assert username_exists(conn, "bob") is False


def test_insert_credentials_and_get_passhash(conn):
    insert_credentials(conn, StoredCredentials(username="alice", passhash="h1", user_id=3))
    assert get_passhash_for_username(conn, "alice") == "h1"


def test_get_passhash_missing_raises(conn):
    with pytest.raises(NotFoundError):
        get_passhash_for_username(conn, "nobody")


def test_create_user_with_credentials(conn):
    create_user_with_credentials(conn, StoredCredentials(username="alice", passhash="h1"))
    user_id = get_user_id_from_username(conn, "alice")
    assert get_user_by_id(conn, user_id).username == "alice"
    assert get_passhash_for_username(conn, "alice") == "h1"
    row = conn.execute(
        "SELECT user_id FROM credentials WHERE username = ?", ("alice",)
    ).fetchone()
    assert row[0] == user_id


def test_create_user_with_credentials_is_atomic(conn):
    insert_credentials(conn, StoredCredentials(username="bob", passhash="old", user_id=0))
    with pytest.raises(sqlite3.IntegrityError):
        create_user_with_credentials(conn, StoredCredentials(username="bob", passhash="new"))
    assert username_exists(conn, "bob") is False
    assert get_passhash_for_username(conn, "bob") == "old"


def test_get_user_id_from_missing_username_raises(conn):
    with pytest.raises(NotFoundError):
        get_user_id_from_username(conn, "ghost")


def test_duplicate_user_insert_raises(conn):
    insert_user(conn, User(id=1, username="alice"))
    with pytest.raises(sqlite3.IntegrityError):
        insert_user(conn, User(id=1, username="other"))
    assert username_exists(conn, "other") is False