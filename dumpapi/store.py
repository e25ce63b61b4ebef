"""Queries on users and their credentials.

Functions take a DB-API 2.0 connection that uses the ``qmark`` parameter style.
"""

from __future__ import annotations

from typing import Any

from dumpapi.models import StoredCredentials, User


class NotFoundError(LookupError):
    """A query that must return a row returned none."""


def _fetch_one(conn: Any, query: str, params: tuple[Any, ...]) -> tuple[Any, ...]:
    cursor = conn.cursor()
    try:
        cursor.execute(query, params)
        row = cursor.fetchone()
    finally:
        cursor.close()
    if row is None:
        raise NotFoundError("no rows in result set")
    return row


def _execute_and_commit(conn: Any, query: str, params: tuple[Any, ...]) -> None:
    cursor = conn.cursor()
    try:
        cursor.execute(query, params)
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        cursor.close()


def insert_credentials(conn: Any, creds: StoredCredentials) -> None:
    """Store a set of credentials for an existing user."""
    _execute_and_commit(
        conn,
        "INSERT INTO credentials (user_id, username, passhash) VALUES (?, ?, ?)",
        (creds.user_id, creds.username, creds.passhash),
    )


def get_passhash_for_username(conn: Any, username: str) -> str:
    """Return the password hash stored for a username."""
    (passhash,) = _fetch_one(
        conn, "SELECT passhash FROM credentials WHERE username = ?", (username,)
    )
    return passhash


def insert_user(conn: Any, user: User) -> None:
    """Store a user record."""
    _execute_and_commit(
        conn,
        "INSERT INTO users (id, username) VALUES (?, ?)",
        (user.id, user.username),
    )


def get_user_by_id(conn: Any, user_id: int) -> User:
    """Return the user with the given id."""
    found_id, username = _fetch_one(
        conn, "SELECT id, username FROM users WHERE id = ?", (user_id,)
    )
    return User(id=found_id, username=username)


def username_exists(conn: Any, username: str) -> bool:
    """Return True if a user with this username exists."""
    (exists,) = _fetch_one(
        conn, "SELECT COUNT(*) > 0 FROM users WHERE username = ?", (username,)
    )
    return bool(exists)


def create_user_with_credentials(conn: Any, creds: StoredCredentials) -> None:
    """Create a user and its credentials in one transaction."""
    cursor = conn.cursor()
    try:
        cursor.execute("INSERT INTO users (username) VALUES (?)", (creds.username,))
        cursor.execute(
            "INSERT INTO credentials (user_id, username, passhash) "
            "VALUES ((SELECT id FROM users WHERE username = ?), ?, ?)",
            (creds.username, creds.username, creds.passhash),
        )
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        cursor.close()


def get_user_id_from_username(conn: Any, username: str) -> int:
    """Return the id of the user with the given username."""
    (user_id,) = _fetch_one(
        conn, "SELECT id FROM users WHERE username = ?", (username,)
    )
    return user_id