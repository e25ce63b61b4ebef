"""Data models exchanged with clients and kept in storage."""

from __future__ import annotations

import json
from dataclasses import dataclass

from dumpapi.hashing import hash_password


@dataclass
class StoredCredentials:
    """Credentials as kept in the database."""

    username: str
    passhash: str
    user_id: int = 0


@dataclass
class User:
    """A user record."""

    id: int
    username: str


@dataclass
class ClientCredentials:
    """Credentials as sent by a client."""

    username: str
    password: str

    def to_storage_model(self) -> StoredCredentials:
        """Convert to storage credentials, hashing the password."""
        return StoredCredentials(
            username=self.username, passhash=hash_password(self.password)
        )


@dataclass
class AuthPayload:
    """Tokens handed back to a client after authentication."""

    access_token: str = ""
    refresh_token: str = ""

    def to_json(self) -> str:
        """Serialise to JSON, leaving out empty tokens."""
        data = {}
        if self.access_token:
            data["access"] = self.access_token
        if self.refresh_token:
            data["refresh"] = self.refresh_token
        return json.dumps(data, separators=(",", ":"))