"""Settings read from the environment."""

from __future__ import annotations

import base64
import binascii
import os
from os import PathLike
from pathlib import Path

from dotenv import load_dotenv

from dumpapi.tokens import TokenFactory

DEFAULT_ACCESS_TTL = 15 * 60
DEFAULT_REFRESH_TTL = 7 * 24 * 3600

_DB_SETTINGS = (
    ("DB_HOST", "127.0.0.1"),
    ("DB_PORT", "1234"),
    ("DB_NAME", "postgres"),
    ("DB_USER", "postgres"),
    ("DB_PASSWORD", "password"),
)


def load_env(path: str | PathLike[str] | None = None) -> None:
    """Load variables from a .env file without overriding existing ones."""
    env_path = Path(path) if path is not None else Path(".env")
    if not env_path.is_file():
        raise FileNotFoundError(f"Error loading .env file: {env_path}")
    load_dotenv(dotenv_path=env_path, override=False)


def get_db_env_var(name: str, default: str = "", required: bool = False) -> str:
    """Return an environment variable, its default, or raise if it is required."""
    value = os.environ.get(name)
    if value is None:
        if required:
            raise KeyError(f"required env var `{name}` not found")
        return default
    return value


def get_conn_string(require_ssl: bool) -> str:
    """Build the PostgreSQL connection string from the environment."""
    db_host, db_port, db_name, db_user, db_login = (
        get_db_env_var(var, default) for var, default in _DB_SETTINGS
    )
    conn_str = (
        f"postgresql://{db_host}:{db_port}/{db_name}"
        f"?user={db_user}&password={db_login}"
    )
    if require_ssl:
        return f"{conn_str}&sslmode=require"
    return conn_str


def requires_ssl() -> bool:
    """True when MODE (default prod) is prod or staging."""
    return os.environ.get("MODE", "prod") in ("prod", "staging")


def get_token_ttls() -> tuple[int, int]:
    """Access and refresh token lifetimes in seconds."""
    access_ttl = DEFAULT_ACCESS_TTL
    refresh_ttl = DEFAULT_REFRESH_TTL
    if (value := os.environ.get("JWT_ACCESS_TTL")) is not None:
        access_ttl = int(value)
    if (value := os.environ.get("JWT_REFRESH_TTL")) is not None:
        refresh_ttl = int(value)
    return access_ttl, refresh_ttl


def get_jwt_secret() -> bytes:
    """Decode JWT_SECRET from unpadded URL-safe base64."""
    encoded = os.environ.get("JWT_SECRET", "")
    if "=" in encoded or len(encoded) % 4 == 1:
        raise ValueError("JWT_SECRET is not unpadded URL-safe base64")
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as exc:
        raise ValueError("JWT_SECRET is not unpadded URL-safe base64") from exc


def build_token_factory() -> TokenFactory:
    """Token factory configured from the environment."""
    access_ttl, refresh_ttl = get_token_ttls()
    return TokenFactory(access_ttl, refresh_ttl, get_jwt_secret())