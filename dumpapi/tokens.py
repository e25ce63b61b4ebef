"""Creation, signing, parsing and refreshing of HS256 JSON web tokens."""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

import jwt

_ALGORITHM = "HS256"


class TokenError(Exception):
    """Base class for token errors."""


class TokenExpiredError(TokenError):
    """A token is past its expiry time."""


class ExpiredAccessTokenError(TokenExpiredError):
    """The access token has expired."""

    def __init__(self, message: str = "access token expired") -> None:
        super().__init__(message)


class ExpiredRefreshTokenError(TokenExpiredError):
    """The refresh token has expired."""

    def __init__(self, message: str = "refresh token expired") -> None:
        super().__init__(message)


class InvalidSignatureError(TokenError):
    """A token's signature does not match."""

    def __init__(self, message: str = "token signature invalid") -> None:
        super().__init__(message)


class DistinctUserIdsError(TokenError):
    """The access and refresh tokens belong to different users."""

    def __init__(
        self, message: str = "refresh and access token user IDs do not match"
    ) -> None:
        super().__init__(message)


class TokenDecodeError(TokenError):
    """A token could not be decoded."""


@dataclass(frozen=True)
class _Claims:
    user_id: int
    issued_at: int | float | None = None
    expires_at: int | float | None = None

    def _payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"user_id": self.user_id}
        if self.expires_at is not None:
            payload["exp"] = self.expires_at
        if self.issued_at is not None:
            payload["iat"] = self.issued_at
        return payload


@dataclass(frozen=True)
class AccessTokenClaims(_Claims):
    """Claims carried by an access token."""


@dataclass(frozen=True)
class RefreshTokenClaims(_Claims):
    """Claims carried by a refresh token."""


_C = TypeVar("_C", bound=_Claims)


def _number(payload: Mapping[str, Any], key: str) -> int | float | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TokenDecodeError(f"claim {key!r} is not a number")
    return value


@dataclass
class TokenFactory:
    """Issues and verifies access and refresh tokens signed with a shared secret."""

    access_ttl: int
    refresh_ttl: int
    secret: bytes = field(repr=False)
    clock: Callable[[], float] = field(default=time.time, repr=False)

    def _now(self) -> int:
        return int(self.clock())

    def create_access_token(self, user_id: int) -> AccessTokenClaims:
        """Claims for a new access token."""
        now = self._now()
        return AccessTokenClaims(user_id, now, now + self.access_ttl)

    def create_refresh_token(self, user_id: int) -> RefreshTokenClaims:
        """Claims for a new refresh token."""
        now = self._now()
        return RefreshTokenClaims(user_id, now, now + self.refresh_ttl)

    def signed_string(self, claims: _Claims) -> str:
        """Sign the claims into a compact token string."""
        return jwt.encode(claims._payload(), self.secret, algorithm=_ALGORITHM)

    def _decode(self, token_string: str, claims_type: type[_C]) -> _C:
        try:
            payload = jwt.decode(
                token_string,
                self.secret,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignatureError() from exc
        except jwt.PyJWTError as exc:
            raise TokenDecodeError(str(exc)) from exc
        user_id = payload.get("user_id", 0)
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise TokenDecodeError("claim 'user_id' is not an integer")
        return claims_type(
            user_id, _number(payload, "iat"), _number(payload, "exp")
        )

    def _is_expired(self, claims: _Claims) -> bool:
        return claims.expires_at is not None and self.clock() >= claims.expires_at

    def parse_access_token(self, token_string: str) -> AccessTokenClaims:
        """Verify an access token and return its claims."""
        claims = self._decode(token_string, AccessTokenClaims)
        if self._is_expired(claims):
            raise ExpiredAccessTokenError()
        return claims

    def parse_refresh_token(self, token_string: str) -> RefreshTokenClaims:
        """Verify a refresh token and return its claims."""
        claims = self._decode(token_string, RefreshTokenClaims)
        if self._is_expired(claims):
            raise ExpiredRefreshTokenError()
        return claims

    def refresh_access_token(self, access_token: str, refresh_token: str) -> str:
        """Issue a new signed access token from a possibly expired one.

        The refresh token must be valid and belong to the same user.
        """
        access_claims = self._decode(access_token, AccessTokenClaims)
        refresh_claims = self.parse_refresh_token(refresh_token)
        if access_claims.user_id != refresh_claims.user_id:
            raise DistinctUserIdsError()
        now = self._now()
        renewed = dataclasses.replace(
            access_claims, issued_at=now, expires_at=now + self.access_ttl
        )
        return self.signed_string(renewed)