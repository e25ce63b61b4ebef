# dumpapi

Building blocks for a small user service that authenticates with JSON Web
Tokens:

- **Tokens** (`dumpapi.tokens`): a `TokenFactory` that issues HS256-signed
  access and refresh tokens carrying a `user_id` claim, parses them back, and
  issues a fresh access token from an expired one as long as the matching
  refresh token is still valid.
- **Passwords** (`dumpapi.hashing`): Argon2id hashing in the
  `$argon2id$v=19$m=65536,t=1,p=4$<salt>$<key>` format, and validation of a
  password against such a hash.
- **Models** (`dumpapi.models`): `User`, `StoredCredentials`,
  `ClientCredentials` and `AuthPayload` dataclasses.
- **Middleware** (`dumpapi.middleware`): checks an `Authorization` header of
  the form `Bearer: <token>` and yields the authenticated user id; also as a
  WSGI middleware.
- **Storage** (`dumpapi.store`): inserting and looking up users and their
  credentials through a DB-API 2.0 connection.
- **Migrations** (`dumpapi.migrations`): works out which SQL scripts listed in a
  records file have not yet been applied, and applies them in one transaction.
- **Configuration** (`dumpapi.config`): reads settings from the environment or
  a `.env` file.

## Tokens

```python
from dumpapi.config import build_token_factory
from dumpapi.tokens import ExpiredRefreshTokenError, InvalidSignatureError

factory = build_token_factory()

access = factory.signed_string(factory.create_access_token(1))
refresh = factory.signed_string(factory.create_refresh_token(1))

claims = factory.parse_access_token(access)
print(claims.user_id)  # 1

try:
    access = factory.refresh_access_token(access, refresh)
except ExpiredRefreshTokenError:
    ...  # the user has to log in again
except InvalidSignatureError:
    ...  # one of the tokens was tampered with
```

`create_access_token` and `create_refresh_token` return `AccessTokenClaims`
and `RefreshTokenClaims` (with `user_id`, `issued_at` and `expires_at`);
`signed_string` turns claims into a compact token string.

`parse_access_token` raises `ExpiredAccessTokenError` and `parse_refresh_token`
raises `ExpiredRefreshTokenError` for a token past its expiry; a bad signature
raises `InvalidSignatureError`, and a token that cannot be decoded raises
`TokenDecodeError`.

`refresh_access_token` accepts an expired access token but refuses an expired
refresh token, a bad signature on either token, and a pair whose user ids
differ (`DistinctUserIdsError`). All token errors derive from `TokenError`.

`TokenFactory` takes an optional `clock` (a function returning the current
time in seconds) which defaults to `time.time`.

## Passwords

```python
from dumpapi.hashing import hash_password, validate_password

password = "password"
stored = hash_password(password)
assert validate_password(password, stored)
```

Each hash uses a fresh random 16-byte salt; salt and key are written in
URL-safe base64. `validate_password` raises `ValueError` if the hash string is
malformed.

`ClientCredentials.to_storage_model()` in `dumpapi.models` hashes the password
this way and gives back a `StoredCredentials` ready to be saved.
`AuthPayload.to_json()` serialises tokens as `{"access": ..., "refresh": ...}`,
leaving out empty ones.

## Authenticating requests

```python
from dumpapi.middleware import Unauthorized, authenticate

try:
    user_id = authenticate(factory, "Bearer: token")
except Unauthorized:
    ...  # answer with 401
```

`auth_middleware(factory)` returns a decorator for a WSGI application. Requests
without a valid `Bearer: ` header get a `401 Unauthorized` response; for the
rest the user id is stored in the environ under `"user_id"` (`USER_ID_KEY`)
before the application is called.

```python
from dumpapi.middleware import auth_middleware

@auth_middleware(factory)
def app(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [str(environ["user_id"]).encode()]
```

## Storage

The functions in `dumpapi.store` take a DB-API 2.0 connection using the
`qmark` parameter style (such as `sqlite3`) and expect `users` and
`credentials` tables:

- `insert_user`, `get_user_by_id`, `username_exists`,
  `get_user_id_from_username`
- `insert_credentials`, `get_passhash_for_username`
- `create_user_with_credentials`, which inserts both in one transaction

Lookups that find no row raise `NotFoundError`.

## Migrations

```python
from dumpapi.migrations import (
    apply_migrations,
    get_needed_migrations,
    read_migration_records_from_db,
    read_migration_records_from_file,
)

with open("migrations/_records.txt") as records:
    wanted = read_migration_records_from_file(records)

needed = get_needed_migrations(wanted, read_migration_records_from_db(conn))
apply_migrations(conn, needed, "migrations")
```

Migrations already recorded in the `migrations` table are skipped; the rest are
applied in the order the records file lists them, each followed by a row in
the `migrations` table. If any script fails the whole transaction is rolled
back.

## Configuration

`dumpapi.config` reads these environment variables (after `load_env` has
loaded a `.env` file, which raises `FileNotFoundError` if the file is missing
and never overrides variables already set):

| Variable          | Default        | Meaning                                   |
|-------------------|----------------|-------------------------------------------|
| `MODE`            | `prod`         | `prod` and `staging` require SSL          |
| `DB_HOST`         | `127.0.0.1`    | database host                             |
| `DB_PORT`         | `1234`         | database port                             |
| `DB_NAME`         | `postgres`     | database name                             |
| `DB_USER`         | `postgres`     | database user                             |
| `DB_PASSWORD`     | `password`     | database password                         |
| `JWT_ACCESS_TTL`  | `900`          | access token lifetime in seconds          |
| `JWT_REFRESH_TTL` | `604800`       | refresh token lifetime in seconds         |
| `JWT_SECRET`      | (empty)        | signing key, unpadded URL-safe base64     |

`get_conn_string(requires_ssl())` builds the PostgreSQL connection string from
these values, adding `&sslmode=require` when SSL is required.
`build_token_factory()` builds a `TokenFactory` from the TTLs and secret;
`get_jwt_secret` raises `ValueError` if the secret is not unpadded URL-safe
base64.

## What this package does not do

There is no HTTP server, no routes for signing up, logging in or refreshing
tokens, and no command to start a service. The package does not open database
connections itself: pass it a connection of your own, and provide the table
definitions and migration scripts.