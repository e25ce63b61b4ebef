"""JWT tokens, Argon2id password hashing, WSGI auth middleware, user storage and SQL migrations."""

__version__ = "0.1.0"