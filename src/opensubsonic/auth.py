"""Subsonic API authentication implementation.

Two authentication methods are supported:

    - Token auth (API >= 1.13.0, recommended): a random salt is generated for
      every request and the token is computed as MD5(password + salt). Both
      are sent as the ``t`` and ``s`` query parameters.
    - Plain auth (legacy, pre-1.13.0): the password is sent hex-encoded as
      ``p=enc:<hex>``. This is an obfuscation, not a hash; anyone who can read
      the URL can recover the password.

Example:
    >>> from opensubsonic.auth import TokenAuth, auth_params
    >>> auth_params(TokenAuth("sesame"))
    [('t', '26719a...'), ('s', 'c19b2d')]

Security Notes:
    - The raw password is kept in memory; no digest is ever cached
    - Salt is regenerated for each request to prevent replay attacks
    - MD5 is used by the Subsonic protocol (not for cryptographic security)
    - The client never switches between token and plain auth on its own
"""

import hashlib
import secrets
from dataclasses import dataclass, field
from typing import List, Tuple, Union

SALT_BYTES = 6


@dataclass(frozen=True)
class TokenAuth:
    """Token-based authentication: MD5(password + salt) with a per-request salt."""

    password: str = field(repr=False)


@dataclass(frozen=True)
class PlainAuth:
    """Legacy plain authentication: hex-encoded password on every request."""

    password: str = field(repr=False)


Auth = Union[TokenAuth, PlainAuth]


def generate_salt() -> str:
    """Generate a random 12-character lowercase hex salt."""
    return secrets.token_hex(SALT_BYTES)


def compute_token(password: str, salt: str) -> str:
    """Compute the Subsonic token MD5(password + salt) as lowercase hex.

    Args:
        password: Plaintext password
        salt: Salt sent alongside the token

    Returns:
        32 lowercase hex characters

    Example:
        >>> compute_token("sesame", "c19b2d")
        '26719a1196d2a940705a59634eb18eab'
    """
    return hashlib.md5(f"{password}{salt}".encode("utf-8")).hexdigest()


def verify_token(password: str, token: str, salt: str) -> bool:
    """Check that a token matches MD5(password + salt).

    The server does this in production; the client only needs it in tests.
    """
    return secrets.compare_digest(compute_token(password, salt), token)


def hex_encode_password(password: str) -> str:
    """Render a password in the legacy ``enc:<hex>`` form."""
    return "enc:" + password.encode("utf-8").hex()


def auth_params(auth: Auth) -> List[Tuple[str, str]]:
    """Generate the authentication query parameters for a single request.

    Args:
        auth: TokenAuth or PlainAuth

    Returns:
        ``[("t", token), ("s", salt)]`` for token auth,
        ``[("p", "enc:<hex>")]`` for plain auth

    Raises:
        TypeError: If auth is not one of the supported methods
    """
    if isinstance(auth, TokenAuth):
        salt = generate_salt()
        return [("t", compute_token(auth.password, salt)), ("s", salt)]
    if isinstance(auth, PlainAuth):
        return [("p", hex_encode_password(auth.password))]
    raise TypeError(f"Unsupported authentication method: {type(auth).__name__}")
