"""Exception classes for the OpenSubsonic API client."""

from enum import IntEnum
from typing import Dict, Optional, Type


class ErrorCode(IntEnum):
    """Error codes defined by the Subsonic REST protocol."""

    GENERIC = 0
    MISSING_PARAMETER = 10
    CLIENT_MUST_UPGRADE = 20
    SERVER_MUST_UPGRADE = 30
    WRONG_CREDENTIALS = 40
    TOKEN_AUTH_NOT_SUPPORTED = 41
    NOT_AUTHORIZED = 50
    TRIAL_EXPIRED = 60
    NOT_FOUND = 70

    @classmethod
    def from_code(cls, code: int) -> Optional["ErrorCode"]:
        """Return the matching member, or None for codes outside the protocol."""
        try:
            return cls(code)
        except ValueError:
            return None


class OpenSubsonicError(Exception):
    """Base class for every error raised by this package."""

    pass


class InvalidArgumentError(OpenSubsonicError, ValueError):
    """A caller-supplied argument failed local validation.

    Raised before any request is built, so nothing goes over the wire.
    """

    pass


class ConfigError(OpenSubsonicError, ValueError):
    """Client configuration is invalid (e.g. malformed base URL)."""

    pass


class TransportError(OpenSubsonicError):
    """The HTTP request failed (network, TLS or HTTP status error).

    Attributes:
        endpoint: REST endpoint that was being called
    """

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: {message}")


class RequestTimeoutError(TransportError):
    """The HTTP request timed out."""

    pass


class DecodeError(OpenSubsonicError):
    """Response body does not match the expected envelope or payload shape."""

    pass


class SubsonicError(OpenSubsonicError):
    """Base exception for errors reported by the server in the envelope.

    Attributes:
        code: Subsonic error code
        message: Error message from server
    """

    def __init__(self, code: int, message: str):
        """Initialize Subsonic error.

        Args:
            code: Subsonic error code (0, 10, 20, 30, 40, 41, 50, 60, 70)
            message: Human-readable error message
        """
        self.code = code
        self.message = message
        super().__init__(f"Subsonic Error {code}: {message}")

    @property
    def error_code(self) -> Optional[ErrorCode]:
        """The protocol error code, or None when the server sent an unknown code."""
        return ErrorCode.from_code(self.code)


class SubsonicParameterError(SubsonicError):
    """Required parameter missing (error code 10)."""

    pass


class SubsonicVersionError(SubsonicError):
    """API version incompatibility (error codes 20, 30)."""

    pass


class ClientVersionTooOldError(SubsonicVersionError):
    """Client must upgrade (code 20)."""

    pass


class ServerVersionTooOldError(SubsonicVersionError):
    """Server must upgrade (code 30)."""

    pass


class SubsonicAuthenticationError(SubsonicError):
    """Wrong username or password (error code 40)."""

    pass


class TokenAuthenticationNotSupportedError(SubsonicAuthenticationError):
    """Token authentication not supported for this user (code 41).

    Typically an LDAP user; retry with plain authentication if acceptable.
    """

    pass


class SubsonicAuthorizationError(SubsonicError):
    """User not authorized for requested action (error code 50)."""

    pass


class SubsonicTrialError(SubsonicError):
    """Trial period expired (error code 60)."""

    pass


class SubsonicNotFoundError(SubsonicError):
    """Requested resource not found (error code 70)."""

    pass


_ERRORS_BY_CODE: Dict[int, Type[SubsonicError]] = {
    ErrorCode.MISSING_PARAMETER: SubsonicParameterError,
    ErrorCode.CLIENT_MUST_UPGRADE: ClientVersionTooOldError,
    ErrorCode.SERVER_MUST_UPGRADE: ServerVersionTooOldError,
    ErrorCode.WRONG_CREDENTIALS: SubsonicAuthenticationError,
    ErrorCode.TOKEN_AUTH_NOT_SUPPORTED: TokenAuthenticationNotSupportedError,
    ErrorCode.NOT_AUTHORIZED: SubsonicAuthorizationError,
    ErrorCode.TRIAL_EXPIRED: SubsonicTrialError,
    ErrorCode.NOT_FOUND: SubsonicNotFoundError,
}


def error_for_code(code: int, message: str) -> SubsonicError:
    """Build the exception matching a server error code.

    Unknown codes (and the generic code 0) produce a plain SubsonicError that
    still carries the exact code.
    """
    return _ERRORS_BY_CODE.get(code, SubsonicError)(code, message)
