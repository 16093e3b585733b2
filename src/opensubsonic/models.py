"""Core data models: client configuration, request descriptor and envelope."""

import dataclasses
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .auth import Auth, PlainAuth, TokenAuth
from .exceptions import ConfigError, ErrorCode, SubsonicError, error_for_code

DEFAULT_CLIENT_NAME = "opensubsonic-py"
DEFAULT_API_VERSION = "1.16.1"


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for connecting to a Subsonic-compatible server.

    Instances are immutable; the ``with_*`` methods return a new config so a
    client shared between concurrent requests never sees a change mid-flight.

    Attributes:
        base_url: Server URL, optionally with a sub-path
            (e.g. "https://music.example.com" or "https://host/music")
        username: Subsonic username
        auth: TokenAuth or PlainAuth holding the password
        client_name: Client identifier sent as the ``c`` parameter
        api_version: Subsonic API version sent as the ``v`` parameter

    Example:
        >>> config = (
        ...     ClientConfig("https://music.example.com", "admin", TokenAuth("sesame"))
        ...     .with_client_name("my-player")
        ... )
    """

    base_url: str
    username: str
    auth: Auth = field(repr=False)
    client_name: str = DEFAULT_CLIENT_NAME
    api_version: str = DEFAULT_API_VERSION

    def __post_init__(self):
        """Validate configuration on initialization."""
        try:
            url = httpx.URL(self.base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigError(f"base_url is not a valid URL: {e}") from e

        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigError("base_url must be an absolute HTTP/HTTPS URL")
        if url.query or url.fragment:
            raise ConfigError("base_url must not carry a query string or fragment")
        if not self.username:
            raise ConfigError("username is required")
        if not isinstance(self.auth, (TokenAuth, PlainAuth)):
            raise ConfigError(f"Unsupported authentication method: {type(self.auth).__name__}")
        if not self.client_name:
            raise ConfigError("client_name must not be empty")
        if not self.api_version:
            raise ConfigError("api_version must not be empty")

        # Warn about insecure HTTP connections
        if url.scheme == "http":
            warnings.warn(
                "Using HTTP instead of HTTPS for Subsonic connection. "
                "Credentials will be transmitted insecurely.",
                UserWarning,
                stacklevel=3,
            )

    def _replace(self, **changes) -> "ClientConfig":
        # base_url is unchanged, so the insecure HTTP warning was already issued
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            return dataclasses.replace(self, **changes)

    def with_client_name(self, client_name: str) -> "ClientConfig":
        return self._replace(client_name=client_name)

    def with_api_version(self, api_version: str) -> "ClientConfig":
        return self._replace(api_version=api_version)

    def with_auth(self, auth: Auth) -> "ClientConfig":
        return self._replace(auth=auth)


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully composed request: HTTP method plus absolute URL with query.

    The URL carries credentials, so only ``endpoint`` is safe to log.
    """

    method: str
    url: str
    endpoint: str


@dataclass(frozen=True)
class ApiError:
    """Error object carried by a failed envelope."""

    code: int
    message: str

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return ErrorCode.from_code(self.code)

    def to_exception(self) -> SubsonicError:
        return error_for_code(self.code, self.message)


@dataclass(frozen=True)
class ResponseEnvelope:
    """The ``subsonic-response`` wrapper common to every endpoint.

    Exactly one of ``payload`` (status ok) and ``error`` (status failed) is set.

    Attributes:
        status: "ok" or "failed"
        version: Protocol version echoed by the server
        payload: Endpoint-specific fields (everything but the envelope keys)
        error: Error reported by the server
        server_type: Server implementation (OpenSubsonic, e.g. "navidrome")
        server_version: Server software version (OpenSubsonic)
        open_subsonic: Whether the server supports OpenSubsonic extensions
    """

    status: str
    version: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    error: Optional[ApiError] = None
    server_type: Optional[str] = None
    server_version: Optional[str] = None
    open_subsonic: bool = False

    def __post_init__(self):
        if (self.payload is None) == (self.error is None):
            raise ValueError("ResponseEnvelope needs exactly one of payload or error")

    @property
    def ok(self) -> bool:
        return self.error is None
