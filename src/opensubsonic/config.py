"""Client settings loaded from environment variables (NO .env files)."""

import os
from dataclasses import dataclass
from typing import Optional

from .auth import PlainAuth, TokenAuth
from .client import DEFAULT_TIMEOUT
from .exceptions import ConfigError
from .models import DEFAULT_API_VERSION, DEFAULT_CLIENT_NAME, ClientConfig

AUTH_METHODS = ('token', 'plain')


@dataclass
class ClientSettings:
    """Connection settings read from the shell environment."""

    url: str
    username: str
    password: str
    auth_method: str = 'token'
    client_name: str = DEFAULT_CLIENT_NAME
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_environment(cls) -> 'ClientSettings':
        """Load settings from environment variables.

        Required: SUBSONIC_URL, SUBSONIC_USER, SUBSONIC_PASSWORD.
        Optional: SUBSONIC_AUTH (token|plain), SUBSONIC_CLIENT_NAME,
        SUBSONIC_API_VERSION, SUBSONIC_TIMEOUT (seconds).

        Raises:
            ConfigError: If required variables are missing or values are invalid
        """
        required = {
            'SUBSONIC_URL': os.getenv('SUBSONIC_URL'),
            'SUBSONIC_USER': os.getenv('SUBSONIC_USER'),
            'SUBSONIC_PASSWORD': os.getenv('SUBSONIC_PASSWORD'),
        }
        missing = [var for var, value in required.items() if not value]
        if missing:
            raise ConfigError(
                f"Required environment variables missing: {', '.join(missing)}\n"
                f"Example: export SUBSONIC_URL='https://your-server.com'"
            )

        auth_method = os.getenv('SUBSONIC_AUTH', 'token').lower()
        if auth_method not in AUTH_METHODS:
            raise ConfigError(
                f"Invalid SUBSONIC_AUTH: {auth_method}. Must be 'token' or 'plain'"
            )

        timeout_value = os.getenv('SUBSONIC_TIMEOUT', str(DEFAULT_TIMEOUT))
        try:
            timeout = float(timeout_value)
        except ValueError as e:
            raise ConfigError(f"Invalid SUBSONIC_TIMEOUT: {timeout_value}") from e
        if timeout <= 0:
            raise ConfigError(f"Invalid SUBSONIC_TIMEOUT: {timeout_value}. Must be > 0")

        return cls(
            url=required['SUBSONIC_URL'],
            username=required['SUBSONIC_USER'],
            password=required['SUBSONIC_PASSWORD'],
            auth_method=auth_method,
            client_name=os.getenv('SUBSONIC_CLIENT_NAME') or DEFAULT_CLIENT_NAME,
            api_version=os.getenv('SUBSONIC_API_VERSION') or DEFAULT_API_VERSION,
            timeout=timeout,
        )

    def to_client_config(self, client_name: Optional[str] = None) -> ClientConfig:
        """Convert to the immutable ClientConfig used by SubsonicClient."""
        auth_class = PlainAuth if self.auth_method == 'plain' else TokenAuth
        return ClientConfig(
            base_url=self.url,
            username=self.username,
            auth=auth_class(self.password),
            client_name=client_name or self.client_name,
            api_version=self.api_version,
        )

    def __repr__(self) -> str:
        """Return string representation with the password masked."""
        return (
            f"ClientSettings("
            f"url='{self.url}', "
            f"username='{self.username}', "
            f"password='***', "
            f"auth_method='{self.auth_method}', "
            f"client_name='{self.client_name}', "
            f"api_version='{self.api_version}', "
            f"timeout={self.timeout}"
            f")"
        )
