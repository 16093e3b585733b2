"""Async client for the Subsonic / OpenSubsonic REST API."""

__version__ = "0.1.0"

from .auth import PlainAuth, TokenAuth, compute_token, generate_salt, verify_token
from .client import SubsonicClient
from .data import (
    AlbumID3,
    AlbumListType,
    AlbumWithSongsID3,
    ArtistID3,
    Child,
    ClientInfo,
    JukeboxAction,
    JukeboxPlaylist,
    JukeboxStatus,
    License,
    Playlist,
    PlaylistWithSongs,
    PodcastStatus,
    SubsonicModel,
)
from .exceptions import (
    ClientVersionTooOldError,
    ConfigError,
    DecodeError,
    ErrorCode,
    InvalidArgumentError,
    OpenSubsonicError,
    RequestTimeoutError,
    ServerVersionTooOldError,
    SubsonicAuthenticationError,
    SubsonicAuthorizationError,
    SubsonicError,
    SubsonicNotFoundError,
    SubsonicParameterError,
    SubsonicTrialError,
    SubsonicVersionError,
    TokenAuthenticationNotSupportedError,
    TransportError,
)
from .models import ApiError, ClientConfig, RequestDescriptor, ResponseEnvelope
from .params import ParameterSet

__all__ = [
    # Client
    "SubsonicClient",
    "ClientConfig",
    # Authentication
    "TokenAuth",
    "PlainAuth",
    "generate_salt",
    "compute_token",
    "verify_token",
    # Request/response
    "ParameterSet",
    "RequestDescriptor",
    "ResponseEnvelope",
    "ApiError",
    # Models
    "SubsonicModel",
    "AlbumID3",
    "AlbumWithSongsID3",
    "ArtistID3",
    "Child",
    "ClientInfo",
    "JukeboxPlaylist",
    "JukeboxStatus",
    "License",
    "Playlist",
    "PlaylistWithSongs",
    # Enums
    "AlbumListType",
    "JukeboxAction",
    "PodcastStatus",
    "ErrorCode",
    # Exceptions
    "OpenSubsonicError",
    "InvalidArgumentError",
    "ConfigError",
    "TransportError",
    "RequestTimeoutError",
    "DecodeError",
    "SubsonicError",
    "SubsonicParameterError",
    "SubsonicVersionError",
    "ClientVersionTooOldError",
    "ServerVersionTooOldError",
    "SubsonicAuthenticationError",
    "TokenAuthenticationNotSupportedError",
    "SubsonicAuthorizationError",
    "SubsonicTrialError",
    "SubsonicNotFoundError",
]
