"""Async HTTP client for the Subsonic / OpenSubsonic REST API."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from .auth import PlainAuth, hex_encode_password
from .data import (
    AlbumID3,
    AlbumInfo,
    AlbumListType,
    AlbumWithSongsID3,
    ArtistInfo,
    ArtistInfo2,
    ArtistsID3,
    ArtistWithAlbumsID3,
    Bookmark,
    ChatMessage,
    Child,
    ClientInfo,
    Directory,
    Genre,
    Indexes,
    InternetRadioStation,
    JukeboxAction,
    JukeboxPlaylist,
    JukeboxStatus,
    License,
    Lyrics,
    LyricsList,
    MusicFolder,
    NowPlayingEntry,
    OpenSubsonicExtension,
    PlayQueue,
    PlayQueueByIndex,
    Playlist,
    PlaylistWithSongs,
    PodcastChannel,
    PodcastEpisode,
    ScanStatus,
    SearchResult,
    SearchResult2,
    SearchResult3,
    Share,
    Starred,
    Starred2,
    TokenInfo,
    TranscodeDecision,
    User,
)
from .envelope import decode_envelope, extract, raise_for_envelope
from .exceptions import DecodeError, InvalidArgumentError, RequestTimeoutError, TransportError
from .models import ClientConfig, RequestDescriptor, ResponseEnvelope
from .params import ParameterSet
from .request import build_request

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
JSON_CONTENT_TYPES = ("application/json", "text/json")

Ids = Union[str, Sequence[str], None]
FolderIds = Union[int, Sequence[int], None]

# Keyword argument -> query parameter for the user role flags
USER_ROLE_PARAMS = {
    "ldap_authenticated": "ldapAuthenticated",
    "admin_role": "adminRole",
    "settings_role": "settingsRole",
    "stream_role": "streamRole",
    "jukebox_role": "jukeboxRole",
    "download_role": "downloadRole",
    "upload_role": "uploadRole",
    "playlist_role": "playlistRole",
    "cover_art_role": "coverArtRole",
    "comment_role": "commentRole",
    "podcast_role": "podcastRole",
    "share_role": "shareRole",
    "video_conversion_role": "videoConversionRole",
}


def _require(name: str, value: Optional[str]) -> str:
    """Reject empty or blank identifiers before anything is sent."""
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{name} must not be empty")
    return value


def _require_each(name: str, values: Ids) -> List[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    return [_require(name, value) for value in values]


class SubsonicClient:
    """Async client for Subsonic API v1.16.1 with OpenSubsonic extensions.

    Every endpoint is a coroutine; the client holds no per-request state, so
    any number of calls may run concurrently on one instance:

        >>> async with SubsonicClient(config) as client:
        ...     albums, songs = await asyncio.gather(
        ...         client.get_album_list2(AlbumListType.NEWEST, size=10),
        ...         client.get_random_songs(size=20),
        ...     )

    Attributes:
        config: Immutable ClientConfig with server URL and credentials
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            config: ClientConfig with server URL and credentials
            http_client: Shared httpx.AsyncClient; when given, the caller owns
                it and aclose() leaves it open
            timeout: Request timeout in seconds for the internally created client
        """
        self.config = config
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout),
                follow_redirects=True,
            )
        self._http = http_client

        if isinstance(config.auth, PlainAuth):
            logger.warning(
                "Using plain (hex-encoded) password authentication; "
                "prefer token authentication where the server supports it"
            )
        logger.info(f"Initialized Subsonic client for {config.base_url}")

    async def __aenter__(self) -> "SubsonicClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Shared request pipeline
    # ------------------------------------------------------------------

    def _build(
        self, endpoint: str, params: Optional[ParameterSet] = None, method: str = "GET"
    ) -> RequestDescriptor:
        return build_request(self.config, endpoint, params, method)

    async def _send(
        self, descriptor: RequestDescriptor, json_body: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        # The URL carries credentials; only the endpoint name is logged.
        logger.debug(f"{descriptor.method} {descriptor.endpoint}")
        try:
            response = await self._http.request(
                descriptor.method, descriptor.url, json=json_body
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                descriptor.endpoint, f"Request timed out ({type(e).__name__})"
            ) from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                descriptor.endpoint, f"HTTP {e.response.status_code} from server"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(descriptor.endpoint, f"{type(e).__name__}: {e}") from e
        return response

    async def _get_envelope(
        self,
        endpoint: str,
        params: Optional[ParameterSet] = None,
        method: str = "GET",
        json_body: Optional[Dict[str, Any]] = None,
    ) -> ResponseEnvelope:
        response = await self._send(self._build(endpoint, params, method), json_body)
        return decode_envelope(response.content)

    async def _get_response(
        self,
        endpoint: str,
        params: Optional[ParameterSet] = None,
        method: str = "GET",
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a request and return the payload of its ok envelope.

        Raises:
            SubsonicError: Subclass matching the API error code
            TransportError: For network and HTTP-level failures
            DecodeError: If the body is not a Subsonic envelope
        """
        envelope = await self._get_envelope(endpoint, params, method, json_body)
        return raise_for_envelope(envelope)

    async def _get_bytes(self, endpoint: str, params: ParameterSet) -> bytes:
        """Fetch a binary resource.

        Servers report errors on binary endpoints as a JSON envelope, so a JSON
        content type is decoded rather than returned.
        """
        response = await self._send(self._build(endpoint, params))
        content_type = response.headers.get("content-type", "").lower()
        if any(json_type in content_type for json_type in JSON_CONTENT_TYPES):
            logger.warning(f"Expected binary response from {endpoint} but got {content_type}")
            raise_for_envelope(decode_envelope(response.content))
            raise DecodeError(f"Expected binary response from {endpoint} but got JSON with status=ok")
        return response.content

    # ------------------------------------------------------------------
    # System
    # ------------------------------------------------------------------

    async def ping(self) -> ResponseEnvelope:
        """Test connectivity and credentials.

        Returns:
            The decoded envelope, carrying server type, version and the
            OpenSubsonic flag

        Raises:
            SubsonicAuthenticationError: If credentials are invalid
        """
        envelope = await self._get_envelope("ping")
        raise_for_envelope(envelope)
        if envelope.open_subsonic:
            logger.info(
                f"OpenSubsonic server detected: {envelope.server_type} {envelope.server_version}"
            )
        logger.info("Subsonic ping successful")
        return envelope

    async def get_license(self) -> License:
        data = await self._get_response("getLicense")
        return extract(data, "license", License)

    async def get_open_subsonic_extensions(self) -> List[OpenSubsonicExtension]:
        data = await self._get_response("getOpenSubsonicExtensions")
        return extract(data, "openSubsonicExtensions", OpenSubsonicExtension, many=True)

    async def token_info(self) -> TokenInfo:
        data = await self._get_response("tokenInfo")
        return extract(data, "tokenInfo", TokenInfo)

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    async def get_music_folders(self) -> List[MusicFolder]:
        data = await self._get_response("getMusicFolders")
        return extract(data, "musicFolders", MusicFolder, item="musicFolder", many=True)

    async def get_indexes(
        self, music_folder_id: Optional[int] = None, if_modified_since: Optional[int] = None
    ) -> Indexes:
        """Get the file-structure artist index.

        Args:
            music_folder_id: Restrict to one music folder
            if_modified_since: Only return data changed after this time (ms since epoch)
        """
        params = ParameterSet()
        params.add("musicFolderId", music_folder_id)
        params.add("ifModifiedSince", if_modified_since)
        data = await self._get_response("getIndexes", params)
        return extract(data, "indexes", Indexes)

    async def get_music_directory(self, id: str) -> Directory:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getMusicDirectory", params)
        return extract(data, "directory", Directory)

    async def get_genres(self) -> List[Genre]:
        data = await self._get_response("getGenres")
        return extract(data, "genres", Genre, item="genre", many=True)

    async def get_artists(self, music_folder_id: Optional[int] = None) -> ArtistsID3:
        params = ParameterSet().add("musicFolderId", music_folder_id)
        data = await self._get_response("getArtists", params)
        return extract(data, "artists", ArtistsID3)

    async def get_artist(self, id: str) -> ArtistWithAlbumsID3:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getArtist", params)
        return extract(data, "artist", ArtistWithAlbumsID3)

    async def get_album(self, id: str) -> AlbumWithSongsID3:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getAlbum", params)
        return extract(data, "album", AlbumWithSongsID3)

    async def get_song(self, id: str) -> Child:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getSong", params)
        return extract(data, "song", Child)

    async def get_videos(self) -> List[Child]:
        data = await self._get_response("getVideos")
        return extract(data, "videos", Child, item="video", many=True)

    async def get_artist_info(
        self,
        id: str,
        count: Optional[int] = None,
        include_not_present: Optional[bool] = None,
    ) -> ArtistInfo:
        params = ParameterSet().add("id", _require("id", id))
        params.add("count", count).add("includeNotPresent", include_not_present)
        data = await self._get_response("getArtistInfo", params)
        return extract(data, "artistInfo", ArtistInfo)

    async def get_artist_info2(
        self,
        id: str,
        count: Optional[int] = None,
        include_not_present: Optional[bool] = None,
    ) -> ArtistInfo2:
        params = ParameterSet().add("id", _require("id", id))
        params.add("count", count).add("includeNotPresent", include_not_present)
        data = await self._get_response("getArtistInfo2", params)
        return extract(data, "artistInfo2", ArtistInfo2)

    async def get_album_info(self, id: str) -> AlbumInfo:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getAlbumInfo", params)
        return extract(data, "albumInfo", AlbumInfo)

    async def get_album_info2(self, id: str) -> AlbumInfo:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getAlbumInfo2", params)
        return extract(data, "albumInfo", AlbumInfo)

    async def get_similar_songs(self, id: str, count: Optional[int] = None) -> List[Child]:
        params = ParameterSet().add("id", _require("id", id)).add("count", count)
        data = await self._get_response("getSimilarSongs", params)
        return extract(data, "similarSongs", Child, item="song", many=True)

    async def get_similar_songs2(self, id: str, count: Optional[int] = None) -> List[Child]:
        params = ParameterSet().add("id", _require("id", id)).add("count", count)
        data = await self._get_response("getSimilarSongs2", params)
        return extract(data, "similarSongs2", Child, item="song", many=True)

    async def get_top_songs(self, artist: str, count: Optional[int] = None) -> List[Child]:
        params = ParameterSet().add("artist", _require("artist", artist)).add("count", count)
        data = await self._get_response("getTopSongs", params)
        return extract(data, "topSongs", Child, item="song", many=True)

    # ------------------------------------------------------------------
    # Album and song lists
    # ------------------------------------------------------------------

    @staticmethod
    def _album_list_params(
        list_type: AlbumListType,
        size: Optional[int],
        offset: Optional[int],
        from_year: Optional[int],
        to_year: Optional[int],
        genre: Optional[str],
        music_folder_id: FolderIds,
    ) -> ParameterSet:
        try:
            list_type = AlbumListType(list_type)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown album list type: {list_type!r}") from e
        if list_type is AlbumListType.BY_YEAR and (from_year is None or to_year is None):
            raise InvalidArgumentError("byYear album lists need from_year and to_year")
        if list_type is AlbumListType.BY_GENRE and not genre:
            raise InvalidArgumentError("byGenre album lists need a genre")

        params = ParameterSet().add("type", list_type)
        params.add("size", size).add("offset", offset)
        params.add("fromYear", from_year).add("toYear", to_year)
        params.add("genre", genre).add("musicFolderId", music_folder_id)
        return params

    async def get_album_list(
        self,
        list_type: AlbumListType,
        size: Optional[int] = None,
        offset: Optional[int] = None,
        from_year: Optional[int] = None,
        to_year: Optional[int] = None,
        genre: Optional[str] = None,
        music_folder_id: FolderIds = None,
    ) -> List[Child]:
        """Get a list of albums organised by folder structure.

        See get_album_list2 for the arguments.
        """
        params = self._album_list_params(
            list_type, size, offset, from_year, to_year, genre, music_folder_id
        )
        data = await self._get_response("getAlbumList", params)
        return extract(data, "albumList", Child, item="album", many=True)

    async def get_album_list2(
        self,
        list_type: AlbumListType,
        size: Optional[int] = None,
        offset: Optional[int] = None,
        from_year: Optional[int] = None,
        to_year: Optional[int] = None,
        genre: Optional[str] = None,
        music_folder_id: FolderIds = None,
    ) -> List[AlbumID3]:
        """Get a list of albums organised by ID3 tags.

        Args:
            list_type: Ordering of the list (newest, random, byYear ...)
            size: Number of albums to return (server default 10, max 500)
            offset: List offset, for paging
            from_year: First year, required for byYear
            to_year: Last year, required for byYear
            genre: Genre name, required for byGenre
            music_folder_id: One folder id or several; several are sent as
                repeated ``musicFolderId`` parameters

        Returns:
            List of AlbumID3 objects

        Raises:
            InvalidArgumentError: If byYear/byGenre lack their arguments
        """
        params = self._album_list_params(
            list_type, size, offset, from_year, to_year, genre, music_folder_id
        )
        data = await self._get_response("getAlbumList2", params)
        return extract(data, "albumList2", AlbumID3, item="album", many=True)

    async def get_random_songs(
        self,
        size: Optional[int] = None,
        genre: Optional[str] = None,
        from_year: Optional[int] = None,
        to_year: Optional[int] = None,
        music_folder_id: FolderIds = None,
    ) -> List[Child]:
        params = ParameterSet().add("size", size).add("genre", genre)
        params.add("fromYear", from_year).add("toYear", to_year)
        params.add("musicFolderId", music_folder_id)
        data = await self._get_response("getRandomSongs", params)
        return extract(data, "randomSongs", Child, item="song", many=True)

    async def get_songs_by_genre(
        self,
        genre: str,
        count: Optional[int] = None,
        offset: Optional[int] = None,
        music_folder_id: FolderIds = None,
    ) -> List[Child]:
        params = ParameterSet().add("genre", _require("genre", genre))
        params.add("count", count).add("offset", offset)
        params.add("musicFolderId", music_folder_id)
        data = await self._get_response("getSongsByGenre", params)
        return extract(data, "songsByGenre", Child, item="song", many=True)

    async def get_now_playing(self) -> List[NowPlayingEntry]:
        data = await self._get_response("getNowPlaying")
        return extract(data, "nowPlaying", NowPlayingEntry, item="entry", many=True)

    async def get_starred(self, music_folder_id: Optional[int] = None) -> Starred:
        params = ParameterSet().add("musicFolderId", music_folder_id)
        data = await self._get_response("getStarred", params)
        return extract(data, "starred", Starred)

    async def get_starred2(self, music_folder_id: Optional[int] = None) -> Starred2:
        params = ParameterSet().add("musicFolderId", music_folder_id)
        data = await self._get_response("getStarred2", params)
        return extract(data, "starred2", Starred2)

    # ------------------------------------------------------------------
    # Searching
    # ------------------------------------------------------------------

    async def search(
        self,
        artist: Optional[str] = None,
        album: Optional[str] = None,
        title: Optional[str] = None,
        any: Optional[str] = None,
        count: Optional[int] = None,
        offset: Optional[int] = None,
        newer_than: Optional[int] = None,
    ) -> SearchResult:
        """Legacy search (deprecated since API 1.4.0, prefer search3)."""
        params = ParameterSet().add("artist", artist).add("album", album)
        params.add("title", title).add("any", any)
        params.add("count", count).add("offset", offset).add("newerThan", newer_than)
        data = await self._get_response("search", params)
        return extract(data, "searchResult", SearchResult)

    @staticmethod
    def _search_params(
        query: str,
        artist_count: Optional[int],
        artist_offset: Optional[int],
        album_count: Optional[int],
        album_offset: Optional[int],
        song_count: Optional[int],
        song_offset: Optional[int],
        music_folder_id: Optional[int],
    ) -> ParameterSet:
        # An empty query is valid for search3 on OpenSubsonic servers (lists everything)
        if query is None:
            raise InvalidArgumentError("query must not be None")
        params = ParameterSet().add("query", query)
        params.add("artistCount", artist_count).add("artistOffset", artist_offset)
        params.add("albumCount", album_count).add("albumOffset", album_offset)
        params.add("songCount", song_count).add("songOffset", song_offset)
        params.add("musicFolderId", music_folder_id)
        return params

    async def search2(
        self,
        query: str,
        artist_count: Optional[int] = None,
        artist_offset: Optional[int] = None,
        album_count: Optional[int] = None,
        album_offset: Optional[int] = None,
        song_count: Optional[int] = None,
        song_offset: Optional[int] = None,
        music_folder_id: Optional[int] = None,
    ) -> SearchResult2:
        params = self._search_params(
            query, artist_count, artist_offset, album_count, album_offset,
            song_count, song_offset, music_folder_id,
        )
        data = await self._get_response("search2", params)
        return extract(data, "searchResult2", SearchResult2)

    async def search3(
        self,
        query: str,
        artist_count: Optional[int] = None,
        artist_offset: Optional[int] = None,
        album_count: Optional[int] = None,
        album_offset: Optional[int] = None,
        song_count: Optional[int] = None,
        song_offset: Optional[int] = None,
        music_folder_id: Optional[int] = None,
    ) -> SearchResult3:
        """Search artists, albums and songs by ID3 tags.

        Args:
            query: Search query; "" lists everything on OpenSubsonic servers
            artist_count: Maximum artists to return (server default 20)
            artist_offset: Artist result offset, for paging
            album_count: Maximum albums to return (server default 20)
            album_offset: Album result offset, for paging
            song_count: Maximum songs to return (server default 20)
            song_offset: Song result offset, for paging
            music_folder_id: Restrict to one music folder

        Returns:
            SearchResult3 with artist, album and song lists
        """
        params = self._search_params(
            query, artist_count, artist_offset, album_count, album_offset,
            song_count, song_offset, music_folder_id,
        )
        data = await self._get_response("search3", params)
        return extract(data, "searchResult3", SearchResult3)

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    async def get_playlists(self, username: Optional[str] = None) -> List[Playlist]:
        params = ParameterSet().add("username", username)
        data = await self._get_response("getPlaylists", params)
        return extract(data, "playlists", Playlist, item="playlist", many=True)

    async def get_playlist(self, id: str) -> PlaylistWithSongs:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getPlaylist", params)
        return extract(data, "playlist", PlaylistWithSongs)

    async def create_playlist(
        self,
        name: Optional[str] = None,
        song_ids: Ids = None,
        playlist_id: Optional[str] = None,
    ) -> PlaylistWithSongs:
        """Create a playlist, or replace the songs of an existing one.

        Args:
            name: Name of a new playlist
            song_ids: Songs in playlist order
            playlist_id: Existing playlist to overwrite instead of creating one

        Raises:
            InvalidArgumentError: If neither name nor playlist_id is given
        """
        if not name and not playlist_id:
            raise InvalidArgumentError("create_playlist needs a name or a playlist_id")
        params = ParameterSet().add("playlistId", playlist_id).add("name", name)
        params.add("songId", _require_each("song_ids", song_ids))
        data = await self._get_response("createPlaylist", params)
        return extract(data, "playlist", PlaylistWithSongs)

    async def update_playlist(
        self,
        playlist_id: str,
        name: Optional[str] = None,
        comment: Optional[str] = None,
        public: Optional[bool] = None,
        song_ids_to_add: Ids = None,
        song_indexes_to_remove: Optional[Sequence[int]] = None,
    ) -> None:
        params = ParameterSet().add("playlistId", _require("playlist_id", playlist_id))
        params.add("name", name).add("comment", comment).add("public", public)
        params.add("songIdToAdd", _require_each("song_ids_to_add", song_ids_to_add))
        params.add("songIndexToRemove", song_indexes_to_remove)
        await self._get_response("updatePlaylist", params)

    async def delete_playlist(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("deletePlaylist", params)

    # ------------------------------------------------------------------
    # Media retrieval
    # ------------------------------------------------------------------

    @staticmethod
    def _stream_params(
        id: str, max_bit_rate: Optional[int], format: Optional[str]
    ) -> ParameterSet:
        params = ParameterSet().add("id", _require("id", id))
        return params.add("maxBitRate", max_bit_rate).add("format", format)

    async def stream(
        self,
        id: str,
        max_bit_rate: Optional[int] = None,
        format: Optional[str] = None,
        time_offset: Optional[int] = None,
        estimate_content_length: Optional[bool] = None,
    ) -> bytes:
        """Download a song or video as the server streams it.

        Args:
            id: Song or video id
            max_bit_rate: Transcode to at most this bit rate (kbps)
            format: Target format, or "raw" to disable transcoding
            time_offset: Start offset in seconds (video only on most servers)
            estimate_content_length: Ask the server to set Content-Length

        Returns:
            The media bytes
        """
        params = self._stream_params(id, max_bit_rate, format)
        params.add("timeOffset", time_offset)
        params.add("estimateContentLength", estimate_content_length)
        return await self._get_bytes("stream", params)

    def stream_url(
        self,
        id: str,
        max_bit_rate: Optional[int] = None,
        format: Optional[str] = None,
    ) -> str:
        """Build a streaming URL for an external player without any request.

        The URL embeds credentials for the configured user.
        """
        return self._build("stream", self._stream_params(id, max_bit_rate, format)).url

    async def download(self, id: str) -> bytes:
        params = ParameterSet().add("id", _require("id", id))
        return await self._get_bytes("download", params)

    def hls_url(
        self,
        id: str,
        bit_rate: Union[int, Sequence[Union[int, str]], None] = None,
        audio_track: Optional[str] = None,
    ) -> str:
        """Build an HLS playlist URL without any request.

        Args:
            id: Song or video id
            bit_rate: One bit rate or several (e.g. ``[1000, "1500@1920x1080"]``)
            audio_track: Audio track id (video only)
        """
        params = ParameterSet().add("id", _require("id", id))
        params.add("bitRate", bit_rate).add("audioTrack", audio_track)
        return self._build("hls.m3u8", params).url

    async def get_captions(self, id: str, format: Optional[str] = None) -> bytes:
        params = ParameterSet().add("id", _require("id", id)).add("format", format)
        return await self._get_bytes("getCaptions", params)

    async def get_cover_art(self, id: str, size: Optional[int] = None) -> bytes:
        params = ParameterSet().add("id", _require("id", id)).add("size", size)
        return await self._get_bytes("getCoverArt", params)

    def cover_art_url(self, id: str, size: Optional[int] = None) -> str:
        """Build a cover art URL without any request."""
        params = ParameterSet().add("id", _require("id", id)).add("size", size)
        return self._build("getCoverArt", params).url

    async def get_lyrics(
        self, artist: Optional[str] = None, title: Optional[str] = None
    ) -> Lyrics:
        params = ParameterSet().add("artist", artist).add("title", title)
        data = await self._get_response("getLyrics", params)
        return extract(data, "lyrics", Lyrics)

    async def get_lyrics_by_song_id(self, id: str) -> LyricsList:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getLyricsBySongId", params)
        return extract(data, "lyricsList", LyricsList)

    async def get_avatar(self, username: str) -> bytes:
        params = ParameterSet().add("username", _require("username", username))
        return await self._get_bytes("getAvatar", params)

    # ------------------------------------------------------------------
    # Media annotation
    # ------------------------------------------------------------------

    @staticmethod
    def _star_params(ids: Ids, album_ids: Ids, artist_ids: Ids) -> ParameterSet:
        params = ParameterSet().add("id", _require_each("ids", ids))
        params.add("albumId", _require_each("album_ids", album_ids))
        params.add("artistId", _require_each("artist_ids", artist_ids))
        if not params:
            raise InvalidArgumentError("At least one id, album id or artist id is required")
        return params

    async def star(self, ids: Ids = None, album_ids: Ids = None, artist_ids: Ids = None) -> None:
        """Star songs, albums and/or artists."""
        await self._get_response("star", self._star_params(ids, album_ids, artist_ids))

    async def unstar(
        self, ids: Ids = None, album_ids: Ids = None, artist_ids: Ids = None
    ) -> None:
        await self._get_response("unstar", self._star_params(ids, album_ids, artist_ids))

    async def set_rating(self, id: str, rating: int) -> None:
        """Rate a song, album or artist from 1 to 5; 0 removes the rating."""
        if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= 5:
            raise InvalidArgumentError(f"rating must be an integer from 0 to 5, got {rating!r}")
        params = ParameterSet().add("id", _require("id", id)).add("rating", rating)
        await self._get_response("setRating", params)

    async def scrobble(
        self,
        id: Union[str, Sequence[str]],
        time: Union[int, Sequence[int], None] = None,
        submission: Optional[bool] = None,
    ) -> None:
        """Register playback of one or more songs.

        Args:
            id: Song id, or several song ids
            time: Play time (ms since epoch) per song, in the same order
            submission: False sends a "now playing" notification instead
        """
        ids = _require_each("id", id)
        if not ids:
            raise InvalidArgumentError("id must not be empty")
        params = ParameterSet().add("id", ids).add("time", time)
        params.add("submission", submission)
        await self._get_response("scrobble", params)

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def get_shares(self) -> List[Share]:
        data = await self._get_response("getShares")
        return extract(data, "shares", Share, item="share", many=True)

    async def create_share(
        self,
        ids: Union[str, Sequence[str]],
        description: Optional[str] = None,
        expires: Optional[int] = None,
    ) -> List[Share]:
        shared = _require_each("ids", ids)
        if not shared:
            raise InvalidArgumentError("ids must not be empty")
        params = ParameterSet().add("id", shared)
        params.add("description", description).add("expires", expires)
        data = await self._get_response("createShare", params)
        return extract(data, "shares", Share, item="share", many=True)

    async def update_share(
        self,
        id: str,
        description: Optional[str] = None,
        expires: Optional[int] = None,
    ) -> None:
        params = ParameterSet().add("id", _require("id", id))
        params.add("description", description).add("expires", expires)
        await self._get_response("updateShare", params)

    async def delete_share(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("deleteShare", params)

    # ------------------------------------------------------------------
    # Podcast
    # ------------------------------------------------------------------

    async def get_podcasts(
        self, include_episodes: Optional[bool] = None, id: Optional[str] = None
    ) -> List[PodcastChannel]:
        params = ParameterSet().add("includeEpisodes", include_episodes).add("id", id)
        data = await self._get_response("getPodcasts", params)
        return extract(data, "podcasts", PodcastChannel, item="channel", many=True)

    async def get_newest_podcasts(self, count: Optional[int] = None) -> List[PodcastEpisode]:
        params = ParameterSet().add("count", count)
        data = await self._get_response("getNewestPodcasts", params)
        return extract(data, "newestPodcasts", PodcastEpisode, item="episode", many=True)

    async def get_podcast_episode(self, id: str) -> PodcastEpisode:
        params = ParameterSet().add("id", _require("id", id))
        data = await self._get_response("getPodcastEpisode", params)
        return extract(data, "podcastEpisode", PodcastEpisode)

    async def refresh_podcasts(self) -> None:
        await self._get_response("refreshPodcasts")

    async def create_podcast_channel(self, url: str) -> None:
        params = ParameterSet().add("url", _require("url", url))
        await self._get_response("createPodcastChannel", params)

    async def delete_podcast_channel(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("deletePodcastChannel", params)

    async def delete_podcast_episode(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("deletePodcastEpisode", params)

    async def download_podcast_episode(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("downloadPodcastEpisode", params)

    # ------------------------------------------------------------------
    # Jukebox
    # ------------------------------------------------------------------

    async def jukebox_control(
        self,
        action: JukeboxAction,
        index: Optional[int] = None,
        offset: Optional[int] = None,
        ids: Ids = None,
        gain: Optional[float] = None,
    ) -> Union[JukeboxStatus, JukeboxPlaylist]:
        """Control server-side playback.

        Args:
            action: Jukebox action
            index: Playlist index for "skip" and "remove"
            offset: Start offset in seconds for "skip"
            ids: Song ids for "add" and "set"
            gain: Volume from 0.0 to 1.0 for "setGain"

        Returns:
            JukeboxPlaylist for the "get" action, JukeboxStatus otherwise
        """
        try:
            action = JukeboxAction(action)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown jukebox action: {action!r}") from e
        if gain is not None and not 0.0 <= gain <= 1.0:
            raise InvalidArgumentError(f"gain must be between 0.0 and 1.0, got {gain}")
        params = ParameterSet().add("action", action)
        params.add("index", index).add("offset", offset)
        params.add("id", _require_each("ids", ids)).add("gain", gain)
        data = await self._get_response("jukeboxControl", params)
        if action is JukeboxAction.GET:
            return extract(data, "jukeboxPlaylist", JukeboxPlaylist)
        return extract(data, "jukeboxStatus", JukeboxStatus)

    # ------------------------------------------------------------------
    # Internet radio
    # ------------------------------------------------------------------

    async def get_internet_radio_stations(self) -> List[InternetRadioStation]:
        data = await self._get_response("getInternetRadioStations")
        return extract(
            data,
            "internetRadioStations",
            InternetRadioStation,
            item="internetRadioStation",
            many=True,
        )

    async def create_internet_radio_station(
        self, stream_url: str, name: str, homepage_url: Optional[str] = None
    ) -> None:
        params = ParameterSet().add("streamUrl", _require("stream_url", stream_url))
        params.add("name", _require("name", name)).add("homepageUrl", homepage_url)
        await self._get_response("createInternetRadioStation", params)

    async def update_internet_radio_station(
        self, id: str, stream_url: str, name: str, homepage_url: Optional[str] = None
    ) -> None:
        params = ParameterSet().add("id", _require("id", id))
        params.add("streamUrl", _require("stream_url", stream_url))
        params.add("name", _require("name", name)).add("homepageUrl", homepage_url)
        await self._get_response("updateInternetRadioStation", params)

    async def delete_internet_radio_station(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("deleteInternetRadioStation", params)

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def get_chat_messages(self, since: Optional[int] = None) -> List[ChatMessage]:
        params = ParameterSet().add("since", since)
        data = await self._get_response("getChatMessages", params)
        return extract(data, "chatMessages", ChatMessage, item="chatMessage", many=True)

    async def add_chat_message(self, message: str) -> None:
        params = ParameterSet().add("message", _require("message", message))
        await self._get_response("addChatMessage", params)

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------

    async def get_user(self, username: str) -> User:
        params = ParameterSet().add("username", _require("username", username))
        data = await self._get_response("getUser", params)
        return extract(data, "user", User)

    async def get_users(self) -> List[User]:
        data = await self._get_response("getUsers")
        return extract(data, "users", User, item="user", many=True)

    @staticmethod
    def _role_params(params: ParameterSet, roles: Dict[str, Optional[bool]]) -> ParameterSet:
        unknown = set(roles) - set(USER_ROLE_PARAMS)
        if unknown:
            raise InvalidArgumentError(f"Unknown user roles: {', '.join(sorted(unknown))}")
        for name, value in roles.items():
            params.add(USER_ROLE_PARAMS[name], value)
        return params

    async def create_user(
        self,
        username: str,
        password: str,
        email: str,
        music_folder_id: FolderIds = None,
        **roles: Optional[bool],
    ) -> None:
        """Create a user.

        Args:
            username: Login name
            password: Password; sent hex-encoded like plain authentication
            email: Email address
            music_folder_id: Folder ids the user may access
            **roles: Role flags by keyword, e.g. ``admin_role=True``,
                ``ldap_authenticated=False`` (see USER_ROLE_PARAMS)
        """
        params = ParameterSet().add("username", _require("username", username))
        params.add("password", hex_encode_password(_require("password", password)))
        params.add("email", _require("email", email))
        self._role_params(params, roles)
        params.add("musicFolderId", music_folder_id)
        await self._get_response("createUser", params)

    async def update_user(
        self,
        username: str,
        password: Optional[str] = None,
        email: Optional[str] = None,
        max_bit_rate: Optional[int] = None,
        music_folder_id: FolderIds = None,
        **roles: Optional[bool],
    ) -> None:
        params = ParameterSet().add("username", _require("username", username))
        if password is not None:
            params.add("password", hex_encode_password(_require("password", password)))
        params.add("email", email)
        self._role_params(params, roles)
        params.add("maxBitRate", max_bit_rate)
        params.add("musicFolderId", music_folder_id)
        await self._get_response("updateUser", params)

    async def delete_user(self, username: str) -> None:
        params = ParameterSet().add("username", _require("username", username))
        await self._get_response("deleteUser", params)

    async def change_password(self, username: str, password: str) -> None:
        params = ParameterSet().add("username", _require("username", username))
        params.add("password", hex_encode_password(_require("password", password)))
        await self._get_response("changePassword", params)

    # ------------------------------------------------------------------
    # Bookmarks and play queue
    # ------------------------------------------------------------------

    async def get_bookmarks(self) -> List[Bookmark]:
        data = await self._get_response("getBookmarks")
        return extract(data, "bookmarks", Bookmark, item="bookmark", many=True)

    async def create_bookmark(
        self, id: str, position: int, comment: Optional[str] = None
    ) -> None:
        params = ParameterSet().add("id", _require("id", id))
        params.add("position", position).add("comment", comment)
        await self._get_response("createBookmark", params)

    async def delete_bookmark(self, id: str) -> None:
        params = ParameterSet().add("id", _require("id", id))
        await self._get_response("deleteBookmark", params)

    async def get_play_queue(self) -> Optional[PlayQueue]:
        """Get the saved play queue, or None if the user has not saved one."""
        data = await self._get_response("getPlayQueue")
        return extract(data, "playQueue", PlayQueue, required=False)

    async def save_play_queue(
        self,
        ids: Ids = None,
        current: Optional[str] = None,
        position: Optional[int] = None,
    ) -> None:
        """Save the play queue; no ids clears it."""
        params = ParameterSet().add("id", _require_each("ids", ids))
        params.add("current", current).add("position", position)
        await self._get_response("savePlayQueue", params)

    async def get_play_queue_by_index(self) -> Optional[PlayQueueByIndex]:
        data = await self._get_response("getPlayQueueByIndex")
        return extract(data, "playQueueByIndex", PlayQueueByIndex, required=False)

    async def save_play_queue_by_index(
        self,
        ids: Ids = None,
        current_index: Optional[int] = None,
        position: Optional[int] = None,
    ) -> None:
        params = ParameterSet().add("id", _require_each("ids", ids))
        params.add("currentIndex", current_index).add("position", position)
        await self._get_response("savePlayQueueByIndex", params)

    # ------------------------------------------------------------------
    # Library scanning
    # ------------------------------------------------------------------

    async def get_scan_status(self) -> ScanStatus:
        data = await self._get_response("getScanStatus")
        return extract(data, "scanStatus", ScanStatus)

    async def start_scan(self) -> ScanStatus:
        data = await self._get_response("startScan")
        return extract(data, "scanStatus", ScanStatus)

    # ------------------------------------------------------------------
    # Transcoding (OpenSubsonic)
    # ------------------------------------------------------------------

    async def get_transcode_decision(
        self,
        id: str,
        max_bit_rate: Optional[int] = None,
        format: Optional[str] = None,
        client_info: Optional[ClientInfo] = None,
    ) -> TranscodeDecision:
        """Ask the server how it would deliver a song to this client.

        With client_info the request is a POST carrying the client's
        capabilities as a JSON body.
        """
        params = self._stream_params(id, max_bit_rate, format)
        if client_info is None:
            data = await self._get_response("getTranscodeDecision", params)
        else:
            data = await self._get_response(
                "getTranscodeDecision", params, method="POST", json_body=client_info.to_dict()
            )
        return extract(data, "transcodeDecision", TranscodeDecision)

    def get_transcode_stream_url(
        self,
        id: str,
        max_bit_rate: Optional[int] = None,
        format: Optional[str] = None,
    ) -> str:
        """Build a transcoded stream URL without any request."""
        params = self._stream_params(id, max_bit_rate, format)
        return self._build("getTranscodeStream", params).url

    async def get_transcode_stream(
        self,
        id: str,
        max_bit_rate: Optional[int] = None,
        format: Optional[str] = None,
    ) -> bytes:
        params = self._stream_params(id, max_bit_rate, format)
        return await self._get_bytes("getTranscodeStream", params)
