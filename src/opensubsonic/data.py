"""Payload models returned by the Subsonic / OpenSubsonic REST API.

Every model is a dataclass deriving from SubsonicModel. Field names are the
snake_case form of the camelCase JSON keys; the few keys that do not follow
that rule carry an explicit ``key`` in the field metadata.

Example:
    >>> AlbumID3.from_dict({"id": "1", "name": "Abbey Road", "songCount": 17})
    AlbumID3(id='1', name='Abbey Road', ..., song_count=17, ...)
"""

import functools
import re
import typing
from dataclasses import MISSING, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from .exceptions import DecodeError

M = TypeVar("M", bound="SubsonicModel")

_CAMEL_RE = re.compile(r"_([a-z0-9])")


def to_camel(name: str) -> str:
    """Convert a snake_case field name to its camelCase JSON key."""
    return _CAMEL_RE.sub(lambda match: match.group(1).upper(), name)


def json_key(name: str) -> Dict[str, str]:
    """Field metadata for a JSON key that is not the camelCase field name."""
    return {"key": name}


@functools.lru_cache(maxsize=None)
def _type_hints(cls: type) -> Dict[str, Any]:
    return typing.get_type_hints(cls)


def _convert(tp: Any, value: Any, where: str) -> Any:
    """Convert a JSON value to the annotated field type."""
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    # Optional[X] = Union[X, None]
    if origin is typing.Union:
        non_none = [arg for arg in args if arg is not type(None)]
        return _convert(non_none[0], value, where)

    if origin is list:
        item_type = args[0] if args else Any
        # Some servers collapse single-element arrays into a bare object
        items = value if isinstance(value, list) else [value]
        return [_convert(item_type, item, f"{where}[{i}]") for i, item in enumerate(items)]

    if origin is dict:
        if not isinstance(value, dict):
            raise DecodeError(f"{where}: expected object, got {type(value).__name__}")
        return value

    if tp is Any:
        return value

    if isinstance(tp, type) and issubclass(tp, SubsonicModel):
        return tp.from_dict(value, where)

    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(value)
        except ValueError:
            raise DecodeError(f"{where}: unexpected value {value!r}") from None

    if tp is bool:
        if isinstance(value, bool):
            return value
        if value in ("true", "false"):
            return value == "true"
    elif tp is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif tp is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif tp is str:
        if isinstance(value, str):
            return value
        # Numeric ids differ between server implementations
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
    else:
        raise DecodeError(f"{where}: unsupported field type {tp!r}")

    raise DecodeError(f"{where}: expected {tp.__name__}, got {type(value).__name__}")


def _render(value: Any) -> Any:
    if isinstance(value, SubsonicModel):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_render(item) for item in value]
    return value


class SubsonicModel:
    """Base class for payload dataclasses."""

    @classmethod
    def from_dict(cls: Type[M], data: Any, where: Optional[str] = None) -> M:
        """Build the model from a decoded JSON object.

        Unknown keys are ignored. A missing required field or a value of the
        wrong type raises DecodeError naming the offending key.
        """
        where = where or cls.__name__
        if not isinstance(data, dict):
            raise DecodeError(f"{where}: expected object, got {type(data).__name__}")

        hints = _type_hints(cls)
        kwargs = {}
        for model_field in fields(cls):
            key = model_field.metadata.get("key", to_camel(model_field.name))
            value = data.get(key)
            if value is None:
                if model_field.default is MISSING and model_field.default_factory is MISSING:
                    raise DecodeError(f"{where}: missing required field '{key}'")
                continue
            kwargs[model_field.name] = _convert(hints[model_field.name], value, f"{where}.{key}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Render the model as camelCase JSON, omitting unset optional fields."""
        result = {}
        for model_field in fields(self):
            value = getattr(self, model_field.name)
            if value is None:
                continue
            key = model_field.metadata.get("key", to_camel(model_field.name))
            result[key] = _render(value)
        return result


# Enums


class AlbumListType(str, Enum):
    """Ordering for getAlbumList / getAlbumList2."""

    RANDOM = "random"
    NEWEST = "newest"
    HIGHEST = "highest"
    FREQUENT = "frequent"
    RECENT = "recent"
    ALPHABETICAL_BY_NAME = "alphabeticalByName"
    ALPHABETICAL_BY_ARTIST = "alphabeticalByArtist"
    STARRED = "starred"
    BY_YEAR = "byYear"
    BY_GENRE = "byGenre"


class JukeboxAction(str, Enum):
    GET = "get"
    STATUS = "status"
    SET = "set"
    START = "start"
    STOP = "stop"
    SKIP = "skip"
    ADD = "add"
    CLEAR = "clear"
    REMOVE = "remove"
    SHUFFLE = "shuffle"
    SET_GAIN = "setGain"


class PodcastStatus(str, Enum):
    NEW = "new"
    DOWNLOADING = "downloading"
    COMPLETED = "completed"
    ERROR = "error"
    DELETED = "deleted"
    SKIPPED = "skipped"


# System


@dataclass
class License(SubsonicModel):
    valid: bool
    email: Optional[str] = None
    license_expires: Optional[str] = None
    trial_expires: Optional[str] = None


@dataclass
class OpenSubsonicExtension(SubsonicModel):
    name: str
    versions: List[int] = field(default_factory=list)


@dataclass
class TokenInfo(SubsonicModel):
    username: str


# Common


@dataclass
class MusicFolder(SubsonicModel):
    id: int
    name: Optional[str] = None


@dataclass
class Genre(SubsonicModel):
    """Genre with usage counts. The name arrives in the ``value`` key."""

    name: str = field(metadata=json_key("value"))
    song_count: int = 0
    album_count: int = 0


@dataclass
class ItemGenre(SubsonicModel):
    name: str


@dataclass
class ItemDate(SubsonicModel):
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None


@dataclass
class DiscTitle(SubsonicModel):
    disc: int
    title: str


@dataclass
class RecordLabel(SubsonicModel):
    name: str


@dataclass
class ReplayGain(SubsonicModel):
    track_gain: Optional[float] = None
    album_gain: Optional[float] = None
    track_peak: Optional[float] = None
    album_peak: Optional[float] = None
    base_gain: Optional[float] = None
    fallback_gain: Optional[float] = None


@dataclass
class Artist(SubsonicModel):
    """Folder-based artist (getIndexes, getStarred, search2)."""

    id: str
    name: str
    artist_image_url: Optional[str] = None
    starred: Optional[str] = None
    user_rating: Optional[int] = None
    average_rating: Optional[float] = None


@dataclass
class ArtistID3(SubsonicModel):
    """Artist organised by ID3 tags."""

    id: str
    name: str
    cover_art: Optional[str] = None
    artist_image_url: Optional[str] = None
    album_count: Optional[int] = None
    starred: Optional[str] = None
    music_brainz_id: Optional[str] = None
    sort_name: Optional[str] = None
    roles: List[str] = field(default_factory=list)


@dataclass
class Contributor(SubsonicModel):
    role: str
    artist: ArtistID3
    sub_role: Optional[str] = None


@dataclass
class Child(SubsonicModel):
    """A song, video or directory entry.

    Only ``id`` and ``title`` are guaranteed; everything else depends on the
    server and on the kind of entry.
    """

    id: str
    title: str
    parent: Optional[str] = None
    is_dir: bool = False
    album: Optional[str] = None
    artist: Optional[str] = None
    track: Optional[int] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    cover_art: Optional[str] = None
    size: Optional[int] = None
    content_type: Optional[str] = None
    suffix: Optional[str] = None
    transcoded_content_type: Optional[str] = None
    transcoded_suffix: Optional[str] = None
    duration: Optional[int] = None
    bit_rate: Optional[int] = None
    bit_depth: Optional[int] = None
    sampling_rate: Optional[int] = None
    channel_count: Optional[int] = None
    path: Optional[str] = None
    is_video: Optional[bool] = None
    user_rating: Optional[int] = None
    average_rating: Optional[float] = None
    play_count: Optional[int] = None
    disc_number: Optional[int] = None
    created: Optional[str] = None
    starred: Optional[str] = None
    album_id: Optional[str] = None
    artist_id: Optional[str] = None
    type: Optional[str] = None
    media_type: Optional[str] = None
    bookmark_position: Optional[int] = None
    original_width: Optional[int] = None
    original_height: Optional[int] = None
    played: Optional[str] = None
    bpm: Optional[int] = None
    comment: Optional[str] = None
    sort_name: Optional[str] = None
    music_brainz_id: Optional[str] = None
    isrc: List[str] = field(default_factory=list)
    genres: List[ItemGenre] = field(default_factory=list)
    artists: List[ArtistID3] = field(default_factory=list)
    display_artist: Optional[str] = None
    album_artists: List[ArtistID3] = field(default_factory=list)
    display_album_artist: Optional[str] = None
    contributors: List[Contributor] = field(default_factory=list)
    display_composer: Optional[str] = None
    moods: List[str] = field(default_factory=list)
    replay_gain: Optional[ReplayGain] = None
    explicit_status: Optional[str] = None


@dataclass
class NowPlayingEntry(Child):
    """A Child plus who is playing it."""

    username: Optional[str] = None
    minutes_ago: Optional[int] = None
    player_id: Optional[int] = None
    player_name: Optional[str] = None


@dataclass
class AlbumID3(SubsonicModel):
    id: str
    name: str
    version: Optional[str] = None
    artist: Optional[str] = None
    artist_id: Optional[str] = None
    cover_art: Optional[str] = None
    song_count: Optional[int] = None
    duration: Optional[int] = None
    play_count: Optional[int] = None
    created: Optional[str] = None
    starred: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    played: Optional[str] = None
    user_rating: Optional[int] = None
    record_labels: List[RecordLabel] = field(default_factory=list)
    music_brainz_id: Optional[str] = None
    genres: List[ItemGenre] = field(default_factory=list)
    artists: List[ArtistID3] = field(default_factory=list)
    display_artist: Optional[str] = None
    release_types: List[str] = field(default_factory=list)
    original_release_date: Optional[ItemDate] = None
    release_date: Optional[ItemDate] = None
    is_compilation: Optional[bool] = None
    sort_name: Optional[str] = None
    disc_titles: List[DiscTitle] = field(default_factory=list)
    explicit_status: Optional[str] = None
    moods: List[str] = field(default_factory=list)


@dataclass
class AlbumWithSongsID3(AlbumID3):
    song: List[Child] = field(default_factory=list)


@dataclass
class ArtistWithAlbumsID3(ArtistID3):
    album: List[AlbumID3] = field(default_factory=list)


@dataclass
class IndexID3(SubsonicModel):
    name: str
    artist: List[ArtistID3] = field(default_factory=list)


@dataclass
class ArtistsID3(SubsonicModel):
    ignored_articles: Optional[str] = None
    index: List[IndexID3] = field(default_factory=list)


# Browsing


@dataclass
class Index(SubsonicModel):
    name: str
    artist: List[Artist] = field(default_factory=list)


@dataclass
class Indexes(SubsonicModel):
    ignored_articles: Optional[str] = None
    last_modified: Optional[int] = None
    shortcut: List[Artist] = field(default_factory=list)
    child: List[Child] = field(default_factory=list)
    index: List[Index] = field(default_factory=list)


@dataclass
class Directory(SubsonicModel):
    id: str
    name: str
    parent: Optional[str] = None
    starred: Optional[str] = None
    user_rating: Optional[int] = None
    average_rating: Optional[float] = None
    play_count: Optional[int] = None
    child: List[Child] = field(default_factory=list)


@dataclass
class AlbumInfo(SubsonicModel):
    notes: Optional[str] = None
    music_brainz_id: Optional[str] = None
    last_fm_url: Optional[str] = None
    small_image_url: Optional[str] = None
    medium_image_url: Optional[str] = None
    large_image_url: Optional[str] = None


@dataclass
class ArtistInfo(SubsonicModel):
    biography: Optional[str] = None
    music_brainz_id: Optional[str] = None
    last_fm_url: Optional[str] = None
    small_image_url: Optional[str] = None
    medium_image_url: Optional[str] = None
    large_image_url: Optional[str] = None
    similar_artist: List[Artist] = field(default_factory=list)


@dataclass
class ArtistInfo2(SubsonicModel):
    biography: Optional[str] = None
    music_brainz_id: Optional[str] = None
    last_fm_url: Optional[str] = None
    small_image_url: Optional[str] = None
    medium_image_url: Optional[str] = None
    large_image_url: Optional[str] = None
    similar_artist: List[ArtistID3] = field(default_factory=list)


# Lists and search


@dataclass
class Starred(SubsonicModel):
    """Starred items, folder-based."""

    artist: List[Artist] = field(default_factory=list)
    album: List[Child] = field(default_factory=list)
    song: List[Child] = field(default_factory=list)


@dataclass
class Starred2(SubsonicModel):
    """Starred items, ID3-based."""

    artist: List[ArtistID3] = field(default_factory=list)
    album: List[AlbumID3] = field(default_factory=list)
    song: List[Child] = field(default_factory=list)


@dataclass
class SearchResult(SubsonicModel):
    matches: List[Child] = field(default_factory=list, metadata=json_key("match"))
    offset: Optional[int] = None
    total_hits: Optional[int] = None


@dataclass
class SearchResult2(SubsonicModel):
    artist: List[Artist] = field(default_factory=list)
    album: List[Child] = field(default_factory=list)
    song: List[Child] = field(default_factory=list)


@dataclass
class SearchResult3(SubsonicModel):
    artist: List[ArtistID3] = field(default_factory=list)
    album: List[AlbumID3] = field(default_factory=list)
    song: List[Child] = field(default_factory=list)


# Playlists


@dataclass
class Playlist(SubsonicModel):
    id: str
    name: str
    comment: Optional[str] = None
    owner: Optional[str] = None
    public: Optional[bool] = None
    song_count: Optional[int] = None
    duration: Optional[int] = None
    created: Optional[str] = None
    changed: Optional[str] = None
    cover_art: Optional[str] = None
    allowed_user: List[str] = field(default_factory=list)
    readonly: Optional[bool] = None
    valid_until: Optional[str] = None


@dataclass
class PlaylistWithSongs(Playlist):
    entry: List[Child] = field(default_factory=list)


# Media retrieval


@dataclass
class Lyrics(SubsonicModel):
    value: Optional[str] = None
    artist: Optional[str] = None
    title: Optional[str] = None


@dataclass
class LyricsLine(SubsonicModel):
    value: str
    start: Optional[float] = None


@dataclass
class StructuredLyrics(SubsonicModel):
    lang: str
    synced: bool
    line: List[LyricsLine] = field(default_factory=list)
    display_artist: Optional[str] = None
    display_title: Optional[str] = None
    offset: Optional[float] = None


@dataclass
class LyricsList(SubsonicModel):
    structured_lyrics: List[StructuredLyrics] = field(default_factory=list)


# Sharing


@dataclass
class Share(SubsonicModel):
    id: str
    url: str
    username: str
    created: str
    description: Optional[str] = None
    expires: Optional[str] = None
    last_visited: Optional[str] = None
    visit_count: int = 0
    entry: List[Child] = field(default_factory=list)


# Podcast


@dataclass
class PodcastEpisode(Child):
    stream_id: Optional[str] = None
    channel_id: Optional[str] = None
    description: Optional[str] = None
    status: Optional[PodcastStatus] = None
    publish_date: Optional[str] = None


@dataclass
class PodcastChannel(SubsonicModel):
    id: str
    url: str
    status: PodcastStatus
    title: Optional[str] = None
    description: Optional[str] = None
    cover_art: Optional[str] = None
    original_image_url: Optional[str] = None
    error_message: Optional[str] = None
    episode: List[PodcastEpisode] = field(default_factory=list)


# Jukebox


@dataclass
class JukeboxStatus(SubsonicModel):
    current_index: int
    playing: bool
    gain: float
    position: Optional[int] = None


@dataclass
class JukeboxPlaylist(JukeboxStatus):
    entry: List[Child] = field(default_factory=list)


# Internet radio and chat


@dataclass
class InternetRadioStation(SubsonicModel):
    id: str
    name: str
    stream_url: str
    home_page_url: Optional[str] = None


@dataclass
class ChatMessage(SubsonicModel):
    username: str
    time: int
    message: str


# User management


@dataclass
class User(SubsonicModel):
    username: str
    scrobbling_enabled: Optional[bool] = None
    max_bit_rate: Optional[int] = None
    admin_role: Optional[bool] = None
    settings_role: Optional[bool] = None
    download_role: Optional[bool] = None
    upload_role: Optional[bool] = None
    playlist_role: Optional[bool] = None
    cover_art_role: Optional[bool] = None
    comment_role: Optional[bool] = None
    podcast_role: Optional[bool] = None
    stream_role: Optional[bool] = None
    jukebox_role: Optional[bool] = None
    share_role: Optional[bool] = None
    video_conversion_role: Optional[bool] = None
    avatar_last_changed: Optional[str] = None
    folder: List[int] = field(default_factory=list)
    email: Optional[str] = None


# Bookmarks


@dataclass
class Bookmark(SubsonicModel):
    position: int
    username: str
    created: str
    changed: str
    entry: Child
    comment: Optional[str] = None


@dataclass
class PlayQueue(SubsonicModel):
    username: str
    changed: str
    changed_by: str
    current: Optional[str] = None
    position: Optional[int] = None
    entry: List[Child] = field(default_factory=list)


@dataclass
class PlayQueueByIndex(SubsonicModel):
    username: str
    changed: str
    changed_by: str
    current_index: Optional[int] = None
    position: Optional[int] = None
    entry: List[Child] = field(default_factory=list)


# Scanning


@dataclass
class ScanStatus(SubsonicModel):
    scanning: bool
    count: Optional[int] = None


# Transcoding (OpenSubsonic)


@dataclass
class StreamDetails(SubsonicModel):
    protocol: str
    container: str
    codec: str
    audio_channels: Optional[int] = None
    audio_bitrate: Optional[int] = None
    audio_profile: Optional[str] = None
    audio_samplerate: Optional[int] = None
    audio_bitdepth: Optional[int] = None


@dataclass
class TranscodeDecision(SubsonicModel):
    can_direct_play: bool
    can_transcode: bool
    transcode_reason: List[str] = field(default_factory=list)
    error_reason: Optional[str] = None
    transcode_params: Optional[str] = None
    source_stream: Optional[StreamDetails] = None
    transcode_stream: Optional[StreamDetails] = None


@dataclass
class DirectPlayProfile(SubsonicModel):
    containers: List[str] = field(default_factory=list)
    audio_codecs: List[str] = field(default_factory=list)
    protocols: List[str] = field(default_factory=list)
    max_audio_channels: Optional[int] = None


@dataclass
class TranscodingProfile(SubsonicModel):
    container: str
    audio_codec: str
    protocol: str
    max_audio_channels: Optional[int] = None


@dataclass
class Limitation(SubsonicModel):
    name: str
    comparison: str
    values: List[str] = field(default_factory=list)
    required: bool = False


@dataclass
class CodecProfile(SubsonicModel):
    profile_type: str = field(metadata=json_key("type"))
    name: str
    limitations: List[Limitation] = field(default_factory=list)


@dataclass
class ClientInfo(SubsonicModel):
    """Playback capabilities sent in the getTranscodeDecision POST body."""

    name: str
    platform: str
    max_audio_bitrate: Optional[int] = None
    max_transcoding_audio_bitrate: Optional[int] = None
    direct_play_profiles: List[DirectPlayProfile] = field(default_factory=list)
    transcoding_profiles: List[TranscodingProfile] = field(default_factory=list)
    codec_profiles: List[CodecProfile] = field(default_factory=list)
