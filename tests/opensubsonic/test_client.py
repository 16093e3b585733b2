"""Tests for SubsonicClient.

All HTTP traffic goes to an in-process FakeSubsonicServer through
httpx.MockTransport; no real server requests are made.
"""

import asyncio
import json
import logging

import httpx
import pytest
from pytest_mock import MockerFixture

from opensubsonic.auth import PlainAuth, TokenAuth
from opensubsonic.client import SubsonicClient
from opensubsonic.data import (
    AlbumID3,
    AlbumListType,
    ClientInfo,
    JukeboxAction,
    JukeboxPlaylist,
    JukeboxStatus,
    License,
    MusicFolder,
)
from opensubsonic.exceptions import (
    DecodeError,
    InvalidArgumentError,
    RequestTimeoutError,
    SubsonicAuthenticationError,
    SubsonicNotFoundError,
    TransportError,
)
from opensubsonic.models import ClientConfig


class TestLifecycle:
    """Ownership of the underlying httpx.AsyncClient."""

    @pytest.mark.asyncio
    async def test_injected_http_client_is_not_closed(self, config, http_client):
        async with SubsonicClient(config, http_client=http_client):
            pass

        assert not http_client.is_closed

    @pytest.mark.asyncio
    async def test_internal_http_client_is_closed(self, config):
        client = SubsonicClient(config, timeout=5)
        await client.aclose()

        assert client._http.is_closed

    def test_plain_auth_logs_warning(self, config, http_client, caplog):
        with caplog.at_level(logging.WARNING, logger="opensubsonic"):
            SubsonicClient(config.with_auth(PlainAuth("x")), http_client=http_client)

        assert "plain" in caplog.text


class TestSystem:
    """Test cases for ping, license and token info."""

    @pytest.mark.asyncio
    async def test_ping_success(self, client, server, fixtures):
        server.route("ping", fixtures["ping_success"])

        envelope = await client.ping()

        assert envelope.ok
        assert envelope.open_subsonic is True
        assert envelope.server_type == "navidrome"
        request = server.last_request
        assert request.method == "GET"
        assert request.url.path == "/rest/ping"
        assert request.url.params["c"] == "opensubsonic-test"
        assert request.url.params["f"] == "json"

    @pytest.mark.asyncio
    async def test_ping_wrong_credentials(self, client, server, fixtures):
        server.route("ping", fixtures["auth_failed"])

        with pytest.raises(SubsonicAuthenticationError) as exc_info:
            await client.ping()

        assert exc_info.value.code == 40
        assert "Wrong username or password" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_get_license(self, client, server, fixtures):
        server.route("getLicense", fixtures["license"])

        license_info = await client.get_license()

        assert isinstance(license_info, License)
        assert license_info.valid is True
        assert license_info.license_expires == "2030-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_base_path_preserved(self, http_client, server, fixtures):
        server.route("ping", fixtures["ping_success"])
        config = ClientConfig("https://host.example.com/music", "u", TokenAuth("p"))
        client = SubsonicClient(config, http_client=http_client)

        await client.ping()

        assert server.last_request.url.path == "/music/rest/ping"


class TestAlbumLists:
    """Test cases for album and song lists."""

    @pytest.mark.asyncio
    async def test_get_album_list2(self, client, server, fixtures):
        server.route("getAlbumList2", fixtures["album_list2"])

        albums = await client.get_album_list2(AlbumListType.NEWEST, size=2)

        assert all(isinstance(album, AlbumID3) for album in albums)
        assert [album.name for album in albums] == ["Abbey Road", "Kind of Blue"]
        assert albums[1].genres[0].name == "Jazz"
        params = server.last_request.url.params
        assert params["type"] == "newest"
        assert params["size"] == "2"

    @pytest.mark.asyncio
    async def test_absent_genre_is_not_sent(self, client, server, fixtures):
        server.route("getAlbumList2", fixtures["album_list2"])

        await client.get_album_list2(AlbumListType.RANDOM)

        request = server.last_request
        assert "genre" not in request.url.params
        assert b"genre=" not in request.url.query

    @pytest.mark.asyncio
    async def test_music_folder_ids_repeat_in_order(self, client, server, fixtures):
        server.route("getAlbumList2", fixtures["album_list2"])

        await client.get_album_list2(AlbumListType.RANDOM, music_folder_id=[1, 3, 7])

        request = server.last_request
        assert request.url.params.get_list("musicFolderId") == ["1", "3", "7"]
        assert b"musicFolderId=1&musicFolderId=3&musicFolderId=7" in request.url.query

    @pytest.mark.asyncio
    async def test_empty_album_list(self, client, server, fixtures):
        server.route("getAlbumList2", fixtures["album_list2_empty"])

        assert await client.get_album_list2(AlbumListType.STARRED) == []

    @pytest.mark.asyncio
    async def test_by_year_requires_years(self, client, server):
        with pytest.raises(InvalidArgumentError):
            await client.get_album_list2(AlbumListType.BY_YEAR, from_year=1960)

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_by_genre_requires_genre(self, client, server):
        with pytest.raises(InvalidArgumentError):
            await client.get_album_list(AlbumListType.BY_GENRE)

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_list_type_accepts_plain_string(self, client, server, fixtures):
        server.route("getAlbumList2", fixtures["album_list2"])

        await client.get_album_list2("alphabeticalByName")

        assert server.last_request.url.params["type"] == "alphabeticalByName"

    @pytest.mark.asyncio
    async def test_unknown_list_type_rejected(self, client, server):
        with pytest.raises(InvalidArgumentError, match="notAType"):
            await client.get_album_list2("notAType")

        assert server.requests == []


class TestBrowsing:
    @pytest.mark.asyncio
    async def test_get_album(self, client, server, fixtures):
        server.route("getAlbum", fixtures["album"])

        album = await client.get_album("al-1")

        assert album.song_count == 2
        assert album.song[0].content_type == "audio/flac"
        assert server.last_request.url.params["id"] == "al-1"

    @pytest.mark.asyncio
    async def test_get_music_folders(self, client, server, fixtures):
        server.route("getMusicFolders", fixtures["music_folders"])

        folders = await client.get_music_folders()

        assert folders == [MusicFolder(id=1, name="Music"), MusicFolder(id=3, name="Podcasts")]

    @pytest.mark.asyncio
    async def test_get_genres(self, client, server, fixtures):
        server.route("getGenres", fixtures["genres"])

        genres = await client.get_genres()

        assert [(genre.name, genre.album_count) for genre in genres] == [("Rock", 10), ("Jazz", 4)]

    @pytest.mark.asyncio
    async def test_not_found(self, client, server, fixtures):
        server.route("getAlbum", fixtures["not_found"])

        with pytest.raises(SubsonicNotFoundError) as exc_info:
            await client.get_album("missing")

        assert exc_info.value.code == 70

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["", "   ", None])
    async def test_empty_id_rejected_before_request(self, client, server, bad_id):
        with pytest.raises(InvalidArgumentError):
            await client.get_album(bad_id)

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_search3(self, client, server, fixtures):
        server.route("search3", fixtures["search3"])

        result = await client.search3("beatles", song_count=5)

        assert result.artist[0].album_count == 13
        assert result.song[0].title == "Come Together"
        params = server.last_request.url.params
        assert params["query"] == "beatles"
        assert params["songCount"] == "5"
        assert "artistCount" not in params


class TestMediaRetrieval:
    """Test cases for binary endpoints and URL builders."""

    @pytest.mark.asyncio
    async def test_stream_url_makes_no_request(self, client, server):
        url = client.stream_url("song-id-123")

        assert server.requests == []
        parsed = httpx.URL(url)
        assert parsed.path == "/rest/stream"
        assert parsed.params["id"] == "song-id-123"
        assert "maxBitRate" not in parsed.params

    def test_stream_url_is_deterministic_for_fixed_salt(self, mocker: MockerFixture, http_client):
        mocker.patch("opensubsonic.auth.generate_salt", return_value="c19b2d")
        config = ClientConfig("https://music.example.com", "admin", TokenAuth("sesame"))
        client = SubsonicClient(config, http_client=http_client)

        first = client.stream_url("song-id-123", None, None)
        second = client.stream_url("song-id-123", None, None)

        assert first == second
        params = httpx.URL(first).params
        assert params["t"] == "26719a1196d2a940705a59634eb18eab"
        assert params["s"] == "c19b2d"

    def test_stream_url_options(self, client):
        params = httpx.URL(client.stream_url("so-1", max_bit_rate=128, format="mp3")).params

        assert params["maxBitRate"] == "128"
        assert params["format"] == "mp3"

    def test_cover_art_and_hls_urls(self, client):
        cover = httpx.URL(client.cover_art_url("al-1", size=300))
        hls = httpx.URL(client.hls_url("so-1", bit_rate=[1000, "1500@1920x1080"]))

        assert cover.path == "/rest/getCoverArt"
        assert cover.params["size"] == "300"
        assert hls.path == "/rest/hls.m3u8"
        assert hls.params.get_list("bitRate") == ["1000", "1500@1920x1080"]

    def test_url_builder_rejects_empty_id(self, client):
        with pytest.raises(InvalidArgumentError):
            client.stream_url("")

    @pytest.mark.asyncio
    async def test_stream_returns_bytes(self, client, server):
        server.route("stream", content=b"ID3\x03audio", headers={"content-type": "audio/mpeg"})

        data = await client.stream("so-1", max_bit_rate=320, estimate_content_length=True)

        assert data == b"ID3\x03audio"
        params = server.last_request.url.params
        assert params["estimateContentLength"] == "true"
        assert "timeOffset" not in params

    @pytest.mark.asyncio
    async def test_binary_endpoint_json_error(self, client, server, fixtures):
        server.route("getCoverArt", fixtures["not_found"])

        with pytest.raises(SubsonicNotFoundError):
            await client.get_cover_art("missing")

    @pytest.mark.asyncio
    async def test_binary_endpoint_json_ok_is_decode_error(self, client, server, fixtures):
        server.route("download", fixtures["empty_ok"])

        with pytest.raises(DecodeError):
            await client.download("so-1")


class TestTransportErrors:
    """Transport failures surface as distinguishable error kinds."""

    @pytest.mark.asyncio
    async def test_timeout(self, client, server):
        server.route("getLicense", error=httpx.ReadTimeout)

        with pytest.raises(RequestTimeoutError) as exc_info:
            await client.get_license()

        assert isinstance(exc_info.value, TransportError)
        assert exc_info.value.endpoint == "getLicense"

    @pytest.mark.asyncio
    async def test_connection_error(self, client, server):
        server.route("getLicense", error=httpx.ConnectError)

        with pytest.raises(TransportError) as exc_info:
            await client.get_license()

        assert not isinstance(exc_info.value, RequestTimeoutError)

    @pytest.mark.asyncio
    async def test_http_error_status(self, client, server):
        server.route("getLicense", status_code=503, content=b"Service Unavailable")

        with pytest.raises(TransportError) as exc_info:
            await client.get_license()

        assert "503" in str(exc_info.value)
        assert "testuser" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_malformed_json(self, client, server):
        server.route("getLicense", content=b"{not json", headers={"content-type": "application/json"})

        with pytest.raises(DecodeError):
            await client.get_license()

    @pytest.mark.asyncio
    async def test_credentials_not_logged(self, client, server, fixtures, caplog):
        server.route("getLicense", fixtures["license"])

        with caplog.at_level(logging.DEBUG, logger="opensubsonic"):
            await client.get_license()

        token = server.last_request.url.params["t"]
        assert "getLicense" in caplog.text
        assert token not in caplog.text
        assert "testpass" not in caplog.text


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self, client, server, fixtures):
        server.route("getLicense", fixtures["license"])
        server.route("getAlbumList2", fixtures["album_list2"])
        server.route("getMusicFolders", fixtures["music_folders"])

        license_info, albums, folders = await asyncio.gather(
            client.get_license(),
            client.get_album_list2(AlbumListType.NEWEST),
            client.get_music_folders(),
        )

        assert license_info.valid is True
        assert len(albums) == 2
        assert len(folders) == 2
        salts = {request.url.params["s"] for request in server.requests}
        assert len(salts) == 3

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_other_calls(self, client, server, fixtures):
        server.route("getLicense", fixtures["license"])
        server.route("getAlbum", fixtures["not_found"])

        results = await asyncio.gather(
            client.get_license(), client.get_album("missing"), return_exceptions=True
        )

        assert isinstance(results[0], License)
        assert isinstance(results[1], SubsonicNotFoundError)

    @pytest.mark.asyncio
    async def test_cancelled_call_leaves_client_usable(self, config, server, fixtures):
        server.route("getAlbum", fixtures["album"])
        server.route("getLicense", fixtures["license"])
        album_requested = asyncio.Event()
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/getAlbum"):
                album_requested.set()
                await release.wait()
            return server(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with SubsonicClient(config, http_client=http_client) as client:
            album_task = asyncio.create_task(client.get_album("al-1"))
            await album_requested.wait()
            album_task.cancel()

            license_info = await client.get_license()

            assert license_info.valid is True
            with pytest.raises(asyncio.CancelledError):
                await album_task
        await http_client.aclose()


class TestAnnotationAndPlaylists:
    @pytest.mark.asyncio
    async def test_star_sends_each_id_kind(self, client, server, fixtures):
        server.route("star", fixtures["empty_ok"])

        await client.star(ids=["so-1", "so-2"], album_ids="al-1")

        params = server.last_request.url.params
        assert params.get_list("id") == ["so-1", "so-2"]
        assert params.get_list("albumId") == ["al-1"]
        assert "artistId" not in params

    @pytest.mark.asyncio
    async def test_star_needs_an_id(self, client, server):
        with pytest.raises(InvalidArgumentError):
            await client.star()
        assert server.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [-1, 6, 2.5, True])
    async def test_set_rating_range(self, client, server, rating):
        with pytest.raises(InvalidArgumentError):
            await client.set_rating("so-1", rating)
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_set_rating_zero_removes_rating(self, client, server, fixtures):
        server.route("setRating", fixtures["empty_ok"])

        await client.set_rating("so-1", 0)

        assert server.last_request.url.params["rating"] == "0"

    @pytest.mark.asyncio
    async def test_update_playlist_repeats_songs(self, client, server, fixtures):
        server.route("updatePlaylist", fixtures["empty_ok"])

        await client.update_playlist(
            "pl-1", public=False, song_ids_to_add=["a", "b"], song_indexes_to_remove=[0, 4]
        )

        params = server.last_request.url.params
        assert params["public"] == "false"
        assert params.get_list("songIdToAdd") == ["a", "b"]
        assert params.get_list("songIndexToRemove") == ["0", "4"]

    @pytest.mark.asyncio
    async def test_create_playlist_needs_name_or_id(self, client, server):
        with pytest.raises(InvalidArgumentError):
            await client.create_playlist(song_ids=["a"])
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_get_play_queue_absent(self, client, server, fixtures):
        server.route("getPlayQueue", fixtures["empty_ok"])

        assert await client.get_play_queue() is None


class TestJukebox:
    @pytest.mark.asyncio
    async def test_get_returns_playlist(self, client, server, fixtures):
        server.route("jukeboxControl", fixtures["jukebox_playlist"])

        result = await client.jukebox_control(JukeboxAction.GET)

        assert isinstance(result, JukeboxPlaylist)
        assert result.entry[0].id == "so-1"
        assert server.last_request.url.params["action"] == "get"

    @pytest.mark.asyncio
    async def test_status_returns_status(self, client, server, fixtures):
        server.route("jukeboxControl", fixtures["jukebox_status"])

        result = await client.jukebox_control(JukeboxAction.SET_GAIN, gain=0.75)

        assert type(result) is JukeboxStatus
        assert result.gain == 0.75
        assert server.last_request.url.params["gain"] == "0.75"

    @pytest.mark.asyncio
    async def test_gain_out_of_range(self, client, server):
        with pytest.raises(InvalidArgumentError):
            await client.jukebox_control(JukeboxAction.SET_GAIN, gain=1.5)

    @pytest.mark.asyncio
    async def test_unknown_action_rejected(self, client, server):
        with pytest.raises(InvalidArgumentError, match="dance"):
            await client.jukebox_control("dance")

        assert server.requests == []


class TestUsersAndScanning:
    @pytest.mark.asyncio
    async def test_create_user_roles(self, client, server, fixtures):
        server.route("createUser", fixtures["empty_ok"])

        await client.create_user(
            "bob", "sesame", "bob@example.com", admin_role=True, stream_role=False,
            music_folder_id=[1, 3],
        )

        params = server.last_request.url.params
        assert params["password"] == "enc:736573616d65"
        assert params["adminRole"] == "true"
        assert params["streamRole"] == "false"
        assert "jukeboxRole" not in params
        assert params.get_list("musicFolderId") == ["1", "3"]

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, client, server):
        with pytest.raises(InvalidArgumentError):
            await client.update_user("bob", superuser=True)
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_start_scan(self, client, server, fixtures):
        server.route("startScan", fixtures["scan_status"])

        status = await client.start_scan()

        assert status.scanning is True
        assert status.count == 1250


class TestTranscoding:
    @pytest.mark.asyncio
    async def test_decision_without_client_info_uses_get(self, client, server, fixtures):
        server.route("getTranscodeDecision", fixtures["transcode_decision"])

        decision = await client.get_transcode_decision("so-1")

        assert server.last_request.method == "GET"
        assert decision.can_transcode is True
        assert decision.transcode_stream.audio_bitrate == 320000

    @pytest.mark.asyncio
    async def test_decision_with_client_info_posts_json(self, client, server, fixtures):
        server.route("getTranscodeDecision", fixtures["transcode_decision"])
        info = ClientInfo(name="opensubsonic-test", platform="linux", max_audio_bitrate=320000)

        await client.get_transcode_decision("so-1", format="mp3", client_info=info)

        request = server.last_request
        assert request.method == "POST"
        assert request.url.params["format"] == "mp3"
        assert json.loads(request.content) == {
            "name": "opensubsonic-test",
            "platform": "linux",
            "maxAudioBitrate": 320000,
            "directPlayProfiles": [],
            "transcodingProfiles": [],
            "codecProfiles": [],
        }

    def test_transcode_stream_url(self, client, server):
        url = httpx.URL(client.get_transcode_stream_url("so-1", max_bit_rate=192))

        assert url.path == "/rest/getTranscodeStream"
        assert url.params["maxBitRate"] == "192"
        assert server.requests == []
