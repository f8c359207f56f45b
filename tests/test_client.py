"""Tests for the API facade against the fake WebUI."""

from unittest.mock import patch

import httpx
import pytest

from fake_qbittorrent import HASH_A, HASH_B
from qbitclient.api.models import FilePriority, TorrentFilter
from qbitclient.client import QBittorrentClient
from qbitclient.exceptions import (
    ApiError,
    AuthenticationError,
    MalformedSyncPayload,
    NetworkError,
    ResponseParseError,
    ValidationError,
)


MAGNET = f"magnet:?xt=urn:btih:{'c' * 40}&dn=Big%20Buck%20Bunny"


# Auth


def test_login_stores_session(client):
    """Successful login keeps the SID cookie on the transport."""
    assert client.login() is True
    assert client.transport.session_token
    assert client.is_logged_in() is True


def test_login_with_bad_password(client):
    client.password = "wrong"

    with pytest.raises(AuthenticationError) as exc_info:
        client.login()

    assert exc_info.value.error_code == "LOGIN_FAILED"
    assert client.transport.session_token is None


def test_login_requires_username(client):
    with pytest.raises(ValidationError):
        client.auth.login("", "x")


def test_unauthenticated_call_raises(client):
    """HTTP 403 maps to AuthenticationError with the operation's code."""
    with pytest.raises(AuthenticationError) as exc_info:
        client.torrents.categories()

    assert exc_info.value.status_code == 403
    assert exc_info.value.error_code == "GET_CATEGORIES_AUTHENTICATION_ERROR"
    assert client.is_logged_in() is False


def test_logout_clears_session(logged_in):
    logged_in.logout()

    assert logged_in.transport.session_token is None
    assert logged_in.is_logged_in() is False


# Application


def test_app_info(logged_in):
    assert logged_in.app.version() == "v4.6.2"
    assert logged_in.app.webapi_version() == "2.9.3"
    assert logged_in.app.build_info().libtorrent == "2.0.9.0"
    assert logged_in.app.default_save_path() == "/downloads"


def test_preferences_round_trip(logged_in):
    logged_in.app.set_preferences({"listen_port": 7000})

    assert logged_in.app.preferences()["listen_port"] == 7000


def test_set_preferences_requires_values(logged_in):
    with pytest.raises(ValidationError):
        logged_in.app.set_preferences({})


# Torrents


def test_add_and_list_torrents(logged_in):
    logged_in.torrents.add(urls=MAGNET, tags=["movie", "hd"], paused=True)

    torrents = logged_in.torrents.info()

    assert len(torrents) == 1
    assert torrents[0].hash == "c" * 40
    assert torrents[0].name == "Big Buck Bunny"
    assert torrents[0].state == "pausedDL"
    assert torrents[0].tag_list == ["movie", "hd"]


def test_add_requires_source(logged_in):
    with pytest.raises(ValidationError):
        logged_in.torrents.add()


def test_add_refused(logged_in):
    """'Fails.' body raises ApiError."""
    with pytest.raises(ApiError) as exc_info:
        logged_in.torrents.add(torrent_files={"x.torrent": b"d4:infoe"})

    assert exc_info.value.error_code == "ADD_TORRENTS_FAILED"


def test_info_filters(server, logged_in):
    server.add_torrent(HASH_A, "a", state="downloading")
    server.add_torrent(HASH_B, "b", state="uploading")

    downloading = logged_in.torrents.info(filter=TorrentFilter.DOWNLOADING)
    by_hash = logged_in.torrents.info(hashes=[HASH_B])

    assert [t.hash for t in downloading] == [HASH_A]
    assert [t.hash for t in by_hash] == [HASH_B]


def test_info_rejects_bad_arguments(logged_in):
    with pytest.raises(ValidationError):
        logged_in.torrents.info(filter="sleeping")
    with pytest.raises(ValidationError):
        logged_in.torrents.info(limit=-1)


def test_pause_resume_delete(server, logged_in):
    server.add_torrent(HASH_A, "a")
    server.add_torrent(HASH_B, "b")

    logged_in.torrents.pause("all")
    assert {t["state"] for t in server.torrents.values()} == {"pausedDL"}

    logged_in.torrents.resume([HASH_A])
    assert server.torrents[HASH_A]["state"] == "downloading"

    logged_in.torrents.delete(HASH_A, delete_files=True)
    assert list(server.torrents) == [HASH_B]


def test_torrent_details(server, logged_in):
    server.add_torrent(HASH_A, "ubuntu.iso", size=2048)

    assert logged_in.torrents.properties(HASH_A).total_size == 2048
    assert logged_in.torrents.files(HASH_A)[0].name == "ubuntu.iso"
    assert logged_in.torrents.trackers(HASH_A)[0].tier == 0
    assert logged_in.torrents.piece_states(HASH_A) == [2, 2, 1, 0]


def test_missing_torrent_is_http_error(logged_in):
    with pytest.raises(ApiError) as exc_info:
        logged_in.torrents.properties(HASH_A)

    assert exc_info.value.status_code == 404
    assert exc_info.value.error_code == "GET_TORRENT_PROPERTIES_HTTP_ERROR"
    assert "not found" in exc_info.value.body


def test_invalid_hash_rejected_before_request(logged_in):
    with pytest.raises(ValidationError) as exc_info:
        logged_in.torrents.properties("xyz")

    assert exc_info.value.field == "hash"


def test_file_priority_validated(logged_in):
    with pytest.raises(ValidationError):
        logged_in.torrents.set_file_priority(HASH_A, [0], 3)
    assert FilePriority.HIGH == 6


def test_categories_and_tags(server, logged_in):
    server.add_torrent(HASH_A, "a")

    logged_in.torrents.create_category("iso", "/iso")
    logged_in.torrents.set_category(HASH_A, "iso")
    logged_in.torrents.add_tags(HASH_A, ["linux"])
    logged_in.torrents.create_tags("spare")

    categories = logged_in.torrents.categories()
    assert categories["iso"].save_path == "/iso"
    assert server.torrents[HASH_A]["category"] == "iso"
    assert logged_in.torrents.tags() == ["linux", "spare"]

    logged_in.torrents.delete_tags(["spare"])
    logged_in.torrents.remove_categories("iso")
    assert logged_in.torrents.tags() == ["linux"]
    assert logged_in.torrents.categories() == {}


def test_conflict_is_http_error(logged_in):
    logged_in.torrents.create_category("iso")

    with pytest.raises(ApiError) as exc_info:
        logged_in.torrents.create_category("iso")

    assert exc_info.value.status_code == 409
    assert exc_info.value.error_code == "CREATE_CATEGORY_HTTP_ERROR"


# Sync


def test_sync_main_data(server, logged_in):
    server.add_torrent(HASH_A, "a")

    data = logged_in.sync.main_data()

    assert data.full_update is True
    assert HASH_A in data.torrents


def test_sync_rejects_negative_rid(logged_in):
    with pytest.raises(ValidationError):
        logged_in.sync.main_data(rid=-1)


def test_sync_malformed_payload(server, logged_in):
    server.main_data = lambda rid: {"rid": 1, "torrents": "nope"}

    with pytest.raises(MalformedSyncPayload):
        logged_in.sync.main_data()


def test_sync_torrent_peers(server, logged_in):
    server.add_torrent(HASH_A, "a")
    server.peers[HASH_A] = {"1.2.3.4:5": {"ip": "1.2.3.4", "port": 5}}

    data = logged_in.sync.torrent_peers(HASH_A)

    assert list(data.peers) == ["1.2.3.4:5"]


# Transfer


def test_transfer(logged_in):
    info = logged_in.transfer.info()
    assert info.dl_info_speed == 2048
    assert info.connection_status == "connected"

    assert logged_in.transfer.speed_limits_mode() is False
    logged_in.transfer.toggle_speed_limits_mode()
    assert logged_in.transfer.speed_limits_mode() is True

    logged_in.transfer.set_download_limit(1024)
    assert logged_in.transfer.download_limit() == 1024


def test_transfer_limit_validated(logged_in):
    with pytest.raises(ValidationError):
        logged_in.transfer.set_upload_limit(-5)


# RSS


def test_rss_items(logged_in):
    items = logged_in.rss.items()

    assert items["news"]["url"] == "http://feeds.example/rss"


def test_unexpected_rss_shape_is_parse_error(server, logged_in):
    server.rss_items = ["not", "a", "tree"]

    with pytest.raises(ResponseParseError):
        logged_in.rss.items()


# Client helpers


def test_ensure_authenticated_logs_in_once(client):
    with patch.object(client.auth, "login", wraps=client.auth.login) as login:
        assert client.ensure_authenticated() is True
        assert client.ensure_authenticated() is True

    assert login.call_count == 1
    assert client.authenticated is True


def test_logout_resets_authenticated(logged_in):
    logged_in.logout()

    assert logged_in.authenticated is False


def test_test_connection(client):
    assert client.test_connection() is True
    assert client.authenticated is True


def test_test_connection_bad_credentials(client):
    client.password = "wrong"

    with pytest.raises(AuthenticationError):
        client.test_connection()


def test_test_connection_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused")

    http = httpx.Client(transport=httpx.MockTransport(handler))
    with QBittorrentClient(base_url="http://qb.local:8080", username="admin", http_client=http) as qb:
        with pytest.raises(NetworkError) as exc_info:
            qb.test_connection()

    assert exc_info.value.error_code == "CONNECTION_TEST_FAILED"
    assert exc_info.value.is_connection_error
    assert exc_info.value.url == "http://qb.local:8080/api/v2/auth/login"
    assert isinstance(exc_info.value.__cause__, NetworkError)


def test_server_info(client):
    info = client.server_info()

    assert info.version == "v4.6.2"
    assert info.web_api_version == "2.9.3"
    assert info.build_info.libtorrent == "2.0.9.0"
    assert info.preferences["listen_port"] == 6881


def test_server_info_without_build_info():
    """Old servers answer 404 for buildInfo; the rest is still returned."""

    def handler(request: httpx.Request) -> httpx.Response:
        answers = {
            "/api/v2/auth/login": httpx.Response(200, text="Ok.", headers={"Set-Cookie": "SID=s1"}),
            "/api/v2/app/version": httpx.Response(200, text="v4.1.9"),
            "/api/v2/app/webapiVersion": httpx.Response(200, text="2.2"),
            "/api/v2/app/preferences": httpx.Response(200, json={"listen_port": 8999}),
        }
        return answers.get(request.url.path, httpx.Response(404, text="Not Found"))

    http = httpx.Client(transport=httpx.MockTransport(handler))
    with QBittorrentClient(base_url="http://qb.local:8080", username="admin", http_client=http) as qb:
        with patch("qbitclient.client.logger") as mock_logger:
            info = qb.server_info()

    assert info.version == "v4.1.9"
    assert info.build_info is None
    assert info.preferences == {"listen_port": 8999}
    mock_logger.warning.assert_called_once()


def test_torrent_stats(server, logged_in):
    server.add_torrent(HASH_A, "a", state="downloading")
    server.add_torrent(HASH_B, "b", state="pausedUP", progress=1.0)

    stats = logged_in.torrents.stats()

    assert stats.total == 2
    assert stats.downloading == 1
    assert stats.paused == 1
    assert stats.seeding == 0


def test_torrent_collection(server, logged_in):
    server.add_torrent(HASH_A, "a", size=100, category="iso")
    server.add_torrent(HASH_B, "b", size=300)

    torrents = logged_in.torrents.collection()

    assert len(torrents) == 2
    assert torrents.total_size == 400
    assert torrents.by_category("iso").hashes == [HASH_A]
    assert [t.name for t in torrents.sort_by("size", descending=True)] == ["b", "a"]
