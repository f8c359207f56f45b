"""Shared fixtures: a client wired to the fake WebUI."""

import pytest
from fastapi.testclient import TestClient

from fake_qbittorrent import PASSWORD, USERNAME, FakeQBittorrent, create_app
from qbitclient.client import QBittorrentClient


BASE_URL = "http://testserver"


@pytest.fixture
def server():
    """Fresh fake server state."""
    return FakeQBittorrent()


@pytest.fixture
def client(server):
    """Client talking to the fake server (not logged in)."""
    with TestClient(create_app(server), base_url=BASE_URL) as http:
        with QBittorrentClient(
            base_url=BASE_URL,
            username=USERNAME,
            password=PASSWORD,
            http_client=http,
        ) as qb:
            yield qb


@pytest.fixture
def logged_in(client):
    """Client with an authenticated session."""
    client.login()
    return client
