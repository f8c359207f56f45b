"""qBittorrent Web API client."""

from typing import Optional

import httpx

from .api.application import ApplicationAPI
from .api.auth import AuthAPI
from .api.models import ServerInfo
from .api.rss import RSSAPI
from .api.sync import SyncAPI
from .api.torrents import TorrentsAPI
from .api.transfer import TransferAPI
from .exceptions import ApiError, AuthenticationError, NetworkError
from .sync.session import MainDataSync, TorrentPeersSync
from .transport import HttpTransport
from .utils.config import settings
from .utils.logger import logger


class QBittorrentClient:
    """Synchronous client for the qBittorrent Web API v2."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: WebUI root URL (uses settings if not provided)
            username: WebUI username (uses settings if not provided)
            password: WebUI password (uses settings if not provided)
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            http_client: Pre-built httpx client, mainly for tests
        """
        self.username = username if username is not None else settings.username
        self.password = password if password is not None else settings.password
        self.authenticated = False
        self.transport = HttpTransport(
            base_url=base_url,
            timeout=timeout,
            verify_ssl=verify_ssl,
            client=http_client,
        )

        self.auth = AuthAPI(self.transport)
        self.app = ApplicationAPI(self.transport)
        self.torrents = TorrentsAPI(self.transport)
        self.sync = SyncAPI(self.transport)
        self.transfer = TransferAPI(self.transport)
        self.rss = RSSAPI(self.transport)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    @property
    def base_url(self) -> str:
        return self.transport.base_url

    def login(self) -> bool:
        """Log in with the configured credentials."""
        self.authenticated = self.auth.login(self.username, self.password)
        return self.authenticated

    def logout(self) -> bool:
        try:
            return self.auth.logout()
        finally:
            self.authenticated = False

    def is_logged_in(self) -> bool:
        return self.auth.is_logged_in()

    def ensure_authenticated(self) -> bool:
        """Log in unless this client already did."""
        if not self.authenticated:
            return self.login()
        return True

    def test_connection(self) -> bool:
        """
        Check that the WebUI is reachable and accepts the credentials.

        Returns:
            True when the version endpoint answers

        Raises:
            NetworkError: With code CONNECTION_TEST_FAILED when unreachable
            AuthenticationError: If the login is refused
        """
        try:
            self.ensure_authenticated()
            version = self.app.version()
        except NetworkError as e:
            logger.error(f"Connection test failed for {self.base_url}: {e}")
            raise NetworkError(
                f"Connection test failed: {e.message}",
                "CONNECTION_TEST_FAILED",
                kind=e.kind,
                method=e.method,
                url=e.url,
            ) from e
        logger.info(f"Connected to qBittorrent {version} at {self.base_url}")
        return True

    def server_info(self) -> ServerInfo:
        """
        Collect versions, build info and preferences.

        Build info and preferences are optional: when the server cannot
        provide them they are left empty and a warning is logged.

        Returns:
            ServerInfo
        """
        self.ensure_authenticated()
        info = ServerInfo(version=self.app.version(), web_api_version=self.app.webapi_version())

        try:
            info.build_info = self.app.build_info()
        except AuthenticationError:
            raise
        except ApiError as e:
            logger.warning(f"Build info unavailable: {e}")

        try:
            info.preferences = self.app.preferences()
        except AuthenticationError:
            raise
        except ApiError as e:
            logger.warning(f"Preferences unavailable: {e}")

        return info

    def close(self):
        """Close the HTTP client."""
        logger.debug(f"Closing client for {self.base_url}")
        self.transport.close()

    def main_data_sync(self) -> MainDataSync:
        """Create a maindata snapshot holder bound to this client."""
        return MainDataSync(self.sync)

    def torrent_peers_sync(self, torrent_hash: str) -> TorrentPeersSync:
        """Create a peers snapshot holder for one torrent."""
        return TorrentPeersSync(self.sync, torrent_hash)
