"""Sync endpoints (rid-based incremental updates)."""

from ..sync.merger import parse_main_data, parse_torrent_peers
from ..sync.models import MainData, TorrentPeers
from ..utils.validation import validate_hash, validate_rid
from .base import ApiGroup


class SyncAPI(ApiGroup):
    """Fetch maindata and torrentPeers payloads."""

    area = "sync"

    def main_data(self, rid: int = 0) -> MainData:
        """
        Get torrents, categories, tags and server state changed since ``rid``.

        Args:
            rid: Last response id seen, 0 for a full update

        Returns:
            Parsed MainData payload

        Raises:
            MalformedSyncPayload: If the server's payload fails shape checks
        """
        params = {"rid": validate_rid(rid)}
        payload = self._call("GET", "maindata", operation="GET_MAIN_DATA", params=params)
        return parse_main_data(payload)

    def torrent_peers(self, torrent_hash: str, rid: int = 0) -> TorrentPeers:
        """
        Get the peers of one torrent changed since ``rid``.

        Args:
            torrent_hash: Torrent hash
            rid: Last response id seen, 0 for a full update

        Returns:
            Parsed TorrentPeers payload
        """
        params = {"hash": validate_hash(torrent_hash), "rid": validate_rid(rid)}
        payload = self._call("GET", "torrentPeers", operation="GET_TORRENT_PEERS", params=params)
        return parse_torrent_peers(payload)
