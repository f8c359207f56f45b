"""Snapshot holders that poll the sync endpoints with the last seen rid."""

from typing import Mapping, Optional, Union

from ..exceptions import StalePayload
from ..utils.logger import logger
from ..utils.validation import validate_hash
from .merger import apply_main_data_update, apply_torrent_peers_update
from .models import MainData, MainDataSnapshot, TorrentPeers, TorrentPeersSnapshot


class MainDataSync:
    """
    Keeps one maindata snapshot up to date.

    Not thread-safe: a single caller owns the instance and drives ``poll()``
    on whatever schedule it likes.
    """

    def __init__(self, sync_api):
        """
        Initialize the holder.

        Args:
            sync_api: SyncAPI used to fetch payloads
        """
        self.sync_api = sync_api
        self.snapshot: Optional[MainDataSnapshot] = None

    @property
    def rid(self) -> int:
        return self.snapshot.rid if self.snapshot is not None else 0

    def apply(self, payload: Union[Mapping, MainData]) -> MainDataSnapshot:
        """
        Merge an already fetched payload.

        Stale incremental payloads are logged and dropped; the current
        snapshot is returned unchanged. Malformed payloads propagate.
        """
        try:
            self.snapshot = apply_main_data_update(self.snapshot, payload)
        except StalePayload as e:
            logger.warning(
                f"Ignoring stale maindata payload: {e.message}",
                extra={"rid": e.received_rid, "previous_rid": e.current_rid},
            )
        return self.snapshot

    def poll(self) -> MainDataSnapshot:
        """Fetch changes since the held rid and merge them."""
        payload = self.sync_api.main_data(rid=self.rid)
        return self.apply(payload)

    def reset(self):
        """Drop the snapshot; the next poll requests a full update."""
        logger.info("Resetting maindata snapshot")
        self.snapshot = None


class TorrentPeersSync:
    """Keeps the peers snapshot of one torrent up to date."""

    def __init__(self, sync_api, torrent_hash: str):
        self.sync_api = sync_api
        self.torrent_hash = validate_hash(torrent_hash)
        self.snapshot: Optional[TorrentPeersSnapshot] = None

    @property
    def rid(self) -> int:
        return self.snapshot.rid if self.snapshot is not None else 0

    def apply(self, payload: Union[Mapping, TorrentPeers]) -> TorrentPeersSnapshot:
        try:
            self.snapshot = apply_torrent_peers_update(
                self.snapshot, payload, torrent_hash=self.torrent_hash
            )
        except StalePayload as e:
            logger.warning(
                f"Ignoring stale torrentPeers payload: {e.message}",
                extra={
                    "rid": e.received_rid,
                    "previous_rid": e.current_rid,
                    "torrent_hash": self.torrent_hash,
                },
            )
        return self.snapshot

    def poll(self) -> TorrentPeersSnapshot:
        payload = self.sync_api.torrent_peers(self.torrent_hash, rid=self.rid)
        return self.apply(payload)

    def reset(self):
        self.snapshot = None
