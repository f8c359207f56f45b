"""Sync payloads and the client-held snapshots they are merged into."""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..api.collection import TorrentCollection
from ..api.models import Category, ServerState, TorrentInfo, TorrentPeer


def peer_address(record: Dict[str, Any]) -> str:
    """Key a peer record by ``ip:port``."""
    if not isinstance(record, dict):
        raise ValueError("peer record must be an object")
    ip = record.get("ip")
    port = record.get("port")
    if not ip or port is None:
        raise ValueError("peer record needs ip and port")
    if ":" in str(ip):
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


class MainData(BaseModel):
    """Parsed sync/maindata payload."""

    model_config = ConfigDict(extra="ignore")

    rid: int = Field(default=0, ge=0)
    full_update: bool = False
    torrents: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    torrents_removed: List[str] = Field(default_factory=list)
    categories: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    categories_removed: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    tags_removed: List[str] = Field(default_factory=list)
    server_state: Optional[Dict[str, Any]] = None

    @field_validator("torrents", "categories", mode="before")
    @classmethod
    def _null_map(cls, value):
        return {} if value is None else value

    @field_validator(
        "torrents_removed", "categories_removed", "tags", "tags_removed", mode="before"
    )
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator("rid", mode="before")
    @classmethod
    def _null_rid(cls, value):
        if isinstance(value, bool):
            raise ValueError("rid must be an integer, not a boolean")
        return 0 if value is None else value


class TorrentPeers(BaseModel):
    """Parsed sync/torrentPeers payload."""

    model_config = ConfigDict(extra="ignore")

    rid: int = Field(default=0, ge=0)
    full_update: bool = False
    peers: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    peers_removed: List[str] = Field(default_factory=list)
    show_flags: Optional[bool] = None

    @field_validator("peers", mode="before")
    @classmethod
    def _key_peers(cls, value):
        if value is None:
            return {}
        # Older servers send a plain list of peer records
        if isinstance(value, list):
            return {peer_address(p): p for p in value}
        return value

    @field_validator("peers_removed", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator("rid", mode="before")
    @classmethod
    def _null_rid(cls, value):
        if isinstance(value, bool):
            raise ValueError("rid must be an integer, not a boolean")
        return 0 if value is None else value


class MainDataSnapshot(BaseModel):
    """Client-side mirror of torrents, categories, tags and server state."""

    rid: int = 0
    full_update: bool = True
    torrents: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    torrents_removed: Set[str] = Field(default_factory=set)
    categories: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    categories_removed: Set[str] = Field(default_factory=set)
    tags: Set[str] = Field(default_factory=set)
    tags_removed: Set[str] = Field(default_factory=set)
    server_state: Optional[Dict[str, Any]] = None

    def torrent_info(self, torrent_hash: str) -> Optional[TorrentInfo]:
        """Typed view of one torrent record, or None if unknown."""
        record = self.torrents.get(torrent_hash)
        if record is None:
            return None
        return TorrentInfo.model_validate({"hash": torrent_hash, **record})

    def torrent_infos(self) -> List[TorrentInfo]:
        return [self.torrent_info(h) for h in sorted(self.torrents)]

    def torrent_collection(self) -> TorrentCollection:
        """All torrents of the snapshot, ready for filtering and statistics."""
        return TorrentCollection(self.torrent_infos())

    def category(self, name: str) -> Optional[Category]:
        record = self.categories.get(name)
        if record is None:
            return None
        return Category.model_validate({"name": name, **record})

    def server_state_info(self) -> Optional[ServerState]:
        if self.server_state is None:
            return None
        return ServerState.model_validate(self.server_state)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the sync/maindata wire layout."""
        return {
            "rid": self.rid,
            "full_update": self.full_update,
            "torrents": {h: dict(t) for h, t in self.torrents.items()},
            "torrents_removed": sorted(self.torrents_removed),
            "categories": {n: dict(c) for n, c in self.categories.items()},
            "categories_removed": sorted(self.categories_removed),
            "tags": sorted(self.tags),
            "tags_removed": sorted(self.tags_removed),
            "server_state": dict(self.server_state) if self.server_state is not None else None,
        }


class TorrentPeersSnapshot(BaseModel):
    """Client-side mirror of one torrent's peers keyed by ``ip:port``."""

    hash: str
    rid: int = 0
    full_update: bool = True
    peers: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    peers_removed: Set[str] = Field(default_factory=set)
    show_flags: Optional[bool] = None

    def peer_list(self) -> List[TorrentPeer]:
        return [TorrentPeer.from_record(a, r) for a, r in sorted(self.peers.items())]

    @property
    def peer_count(self) -> int:
        return len(self.peers)

    @property
    def total_download_speed(self) -> int:
        return sum(p.dl_speed for p in self.peer_list())

    @property
    def total_upload_speed(self) -> int:
        return sum(p.up_speed for p in self.peer_list())

    def group_by_country(self) -> Dict[str, List[TorrentPeer]]:
        grouped: Dict[str, List[TorrentPeer]] = defaultdict(list)
        for peer in self.peer_list():
            grouped[peer.country_code].append(peer)
        return dict(grouped)

    def group_by_client(self) -> Dict[str, List[TorrentPeer]]:
        grouped: Dict[str, List[TorrentPeer]] = defaultdict(list)
        for peer in self.peer_list():
            grouped[peer.client or "Unknown"].append(peer)
        return dict(grouped)

    def most_complete_peers(self, limit: int = 5) -> List[TorrentPeer]:
        peers = sorted(self.peer_list(), key=lambda p: p.progress, reverse=True)
        return peers[:limit]

    def fastest_peers(self, limit: int = 5) -> List[TorrentPeer]:
        peers = sorted(
            self.peer_list(), key=lambda p: p.dl_speed + p.up_speed, reverse=True
        )
        return peers[:limit]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the sync/torrentPeers wire layout."""
        data = {
            "rid": self.rid,
            "full_update": self.full_update,
            "peers": {a: dict(p) for a, p in self.peers.items()},
            "peers_removed": sorted(self.peers_removed),
        }
        if self.show_flags is not None:
            data["show_flags"] = self.show_flags
        return data
