"""Pydantic models for qBittorrent Web API responses."""

from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TorrentFilter(str, Enum):
    """Values accepted by the ``filter`` parameter of torrents/info."""

    ALL = "all"
    DOWNLOADING = "downloading"
    SEEDING = "seeding"
    COMPLETED = "completed"
    PAUSED = "paused"
    STOPPED = "stopped"
    ACTIVE = "active"
    INACTIVE = "inactive"
    RESUMED = "resumed"
    RUNNING = "running"
    STALLED = "stalled"
    STALLED_UPLOADING = "stalled_uploading"
    STALLED_DOWNLOADING = "stalled_downloading"
    ERRORED = "errored"


class TorrentState(str, Enum):
    """Torrent states reported in the ``state`` field."""

    ERROR = "error"
    MISSING_FILES = "missingFiles"
    UPLOADING = "uploading"
    PAUSED_UP = "pausedUP"
    STOPPED_UP = "stoppedUP"
    QUEUED_UP = "queuedUP"
    STALLED_UP = "stalledUP"
    CHECKING_UP = "checkingUP"
    FORCED_UP = "forcedUP"
    ALLOCATING = "allocating"
    DOWNLOADING = "downloading"
    META_DL = "metaDL"
    FORCED_META_DL = "forcedMetaDL"
    PAUSED_DL = "pausedDL"
    STOPPED_DL = "stoppedDL"
    QUEUED_DL = "queuedDL"
    STALLED_DL = "stalledDL"
    CHECKING_DL = "checkingDL"
    FORCED_DL = "forcedDL"
    CHECKING_RESUME_DATA = "checkingResumeData"
    MOVING = "moving"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "TorrentState":
        """Map a raw state string, falling back to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_downloading(self) -> bool:
        return self in _DOWNLOADING_STATES

    @property
    def is_uploading(self) -> bool:
        return self in _UPLOADING_STATES

    @property
    def is_active(self) -> bool:
        return self in _ACTIVE_STATES

    @property
    def is_completed(self) -> bool:
        """Every piece is downloaded (seeding, paused or checking as seed)."""
        return self in _COMPLETED_STATES

    @property
    def is_paused(self) -> bool:
        # qBittorrent 5 renamed paused* to stopped*
        return self in (
            TorrentState.PAUSED_UP,
            TorrentState.PAUSED_DL,
            TorrentState.STOPPED_UP,
            TorrentState.STOPPED_DL,
        )

    @property
    def is_queued(self) -> bool:
        return self in (TorrentState.QUEUED_UP, TorrentState.QUEUED_DL)

    @property
    def is_stalled(self) -> bool:
        return self in (TorrentState.STALLED_UP, TorrentState.STALLED_DL)

    @property
    def is_checking(self) -> bool:
        return self in (
            TorrentState.CHECKING_UP,
            TorrentState.CHECKING_DL,
            TorrentState.CHECKING_RESUME_DATA,
        )

    @property
    def is_errored(self) -> bool:
        return self in (TorrentState.ERROR, TorrentState.MISSING_FILES)

    @property
    def can_start(self) -> bool:
        return self.is_paused or self.is_queued or self.is_stalled or self.is_errored

    @property
    def can_pause(self) -> bool:
        return self.is_active


_DOWNLOADING_STATES = frozenset(
    {
        TorrentState.DOWNLOADING,
        TorrentState.STALLED_DL,
        TorrentState.FORCED_DL,
        TorrentState.META_DL,
        TorrentState.FORCED_META_DL,
        TorrentState.ALLOCATING,
    }
)

_UPLOADING_STATES = frozenset(
    {TorrentState.UPLOADING, TorrentState.STALLED_UP, TorrentState.FORCED_UP}
)

_ACTIVE_STATES = _DOWNLOADING_STATES | _UPLOADING_STATES | {
    TorrentState.CHECKING_DL,
    TorrentState.CHECKING_UP,
    TorrentState.MOVING,
}

_COMPLETED_STATES = frozenset(
    {
        TorrentState.UPLOADING,
        TorrentState.PAUSED_UP,
        TorrentState.STOPPED_UP,
        TorrentState.QUEUED_UP,
        TorrentState.STALLED_UP,
        TorrentState.CHECKING_UP,
        TorrentState.FORCED_UP,
    }
)


class FilePriority(IntEnum):
    """File download priorities."""

    DO_NOT_DOWNLOAD = 0
    NORMAL = 1
    HIGH = 6
    MAXIMAL = 7


class QBModel(BaseModel):
    """Base for response models; keeps fields the server adds in newer versions."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TorrentInfo(QBModel):
    """Torrent information (torrents/info and sync torrent records)."""

    hash: str = ""
    name: str = ""
    size: int = 0
    total_size: int = 0
    progress: float = 0.0
    dlspeed: int = 0
    upspeed: int = 0
    eta: int = 0
    state: str = "unknown"
    category: str = ""
    tags: str = ""
    save_path: str = ""
    content_path: str = ""
    added_on: int = 0
    completion_on: int = 0
    completed: int = 0
    downloaded: int = 0
    uploaded: int = 0
    amount_left: int = 0
    ratio: float = 0.0
    num_seeds: int = 0
    num_leechs: int = 0
    priority: int = 0
    dl_limit: int = -1
    up_limit: int = -1
    force_start: bool = False
    seq_dl: bool = False
    f_l_piece_prio: bool = False

    @property
    def tag_list(self) -> List[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    @property
    def is_complete(self) -> bool:
        return self.progress >= 1.0

    @property
    def torrent_state(self) -> TorrentState:
        return TorrentState.from_value(self.state)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tag_list


class TorrentStateCounts(BaseModel):
    """Number of torrents per coarse state bucket."""

    total: int = 0
    downloading: int = 0
    seeding: int = 0
    completed: int = 0
    paused: int = 0
    error: int = 0
    inactive: int = 0


class TorrentStatistics(BaseModel):
    """Aggregate figures over a set of torrents."""

    total_count: int = 0
    active_count: int = 0
    completed_count: int = 0
    downloading_count: int = 0
    uploading_count: int = 0
    paused_count: int = 0
    stalled_count: int = 0
    errored_count: int = 0
    total_size: int = 0
    total_download_speed: int = 0
    total_upload_speed: int = 0
    average_progress: float = 0.0
    average_ratio: float = 0.0
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class TorrentProperties(QBModel):
    """Generic torrent properties (torrents/properties)."""

    save_path: str = ""
    creation_date: int = 0
    piece_size: int = 0
    comment: str = ""
    created_by: str = ""
    total_wasted: int = 0
    total_uploaded: int = 0
    total_downloaded: int = 0
    total_size: int = 0
    up_limit: int = -1
    dl_limit: int = -1
    time_elapsed: int = 0
    seeding_time: int = 0
    nb_connections: int = 0
    share_ratio: float = 0.0
    addition_date: int = 0
    completion_date: int = -1
    pieces_num: int = 0
    pieces_have: int = 0


class TorrentFile(QBModel):
    """File inside a torrent (torrents/files)."""

    index: int = 0
    name: str
    size: int = 0
    progress: float = 0.0
    priority: int = FilePriority.NORMAL
    is_seed: Optional[bool] = None
    piece_range: List[int] = Field(default_factory=list)
    availability: float = 0.0


class TorrentTracker(QBModel):
    """Tracker attached to a torrent (torrents/trackers)."""

    url: str
    status: int = 0
    tier: int = 0
    num_peers: int = 0
    num_seeds: int = 0
    num_leeches: int = 0
    num_downloaded: int = 0
    msg: str = ""


class WebSeed(QBModel):
    """Web seed URL (torrents/webseeds)."""

    url: str


class Category(QBModel):
    """Torrent category (torrents/categories and sync categories)."""

    name: str = ""
    save_path: str = Field(default="", alias="savePath")


class BuildInfo(QBModel):
    """Library versions reported by app/buildInfo."""

    qt: str = ""
    libtorrent: str = ""
    boost: str = ""
    openssl: str = ""
    zlib: str = ""
    bitness: int = 0


class ServerInfo(BaseModel):
    """Versions and settings of the connected qBittorrent instance."""

    version: str
    web_api_version: str
    # Absent on servers older than Web API 2.3
    build_info: Optional[BuildInfo] = None
    preferences: Dict[str, Any] = Field(default_factory=dict)


class TransferInfo(QBModel):
    """Global transfer info (transfer/info)."""

    dl_info_speed: int = 0
    dl_info_data: int = 0
    up_info_speed: int = 0
    up_info_data: int = 0
    dl_rate_limit: int = 0
    up_rate_limit: int = 0
    dht_nodes: int = 0
    connection_status: str = "disconnected"


class ServerState(TransferInfo):
    """Global server state carried by sync/maindata."""

    alltime_dl: int = 0
    alltime_ul: int = 0
    free_space_on_disk: int = 0
    global_ratio: str = "0"
    queueing: bool = False
    use_alt_speed_limits: bool = False
    refresh_interval: int = 1500
    total_peer_connections: int = 0


class TorrentPeer(QBModel):
    """Peer connected to a torrent (sync/torrentPeers)."""

    ip: str = ""
    port: int = 0
    country: str = ""
    country_code: str = ""
    client: Optional[str] = None
    connection: str = ""
    flags: str = ""
    flags_desc: str = ""
    progress: float = 0.0
    dl_speed: int = 0
    up_speed: int = 0
    downloaded: int = 0
    uploaded: int = 0
    relevance: float = 0.0
    files: str = ""

    @property
    def address(self) -> str:
        if ":" in self.ip:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"

    @classmethod
    def from_record(cls, address: str, record: Dict[str, Any]) -> "TorrentPeer":
        """Build a peer from a sync record, filling ip/port from its address key."""
        data = dict(record)
        host, _, port = address.rpartition(":")
        data.setdefault("ip", host.strip("[]"))
        if "port" not in data and port.isdigit():
            data["port"] = int(port)
        return cls.model_validate(data)
