"""
Reduce sync payloads into snapshots.

Both functions are pure: they never touch the network and never mutate the
snapshot they are given. A full update replaces every collection; an
incremental update deletes the keys listed in ``*_removed`` and then upserts
the changed entries, so a key present in both places keeps its new data.
"""

import copy
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import pydantic

from ..exceptions import MalformedSyncPayload, StalePayload
from ..utils.logger import logger
from .models import MainData, MainDataSnapshot, TorrentPeers, TorrentPeersSnapshot


def _parse(model, payload: Any, label: str):
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise MalformedSyncPayload(
            f"{label} payload must be an object, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(dict(payload))
    except pydantic.ValidationError as e:
        raise MalformedSyncPayload(
            f"Malformed {label} payload: {e.error_count()} invalid field(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


def parse_main_data(payload: Union[Mapping, MainData]) -> MainData:
    """
    Validate a raw sync/maindata payload.

    Raises:
        MalformedSyncPayload: If the payload fails shape checks
    """
    return _parse(MainData, payload, "maindata")


def parse_torrent_peers(payload: Union[Mapping, TorrentPeers]) -> TorrentPeers:
    """
    Validate a raw sync/torrentPeers payload.

    Raises:
        MalformedSyncPayload: If the payload fails shape checks
    """
    return _parse(TorrentPeers, payload, "torrentPeers")


def _warn_conflicts(label: str, data: Iterable[str], removed: Iterable[str], rid: int):
    overlap = set(data) & set(removed)
    if overlap:
        logger.warning(
            f"Sync payload lists {label} as both changed and removed, keeping data: "
            f"{sorted(overlap)}",
            extra={"rid": rid},
        )


def _merge_map(target: Dict[str, Any], updates: Dict[str, Any], removed: Iterable[str]):
    for key in removed:
        target.pop(key, None)
    for key, record in updates.items():
        # The server only sends a key when it changed; the record replaces the old one
        target[key] = copy.deepcopy(record)


def apply_main_data_update(
    previous: Optional[MainDataSnapshot], payload: Union[Mapping, MainData]
) -> MainDataSnapshot:
    """
    Produce the next maindata snapshot.

    Args:
        previous: Currently held snapshot, or None at session start
        payload: Raw or parsed sync/maindata payload

    Returns:
        New snapshot carrying the payload's rid

    Raises:
        MalformedSyncPayload: If the payload fails shape checks
        StalePayload: If an incremental payload is not newer than ``previous``
    """
    data = parse_main_data(payload)

    _warn_conflicts("torrents", data.torrents, data.torrents_removed, data.rid)
    _warn_conflicts("categories", data.categories, data.categories_removed, data.rid)
    _warn_conflicts("tags", data.tags, data.tags_removed, data.rid)

    if previous is None or data.full_update:
        if previous is not None:
            logger.info(
                f"Full maindata resync at rid {data.rid} (was {previous.rid})",
                extra={"rid": data.rid, "previous_rid": previous.rid},
            )
        return MainDataSnapshot(
            rid=data.rid,
            full_update=True,
            torrents=copy.deepcopy(data.torrents),
            torrents_removed=set(data.torrents_removed),
            categories=copy.deepcopy(data.categories),
            categories_removed=set(data.categories_removed),
            tags=set(data.tags),
            tags_removed=set(data.tags_removed),
            server_state=copy.deepcopy(data.server_state),
        )

    if data.rid <= previous.rid:
        raise StalePayload(previous.rid, data.rid)

    snapshot = previous.model_copy(deep=True)

    _merge_map(snapshot.torrents, data.torrents, data.torrents_removed)
    _merge_map(snapshot.categories, data.categories, data.categories_removed)

    snapshot.tags.difference_update(data.tags_removed)
    snapshot.tags.update(data.tags)

    if data.server_state is not None:
        snapshot.server_state = copy.deepcopy(data.server_state)

    snapshot.torrents_removed = set(data.torrents_removed)
    snapshot.categories_removed = set(data.categories_removed)
    snapshot.tags_removed = set(data.tags_removed)
    snapshot.full_update = False
    snapshot.rid = data.rid

    return snapshot


def apply_torrent_peers_update(
    previous: Optional[TorrentPeersSnapshot],
    payload: Union[Mapping, TorrentPeers],
    torrent_hash: Optional[str] = None,
) -> TorrentPeersSnapshot:
    """
    Produce the next peers snapshot for one torrent.

    Args:
        previous: Currently held snapshot, or None at session start
        payload: Raw or parsed sync/torrentPeers payload
        torrent_hash: Torrent the payload belongs to (defaults to previous.hash)

    Returns:
        New snapshot carrying the payload's rid

    Raises:
        MalformedSyncPayload: If the payload fails shape checks
        StalePayload: If an incremental payload is not newer than ``previous``
    """
    data = parse_torrent_peers(payload)

    if torrent_hash is None:
        torrent_hash = previous.hash if previous is not None else ""
    if previous is not None and previous.hash != torrent_hash:
        previous = None

    _warn_conflicts("peers", data.peers, data.peers_removed, data.rid)

    if previous is None or data.full_update:
        return TorrentPeersSnapshot(
            hash=torrent_hash,
            rid=data.rid,
            full_update=True,
            peers=copy.deepcopy(data.peers),
            peers_removed=set(data.peers_removed),
            show_flags=data.show_flags,
        )

    if data.rid <= previous.rid:
        raise StalePayload(previous.rid, data.rid)

    snapshot = previous.model_copy(deep=True)
    _merge_map(snapshot.peers, data.peers, data.peers_removed)
    if data.show_flags is not None:
        snapshot.show_flags = data.show_flags

    snapshot.peers_removed = set(data.peers_removed)
    snapshot.full_update = False
    snapshot.rid = data.rid

    return snapshot
