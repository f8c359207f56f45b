"""Client-side filtering, sorting and statistics over torrent lists."""

from collections import defaultdict
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union

from ..utils.validation import validate_choice
from .models import TorrentInfo, TorrentState, TorrentStateCounts, TorrentStatistics


UNCATEGORIZED = "Uncategorized"

SORT_FIELDS = ("name", "size", "progress", "dlspeed", "upspeed", "ratio", "added_on", "priority")

StateLike = Union[str, TorrentState]


def count_states(torrents: Iterable[TorrentInfo]) -> TorrentStateCounts:
    """
    Bucket torrents by state.

    States outside the named buckets count as completed when fully
    downloaded and as inactive otherwise.

    Args:
        torrents: Torrents to count

    Returns:
        TorrentStateCounts
    """
    counts = TorrentStateCounts()
    for torrent in torrents:
        counts.total += 1
        state = torrent.torrent_state
        if state in (
            TorrentState.DOWNLOADING,
            TorrentState.META_DL,
            TorrentState.FORCED_META_DL,
            TorrentState.FORCED_DL,
        ):
            counts.downloading += 1
        elif state in (TorrentState.UPLOADING, TorrentState.FORCED_UP, TorrentState.STALLED_UP):
            counts.seeding += 1
        elif state.is_paused:
            counts.paused += 1
        elif state.is_errored:
            counts.error += 1
        elif state is TorrentState.STALLED_DL:
            counts.inactive += 1
        elif torrent.is_complete:
            counts.completed += 1
        else:
            counts.inactive += 1
    return counts


class TorrentCollection:
    """
    Ordered list of torrents with query helpers.

    Every filter and sort returns a new collection; the original is never
    modified.
    """

    def __init__(self, torrents: Iterable[TorrentInfo] = ()):
        self._torrents: List[TorrentInfo] = list(torrents)

    def __len__(self) -> int:
        return len(self._torrents)

    def __iter__(self) -> Iterator[TorrentInfo]:
        return iter(self._torrents)

    def __getitem__(self, index: int) -> TorrentInfo:
        return self._torrents[index]

    def __repr__(self) -> str:
        return f"TorrentCollection({len(self)} torrents)"

    @property
    def hashes(self) -> List[str]:
        return [t.hash for t in self._torrents]

    def find(self, torrent_hash: str) -> Optional[TorrentInfo]:
        torrent_hash = torrent_hash.lower()
        for torrent in self._torrents:
            if torrent.hash.lower() == torrent_hash:
                return torrent
        return None

    # Filters

    def filter(self, predicate: Callable[[TorrentInfo], bool]) -> "TorrentCollection":
        return TorrentCollection(t for t in self._torrents if predicate(t))

    def by_name(self, name: str, exact: bool = True) -> "TorrentCollection":
        if exact:
            return self.filter(lambda t: t.name == name)
        needle = name.lower()
        return self.filter(lambda t: needle in t.name.lower())

    def by_category(self, category: str) -> "TorrentCollection":
        """Torrents in a category; ``""`` selects uncategorized torrents."""
        return self.filter(lambda t: t.category == category)

    def by_tag(self, tag: str) -> "TorrentCollection":
        return self.filter(lambda t: t.has_tag(tag))

    def by_tags(self, tags: Iterable[str], match_all: bool = False) -> "TorrentCollection":
        """
        Torrents carrying any (or, with ``match_all``, every) of the tags.

        Args:
            tags: Tags to look for
            match_all: Require every tag instead of at least one
        """
        wanted = set(tags)
        if match_all:
            return self.filter(lambda t: wanted <= set(t.tag_list))
        return self.filter(lambda t: bool(wanted & set(t.tag_list)))

    def by_state(self, *states: StateLike) -> "TorrentCollection":
        wanted = {TorrentState.from_value(getattr(s, "value", s)) for s in states}
        return self.filter(lambda t: t.torrent_state in wanted)

    def by_progress(self, minimum: float = 0.0, maximum: float = 1.0) -> "TorrentCollection":
        return self.filter(lambda t: minimum <= t.progress <= maximum)

    def by_size(self, minimum: int = 0, maximum: Optional[int] = None) -> "TorrentCollection":
        return self.filter(
            lambda t: t.size >= minimum and (maximum is None or t.size <= maximum)
        )

    def by_download_speed(self, minimum: int = 0) -> "TorrentCollection":
        return self.filter(lambda t: t.dlspeed >= minimum)

    def by_upload_speed(self, minimum: int = 0) -> "TorrentCollection":
        return self.filter(lambda t: t.upspeed >= minimum)

    def added_between(self, start: int = 0, end: Optional[int] = None) -> "TorrentCollection":
        """Torrents added within a Unix timestamp range (inclusive)."""
        return self.filter(
            lambda t: t.added_on >= start and (end is None or t.added_on <= end)
        )

    def active(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_active)

    def completed(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_completed)

    def downloading(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_downloading)

    def uploading(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_uploading)

    def paused(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_paused)

    def stalled(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_stalled)

    def errored(self) -> "TorrentCollection":
        return self.filter(lambda t: t.torrent_state.is_errored)

    # Ordering

    def sort_by(self, field: str, descending: bool = False) -> "TorrentCollection":
        """
        Sort by one torrent field.

        Args:
            field: One of SORT_FIELDS
            descending: Largest first

        Returns:
            Sorted collection (stable for equal values)
        """
        validate_choice(field, SORT_FIELDS, "field")

        def sort_key(torrent: TorrentInfo):
            value = getattr(torrent, field)
            return value.lower() if field == "name" else value

        return TorrentCollection(sorted(self._torrents, key=sort_key, reverse=descending))

    # Aggregates

    @property
    def total_size(self) -> int:
        return sum(t.size for t in self._torrents)

    @property
    def total_download_speed(self) -> int:
        return sum(t.dlspeed for t in self._torrents)

    @property
    def total_upload_speed(self) -> int:
        return sum(t.upspeed for t in self._torrents)

    @property
    def average_progress(self) -> float:
        if not self._torrents:
            return 0.0
        return sum(t.progress for t in self._torrents) / len(self._torrents)

    @property
    def average_ratio(self) -> float:
        if not self._torrents:
            return 0.0
        return sum(t.ratio for t in self._torrents) / len(self._torrents)

    def categories(self) -> List[str]:
        """Sorted non-empty categories in use."""
        return sorted({t.category for t in self._torrents if t.category})

    def tags(self) -> List[str]:
        return sorted({tag for t in self._torrents for tag in t.tag_list})

    def group_by_category(self) -> Dict[str, "TorrentCollection"]:
        return self._group(lambda t: t.category or UNCATEGORIZED)

    def group_by_state(self) -> Dict[str, "TorrentCollection"]:
        return self._group(lambda t: t.torrent_state.value)

    def _group(self, key: Callable[[TorrentInfo], str]) -> Dict[str, "TorrentCollection"]:
        grouped: Dict[str, List[TorrentInfo]] = defaultdict(list)
        for torrent in self._torrents:
            grouped[key(torrent)].append(torrent)
        return {name: TorrentCollection(items) for name, items in grouped.items()}

    def state_counts(self) -> TorrentStateCounts:
        return count_states(self._torrents)

    def statistics(self) -> TorrentStatistics:
        return TorrentStatistics(
            total_count=len(self),
            active_count=len(self.active()),
            completed_count=len(self.completed()),
            downloading_count=len(self.downloading()),
            uploading_count=len(self.uploading()),
            paused_count=len(self.paused()),
            stalled_count=len(self.stalled()),
            errored_count=len(self.errored()),
            total_size=self.total_size,
            total_download_speed=self.total_download_speed,
            total_upload_speed=self.total_upload_speed,
            average_progress=self.average_progress,
            average_ratio=self.average_ratio,
            categories=self.categories(),
            tags=self.tags(),
        )
