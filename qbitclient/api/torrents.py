"""Torrent management endpoints."""

from typing import Dict, Iterable, List, Mapping, Optional, Union

from ..exceptions import ApiError, ResponseParseError, ValidationError
from ..utils.logger import logger
from ..utils.validation import (
    join_values,
    require_non_empty,
    validate_choice,
    validate_hash,
    validate_hashes,
    validate_int_range,
)
from .base import ApiGroup, ResponseFormat
from .collection import TorrentCollection, count_states
from .models import (
    Category,
    FilePriority,
    TorrentFile,
    TorrentFilter,
    TorrentInfo,
    TorrentProperties,
    TorrentStateCounts,
    TorrentTracker,
    WebSeed,
)


Hashes = Union[str, Iterable[str]]


class TorrentsAPI(ApiGroup):
    """Torrent listing, adding, removing and per-torrent settings."""

    area = "torrents"

    def _action(self, endpoint: str, operation: str, **fields) -> None:
        """POST a form to an endpoint that answers with an empty 200."""
        self._call("POST", endpoint, operation=operation, data=fields, parse=ResponseFormat.NONE)

    # Listing

    def info(
        self,
        filter: Optional[Union[str, TorrentFilter]] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        sort: Optional[str] = None,
        reverse: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        hashes: Optional[Hashes] = None,
    ) -> List[TorrentInfo]:
        """
        List torrents.

        Args:
            filter: State filter (see TorrentFilter)
            category: Only torrents in this category ("" for uncategorized)
            tag: Only torrents with this tag
            sort: Field to sort by
            reverse: Reverse the sort order
            limit: Maximum number of torrents
            offset: Skip this many torrents (negative counts from the end)
            hashes: Only these torrents

        Returns:
            List of TorrentInfo
        """
        if filter is not None:
            value = filter.value if isinstance(filter, TorrentFilter) else filter
            filter = validate_choice(value, [f.value for f in TorrentFilter], "filter")
        if limit is not None:
            validate_int_range(limit, minimum=0, field="limit")
        if offset is not None:
            validate_int_range(offset, field="offset")

        params = {
            "filter": filter,
            "category": category,
            "tag": tag,
            "sort": sort,
            "reverse": reverse,
            "limit": limit,
            "offset": offset,
            "hashes": validate_hashes(hashes) if hashes is not None else None,
        }
        payload = self._call("GET", "info", operation="GET_TORRENTS", params=params)
        return self._parse_models(TorrentInfo, payload, "GET_TORRENTS")

    def collection(self, **filters) -> TorrentCollection:
        """List torrents (same arguments as info()) wrapped in a TorrentCollection."""
        return TorrentCollection(self.info(**filters))

    def stats(self) -> TorrentStateCounts:
        """
        Count all torrents per state bucket.

        Returns:
            TorrentStateCounts (downloading, seeding, completed, paused, error, inactive)
        """
        return count_states(self.info())

    def properties(self, torrent_hash: str) -> TorrentProperties:
        params = {"hash": validate_hash(torrent_hash)}
        payload = self._call("GET", "properties", operation="GET_TORRENT_PROPERTIES", params=params)
        return self._parse_model(TorrentProperties, payload, "GET_TORRENT_PROPERTIES")

    def trackers(self, torrent_hash: str) -> List[TorrentTracker]:
        params = {"hash": validate_hash(torrent_hash)}
        payload = self._call("GET", "trackers", operation="GET_TORRENT_TRACKERS", params=params)
        return self._parse_models(TorrentTracker, payload, "GET_TORRENT_TRACKERS")

    def webseeds(self, torrent_hash: str) -> List[WebSeed]:
        params = {"hash": validate_hash(torrent_hash)}
        payload = self._call("GET", "webseeds", operation="GET_TORRENT_WEBSEEDS", params=params)
        return self._parse_models(WebSeed, payload, "GET_TORRENT_WEBSEEDS")

    def files(self, torrent_hash: str, indexes: Optional[Iterable[int]] = None) -> List[TorrentFile]:
        params = {
            "hash": validate_hash(torrent_hash),
            "indexes": join_values(indexes, "|", "indexes") if indexes is not None else None,
        }
        payload = self._call("GET", "files", operation="GET_TORRENT_FILES", params=params)
        return self._parse_models(TorrentFile, payload, "GET_TORRENT_FILES")

    def piece_states(self, torrent_hash: str) -> List[int]:
        """Per-piece state: 0 not downloaded, 1 downloading, 2 downloaded."""
        params = {"hash": validate_hash(torrent_hash)}
        payload = self._call("GET", "pieceStates", operation="GET_TORRENT_PIECE_STATES", params=params)
        if not isinstance(payload, list) or not all(isinstance(s, int) for s in payload):
            raise ResponseParseError(
                "Expected a list of piece states", "GET_TORRENT_PIECE_STATES_PARSE_ERROR"
            )
        return payload

    # Adding and removing

    def add(
        self,
        urls: Optional[Union[str, Iterable[str]]] = None,
        torrent_files: Optional[Mapping[str, bytes]] = None,
        save_path: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[Union[str, Iterable[str]]] = None,
        paused: Optional[bool] = None,
        skip_checking: Optional[bool] = None,
        rename: Optional[str] = None,
        sequential: Optional[bool] = None,
        first_last_piece_priority: Optional[bool] = None,
        upload_limit: Optional[int] = None,
        download_limit: Optional[int] = None,
        auto_tmm: Optional[bool] = None,
    ) -> None:
        """
        Add torrents from URLs/magnets and/or .torrent file contents.

        Args:
            urls: Magnet links or URLs
            torrent_files: Mapping of file name to .torrent bytes
            save_path: Download folder
            category: Category to assign
            tags: Tags to assign
            paused: Add in paused (stopped) state
            skip_checking: Skip hash checking
            rename: New torrent name
            sequential: Download in sequential order
            first_last_piece_priority: Prioritize first and last pieces
            upload_limit: Upload limit in bytes/s
            download_limit: Download limit in bytes/s
            auto_tmm: Use automatic torrent management

        Raises:
            ValidationError: If neither urls nor torrent_files is given
            ApiError: If the server refuses the torrents ("Fails.")
        """
        if urls is None and not torrent_files:
            raise ValidationError("urls or torrent_files is required", field="urls")

        data = {
            "urls": join_values(urls, "\n", "urls") if urls is not None else None,
            "savepath": save_path,
            "category": category,
            "tags": join_values(tags, ",", "tags") if tags is not None else None,
            "paused": paused,
            "stopped": paused,
            "skip_checking": skip_checking,
            "rename": rename,
            "sequentialDownload": sequential,
            "firstLastPiecePrio": first_last_piece_priority,
            "upLimit": upload_limit,
            "dlLimit": download_limit,
            "autoTMM": auto_tmm,
        }
        files = None
        if torrent_files:
            files = [
                ("torrents", (name, content, "application/x-bittorrent"))
                for name, content in torrent_files.items()
            ]

        body = self._call(
            "POST", "add", operation="ADD_TORRENTS", data=data, files=files, parse=ResponseFormat.TEXT
        )
        if body.strip() == "Fails.":
            logger.error("Server refused to add torrents")
            raise ApiError(
                "Server refused to add torrents",
                "ADD_TORRENTS_FAILED",
                status_code=200,
                body=body,
                endpoint=self.path("add"),
                method="POST",
            )
        logger.info(f"Added torrents (category={category or '-'})")

    def delete(self, hashes: Hashes, delete_files: bool = False) -> None:
        self._action(
            "delete", "DELETE_TORRENTS", hashes=validate_hashes(hashes), deleteFiles=delete_files
        )
        logger.info(f"Deleted torrents {hashes} (files={delete_files})")

    # State changes

    def pause(self, hashes: Hashes) -> None:
        self._action("pause", "PAUSE_TORRENTS", hashes=validate_hashes(hashes))

    def resume(self, hashes: Hashes) -> None:
        self._action("resume", "RESUME_TORRENTS", hashes=validate_hashes(hashes))

    def recheck(self, hashes: Hashes) -> None:
        self._action("recheck", "RECHECK_TORRENTS", hashes=validate_hashes(hashes))

    def reannounce(self, hashes: Hashes) -> None:
        self._action("reannounce", "REANNOUNCE_TORRENTS", hashes=validate_hashes(hashes))

    def set_location(self, hashes: Hashes, location: str) -> None:
        self._action(
            "setLocation",
            "SET_TORRENT_LOCATION",
            hashes=validate_hashes(hashes),
            location=require_non_empty(location, "location"),
        )

    def set_category(self, hashes: Hashes, category: str) -> None:
        """Assign a category; an empty string clears it."""
        if category is None:
            raise ValidationError("category cannot be None", field="category")
        self._action(
            "setCategory", "SET_TORRENT_CATEGORY", hashes=validate_hashes(hashes), category=category
        )

    def add_tags(self, hashes: Hashes, tags: Union[str, Iterable[str]]) -> None:
        self._action(
            "addTags",
            "ADD_TORRENT_TAGS",
            hashes=validate_hashes(hashes),
            tags=join_values(tags, ",", "tags"),
        )

    def remove_tags(self, hashes: Hashes, tags: Union[str, Iterable[str]]) -> None:
        self._action(
            "removeTags",
            "REMOVE_TORRENT_TAGS",
            hashes=validate_hashes(hashes),
            tags=join_values(tags, ",", "tags"),
        )

    def set_force_start(self, hashes: Hashes, value: bool = True) -> None:
        self._action(
            "setForceStart", "SET_FORCE_START", hashes=validate_hashes(hashes), value=bool(value)
        )

    def toggle_sequential_download(self, hashes: Hashes) -> None:
        self._action(
            "toggleSequentialDownload", "TOGGLE_SEQUENTIAL_DOWNLOAD", hashes=validate_hashes(hashes)
        )

    def toggle_first_last_piece_priority(self, hashes: Hashes) -> None:
        self._action(
            "toggleFirstLastPiecePrio", "SET_FIRST_LAST_PIECE_PRIORITY", hashes=validate_hashes(hashes)
        )

    def set_file_priority(
        self, torrent_hash: str, file_ids: Iterable[int], priority: Union[int, FilePriority]
    ) -> None:
        """
        Set the download priority of files inside a torrent.

        Args:
            torrent_hash: Torrent hash
            file_ids: File indexes (from files())
            priority: One of FilePriority
        """
        validate_choice(priority, [p.value for p in FilePriority], "priority")
        self._action(
            "filePrio",
            "SET_FILE_PRIORITY",
            hash=validate_hash(torrent_hash),
            id=join_values(file_ids, "|", "file_ids"),
            priority=int(priority),
        )

    def add_trackers(self, torrent_hash: str, urls: Union[str, Iterable[str]]) -> None:
        self._action(
            "addTrackers",
            "ADD_TRACKERS",
            hash=validate_hash(torrent_hash),
            urls=join_values(urls, "\n", "urls"),
        )

    # Categories and tags

    def categories(self) -> Dict[str, Category]:
        payload = self._call("GET", "categories", operation="GET_CATEGORIES")
        if not isinstance(payload, dict):
            raise ResponseParseError("Expected a categories object", "GET_CATEGORIES_PARSE_ERROR")
        return {
            name: self._parse_model(Category, {"name": name, **(info or {})}, "GET_CATEGORIES")
            for name, info in payload.items()
        }

    def create_category(self, name: str, save_path: str = "") -> None:
        self._action(
            "createCategory",
            "CREATE_CATEGORY",
            category=require_non_empty(name, "category"),
            savePath=save_path,
        )

    def edit_category(self, name: str, save_path: str) -> None:
        self._action(
            "editCategory",
            "EDIT_CATEGORY",
            category=require_non_empty(name, "category"),
            savePath=save_path,
        )

    def remove_categories(self, names: Union[str, Iterable[str]]) -> None:
        self._action(
            "removeCategories", "REMOVE_CATEGORIES", categories=join_values(names, "\n", "categories")
        )

    def tags(self) -> List[str]:
        payload = self._call("GET", "tags", operation="GET_TAGS")
        if not isinstance(payload, list):
            raise ResponseParseError("Expected a list of tags", "GET_TAGS_PARSE_ERROR")
        return [str(t) for t in payload]

    def create_tags(self, tags: Union[str, Iterable[str]]) -> None:
        self._action("createTags", "CREATE_TAGS", tags=join_values(tags, ",", "tags"))

    def delete_tags(self, tags: Union[str, Iterable[str]]) -> None:
        self._action("deleteTags", "DELETE_TAGS", tags=join_values(tags, ",", "tags"))
