"""RSS endpoints. Feeds are returned as the server's raw JSON tree."""

from typing import Any, Dict, Optional

from ..exceptions import ResponseParseError
from ..utils.validation import require_non_empty
from .base import ApiGroup, ResponseFormat


class RSSAPI(ApiGroup):
    area = "rss"

    def items(self, with_data: bool = False) -> Dict[str, Any]:
        """
        Get all RSS folders and feeds.

        Args:
            with_data: Include feed articles

        Returns:
            Nested dict of folders and feeds keyed by name
        """
        payload = self._call(
            "GET", "items", operation="GET_RSS_ITEMS", params={"withData": with_data}
        )
        if not isinstance(payload, dict):
            raise ResponseParseError("Expected an RSS items object", "GET_RSS_ITEMS_PARSE_ERROR")
        return payload

    def mark_as_read(self, item_path: str, article_id: Optional[str] = None) -> None:
        """Mark a feed (or one of its articles) as read."""
        self._call(
            "POST",
            "markAsRead",
            operation="MARK_RSS_AS_READ",
            data={"itemPath": require_non_empty(item_path, "item_path"), "articleId": article_id},
            parse=ResponseFormat.NONE,
        )

    def refresh_item(self, item_path: str) -> None:
        self._call(
            "POST",
            "refreshItem",
            operation="REFRESH_RSS_ITEM",
            data={"itemPath": require_non_empty(item_path, "item_path")},
            parse=ResponseFormat.NONE,
        )
