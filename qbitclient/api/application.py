"""Application endpoints."""

import json
from typing import Any, Dict

from ..exceptions import ResponseParseError, ValidationError
from .base import ApiGroup, ResponseFormat
from .models import BuildInfo


class ApplicationAPI(ApiGroup):
    """Version info and application preferences."""

    area = "app"

    def version(self) -> str:
        """Get the qBittorrent version, e.g. ``v4.6.2``."""
        return self._call(
            "GET", "version", operation="GET_VERSION", parse=ResponseFormat.TEXT
        ).strip()

    def webapi_version(self) -> str:
        """Get the Web API version, e.g. ``2.9.3``."""
        return self._call(
            "GET", "webapiVersion", operation="GET_WEBAPI_VERSION", parse=ResponseFormat.TEXT
        ).strip()

    def build_info(self) -> BuildInfo:
        payload = self._call("GET", "buildInfo", operation="GET_BUILD_INFO")
        return self._parse_model(BuildInfo, payload, "GET_BUILD_INFO")

    def preferences(self) -> Dict[str, Any]:
        """Get all application preferences as returned by the server."""
        payload = self._call("GET", "preferences", operation="GET_PREFERENCES")
        if not isinstance(payload, dict):
            raise ResponseParseError(
                f"Expected preferences object, got {type(payload).__name__}",
                "GET_PREFERENCES_PARSE_ERROR",
            )
        return payload

    def set_preferences(self, preferences: Dict[str, Any]) -> None:
        """
        Change application preferences.

        Args:
            preferences: Subset of preference keys to update
        """
        if not preferences:
            raise ValidationError("preferences cannot be empty", field="preferences")
        self._call(
            "POST",
            "setPreferences",
            operation="SET_PREFERENCES",
            data={"json": json.dumps(preferences)},
            parse=ResponseFormat.NONE,
        )

    def default_save_path(self) -> str:
        return self._call(
            "GET", "defaultSavePath", operation="GET_DEFAULT_SAVE_PATH", parse=ResponseFormat.TEXT
        ).strip()

    def shutdown(self) -> None:
        """Shut the application down."""
        self._call("POST", "shutdown", operation="SHUTDOWN", parse=ResponseFormat.NONE)
