"""Transfer endpoints."""

from ..exceptions import ResponseParseError
from ..utils.validation import validate_int_range
from .base import ApiGroup, ResponseFormat
from .models import TransferInfo


class TransferAPI(ApiGroup):
    """Global transfer statistics and speed limits."""

    area = "transfer"

    def info(self) -> TransferInfo:
        payload = self._call("GET", "info", operation="GET_TRANSFER_INFO")
        return self._parse_model(TransferInfo, payload, "GET_TRANSFER_INFO")

    def speed_limits_mode(self) -> bool:
        """Whether alternative speed limits are enabled."""
        body = self._call(
            "GET", "speedLimitsMode", operation="GET_SPEED_LIMITS_MODE", parse=ResponseFormat.TEXT
        ).strip()
        if body not in ("0", "1"):
            raise ResponseParseError(
                f"Unexpected speed limits mode: {body!r}", "GET_SPEED_LIMITS_MODE_PARSE_ERROR"
            )
        return body == "1"

    def toggle_speed_limits_mode(self) -> None:
        self._call(
            "POST",
            "toggleSpeedLimitsMode",
            operation="TOGGLE_SPEED_LIMITS_MODE",
            parse=ResponseFormat.NONE,
        )

    def _limit(self, endpoint: str, operation: str) -> int:
        body = self._call("GET", endpoint, operation=operation, parse=ResponseFormat.TEXT).strip()
        try:
            return int(body)
        except ValueError as e:
            raise ResponseParseError(
                f"Unexpected limit value: {body!r}", f"{operation}_PARSE_ERROR"
            ) from e

    def download_limit(self) -> int:
        """Global download limit in bytes/s (0 means unlimited)."""
        return self._limit("downloadLimit", "GET_DOWNLOAD_LIMIT")

    def upload_limit(self) -> int:
        """Global upload limit in bytes/s (0 means unlimited)."""
        return self._limit("uploadLimit", "GET_UPLOAD_LIMIT")

    def set_download_limit(self, limit: int) -> None:
        self._call(
            "POST",
            "setDownloadLimit",
            operation="SET_DOWNLOAD_LIMIT",
            data={"limit": validate_int_range(limit, minimum=0, field="limit")},
            parse=ResponseFormat.NONE,
        )

    def set_upload_limit(self, limit: int) -> None:
        self._call(
            "POST",
            "setUploadLimit",
            operation="SET_UPLOAD_LIMIT",
            data={"limit": validate_int_range(limit, minimum=0, field="limit")},
            parse=ResponseFormat.NONE,
        )
