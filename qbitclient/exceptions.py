"""Error types raised by the qBittorrent client."""

from typing import Any, Dict, Optional


class QBittorrentError(Exception):
    """Base exception for all client errors."""

    default_code = "CLIENT_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(QBittorrentError):
    """Local input rejected before any request was sent."""

    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, details={"field": field, "value": value})
        self.field = field
        self.value = value


class NetworkError(QBittorrentError):
    """The request never produced an HTTP response."""

    default_code = "NETWORK_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        kind: str = "connection",
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(
            message, error_code, {"kind": kind, "method": method, "url": url}
        )
        self.kind = kind
        self.method = method
        self.url = url

    @property
    def is_timeout(self) -> bool:
        return self.kind == "timeout"

    @property
    def is_connection_error(self) -> bool:
        return self.kind == "connection"

    @property
    def is_ssl_error(self) -> bool:
        return self.kind == "ssl"

    @property
    def is_protocol_error(self) -> bool:
        return self.kind == "protocol"


class ApiError(QBittorrentError):
    """The server answered with an unexpected status or body."""

    default_code = "API_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        body: str = "",
        endpoint: Optional[str] = None,
        method: Optional[str] = None,
    ):
        body = (body or "")[:200]
        super().__init__(
            message,
            error_code,
            {
                "status_code": status_code,
                "body": body,
                "endpoint": endpoint,
                "method": method,
            },
        )
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        self.method = method


class AuthenticationError(ApiError):
    """Login refused or session no longer valid (HTTP 401/403)."""

    default_code = "AUTHENTICATION_ERROR"


class ResponseParseError(ApiError):
    """Response body could not be parsed into the expected shape."""

    default_code = "RESPONSE_PARSE_ERROR"


class SyncError(QBittorrentError):
    """Base exception for sync payload problems."""

    default_code = "SYNC_ERROR"


class MalformedSyncPayload(SyncError):
    """Sync payload failed shape checks; nothing was applied."""

    default_code = "MALFORMED_SYNC_PAYLOAD"


class StalePayload(SyncError):
    """Incremental payload is not newer than the held snapshot."""

    default_code = "STALE_SYNC_PAYLOAD"

    def __init__(self, current_rid: int, received_rid: int):
        super().__init__(
            f"Received rid {received_rid} is not newer than current rid {current_rid}",
            details={"current_rid": current_rid, "received_rid": received_rid},
        )
        self.current_rid = current_rid
        self.received_rid = received_rid
