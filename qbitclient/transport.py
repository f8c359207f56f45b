"""HTTP transport for the qBittorrent WebUI built on httpx."""

import json
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .utils.config import settings
from .utils.logger import logger
from .utils.validation import validate_url


SESSION_COOKIE = "SID"


class TransportError(Exception):
    """Connectivity, timeout, TLS or protocol failure; no usable HTTP response."""

    def __init__(self, message: str, kind: str, method: str, url: str):
        super().__init__(message)
        self.kind = kind
        self.method = method
        self.url = url


@dataclass
class TransportResponse:
    """Raw HTTP response handed back to the API groups."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    cookies: Dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json_body(self) -> Any:
        """Decode the body as JSON (raises ValueError on bad input)."""
        return json.loads(self.body)


def _is_ssl_error(exc: BaseException) -> bool:
    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, ssl.SSLError):
        return True
    text = str(exc).upper()
    return "SSL" in text or "CERTIFICATE" in text


class HttpTransport:
    """Synchronous transport with cookie session authentication."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: WebUI root, e.g. http://localhost:8080 (uses settings if not provided)
            timeout: Read/write/pool timeout in seconds
            connect_timeout: Connect timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            user_agent: User-Agent header value
            client: Pre-built httpx client to use instead of creating one
        """
        self.base_url = validate_url(base_url or settings.url, "base_url").rstrip("/")
        self.timeout = timeout if timeout is not None else settings.timeout
        self.connect_timeout = (
            connect_timeout if connect_timeout is not None else settings.connect_timeout
        )
        self.verify_ssl = verify_ssl if verify_ssl is not None else settings.verify_ssl
        self.user_agent = user_agent or settings.user_agent

        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            verify=self.verify_ssl,
            follow_redirects=True,
        )
        self._session_token: Optional[str] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            self.client.close()

    @property
    def session_token(self) -> Optional[str]:
        return self._session_token

    @session_token.setter
    def session_token(self, token: Optional[str]):
        self._session_token = token or None

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
        files: Optional[Any] = None,
        headers: Optional[dict] = None,
    ) -> TransportResponse:
        """
        Send one HTTP request.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            params: Query parameters
            data: Form fields
            files: Multipart files
            headers: Extra headers

        Returns:
            TransportResponse for any HTTP status

        Raises:
            TransportError: When no HTTP response was received
        """
        method = method.upper()
        url = self.build_url(path)

        request_headers = {
            "User-Agent": self.user_agent,
            # WebUI rejects cross-site requests without a matching Referer
            "Referer": self.base_url,
        }
        if self._session_token:
            request_headers["Cookie"] = f"{SESSION_COOKIE}={self._session_token}"
        if headers:
            request_headers.update(headers)

        logger.debug(f"{method} {url}")

        try:
            response = self.client.request(
                method,
                url,
                params=params,
                data=data,
                files=files,
                headers=request_headers,
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out: {method} {url}", "timeout", method, url
            ) from e
        except httpx.TransportError as e:
            kind = "ssl" if _is_ssl_error(e) else "connection"
            raise TransportError(
                f"Request failed: {method} {url}: {e}", kind, method, url
            ) from e
        except httpx.RequestError as e:
            # Redirect loops, undecodable bodies and other protocol failures
            raise TransportError(
                f"Request failed: {method} {url}: {e}", "protocol", method, url
            ) from e
        finally:
            # Only the held session token may authenticate a request
            self.client.cookies.clear()

        logger.debug(
            f"{method} {url} -> {response.status_code}",
            extra={"method": method, "url": url, "status_code": response.status_code},
        )

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.text,
            cookies=dict(response.cookies),
        )

    def get(self, path: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> TransportResponse:
        return self.request("GET", path, params=params, headers=headers)

    def post(
        self,
        path: str,
        data: Optional[dict] = None,
        files: Optional[Any] = None,
        headers: Optional[dict] = None,
    ) -> TransportResponse:
        return self.request("POST", path, data=data, files=files, headers=headers)

    def put(self, path: str, data: Optional[dict] = None, headers: Optional[dict] = None) -> TransportResponse:
        return self.request("PUT", path, data=data, headers=headers)

    def delete(self, path: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> TransportResponse:
        return self.request("DELETE", path, params=params, headers=headers)
