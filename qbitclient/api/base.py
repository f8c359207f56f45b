"""Shared request dispatch for the Web API endpoint groups."""

from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

import pydantic

from ..exceptions import ApiError, AuthenticationError, NetworkError, ResponseParseError
from ..transport import HttpTransport, TransportError, TransportResponse
from ..utils.logger import logger


API_BASE_PATH = "/api/v2"

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class ResponseFormat(str, Enum):
    """How an endpoint's response body is interpreted."""

    JSON = "json"
    TEXT = "text"
    NONE = "none"


def _form_value(value: Any) -> Any:
    # The WebUI parses booleans as lower-case strings
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.value
    return value


def clean_fields(fields: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop unset fields and encode the rest for the query string or form body."""
    if fields is None:
        return None
    return {k: _form_value(v) for k, v in fields.items() if v is not None}


class ApiGroup:
    """Base class for one area of the Web API (auth, torrents, sync, ...)."""

    area = ""

    def __init__(self, transport: HttpTransport):
        self.transport = transport

    def path(self, endpoint: str) -> str:
        # "/app/version" addresses another area directly
        if endpoint.startswith("/"):
            return f"{API_BASE_PATH}{endpoint}"
        return f"{API_BASE_PATH}/{self.area}/{endpoint}"

    def _send(
        self,
        method: str,
        endpoint: str,
        *,
        operation: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
        files: Optional[Any] = None,
    ) -> TransportResponse:
        """
        Dispatch a request and map transport and status failures.

        Raises:
            NetworkError: When no HTTP response was received
            AuthenticationError: On HTTP 401/403
            ApiError: On any other non-2xx status
        """
        path = self.path(endpoint)
        try:
            response = self.transport.request(
                method,
                path,
                params=clean_fields(params),
                data=clean_fields(data),
                files=files,
            )
        except TransportError as e:
            logger.error(
                f"{operation} failed: {e}",
                extra={"operation": operation, "method": e.method, "url": e.url},
            )
            raise NetworkError(
                str(e),
                f"{operation}_NETWORK_ERROR",
                kind=e.kind,
                method=e.method,
                url=e.url,
            ) from e

        if response.status_code in (401, 403):
            logger.error(
                f"{operation} rejected: HTTP {response.status_code}",
                extra={"operation": operation, "method": method, "status_code": response.status_code},
            )
            raise AuthenticationError(
                f"Not authorized: {method} {path} - {response.status_code}",
                f"{operation}_AUTHENTICATION_ERROR",
                status_code=response.status_code,
                body=response.body,
                endpoint=path,
                method=method,
            )

        if not response.is_success:
            logger.error(
                f"{operation} failed: HTTP {response.status_code}",
                extra={"operation": operation, "method": method, "status_code": response.status_code},
            )
            raise ApiError(
                f"HTTP request failed: {method} {path} - {response.status_code}",
                f"{operation}_HTTP_ERROR",
                status_code=response.status_code,
                body=response.body,
                endpoint=path,
                method=method,
            )

        return response

    def _call(
        self,
        method: str,
        endpoint: str,
        *,
        operation: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
        files: Optional[Any] = None,
        parse: ResponseFormat = ResponseFormat.JSON,
    ) -> Any:
        """
        Call one endpoint and decode its body.

        Args:
            method: HTTP method
            endpoint: Path below the group's area, e.g. "categories"
            operation: Upper-case operation name used in error codes
            params: Query parameters (None values dropped)
            data: Form fields (None values dropped)
            files: Multipart files
            parse: How to decode the response body

        Returns:
            Decoded JSON, response text, or None

        Raises:
            ResponseParseError: If a JSON body cannot be decoded
        """
        response = self._send(
            method, endpoint, operation=operation, params=params, data=data, files=files
        )

        if parse is ResponseFormat.JSON:
            try:
                return response.json_body()
            except ValueError as e:
                raise ResponseParseError(
                    f"Response is not valid JSON: {method} {self.path(endpoint)}",
                    f"{operation}_PARSE_ERROR",
                    status_code=response.status_code,
                    body=response.body,
                    endpoint=self.path(endpoint),
                    method=method,
                ) from e
        if parse is ResponseFormat.TEXT:
            return response.body
        return None

    def _parse_model(self, model: Type[ModelT], payload: Any, operation: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ResponseParseError(
                f"Unexpected {model.__name__} payload: {e.error_count()} invalid field(s)",
                f"{operation}_PARSE_ERROR",
            ) from e

    def _parse_models(self, model: Type[ModelT], payload: Any, operation: str) -> List[ModelT]:
        if not isinstance(payload, list):
            raise ResponseParseError(
                f"Expected a list of {model.__name__}, got {type(payload).__name__}",
                f"{operation}_PARSE_ERROR",
            )
        return [self._parse_model(model, item, operation) for item in payload]
