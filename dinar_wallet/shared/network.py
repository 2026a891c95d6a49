"""REST client for the wallet backend with timeout handling and error classification.

The backend speaks the PostgREST dialect: tables live under ``/rest/v1/<table>``
and stored procedures under ``/rest/v1/rpc/<function>``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


class NetworkErrorType(Enum):
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    UNKNOWN = "unknown"


@dataclass
class NetworkError(Exception):
    error_type: NetworkErrorType
    message: str
    original_error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None
    code: str | None = None
    details: str | None = None
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class TimeoutConfig:
    connect_timeout: float = 5.0
    read_timeout: float = 15.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


DEFAULT_TIMEOUT_CONFIG = TimeoutConfig()


def classify_error(error: Exception) -> NetworkErrorType:
    if isinstance(error, Timeout):
        return NetworkErrorType.TIMEOUT
    elif isinstance(error, ConnectionError):
        return NetworkErrorType.CONNECTION_ERROR
    elif isinstance(error, HTTPError):
        return NetworkErrorType.HTTP_ERROR
    return NetworkErrorType.UNKNOWN


def _parse_error_body(response: Any) -> dict[str, Any]:
    try:
        body = response.json()
    except (ValueError, AttributeError):
        return {}
    return body if isinstance(body, dict) else {}


def create_network_error(
    error: Exception, base_url: str, context: str = ""
) -> NetworkError:
    error_type = classify_error(error)
    context_prefix = f"{context}: " if context else ""

    if error_type == NetworkErrorType.TIMEOUT:
        message = (
            f"{context_prefix}Connection timeout. Server may be unavailable: {base_url}"
        )
    elif error_type == NetworkErrorType.CONNECTION_ERROR:
        message = (
            f"{context_prefix}Cannot connect to server: {base_url}. "
            "Check your network connection."
        )
    elif error_type == NetworkErrorType.HTTP_ERROR:
        response = getattr(error, "response", None)
        status_code = getattr(response, "status_code", None)
        response_text = getattr(response, "text", None)
        body = _parse_error_body(response)
        server_message = body.get("message") or body.get("error_description")
        return NetworkError(
            error_type=error_type,
            message=server_message
            or f"{context_prefix}HTTP error {status_code}: {response_text or 'Unknown error'}",
            original_error=error,
            status_code=status_code,
            response_text=response_text,
            code=body.get("code"),
            details=body.get("details"),
            hint=body.get("hint"),
        )
    else:
        message = f"{context_prefix}Network error: {str(error)}"

    return NetworkError(
        error_type=error_type,
        message=message,
        original_error=error,
    )


def format_filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


@dataclass
class QueryOptions:
    columns: str = "*"
    filters: dict[str, tuple[str, Any]] = field(default_factory=dict)
    order: tuple[str, bool] | None = None
    limit: int | None = None
    single: bool = False

    def to_params(self) -> dict[str, str]:
        params = {"select": "".join(self.columns.split())}
        for column, (operator, value) in self.filters.items():
            params[column] = f"{operator}.{format_filter_value(value)}"
        if self.order:
            column, ascending = self.order
            params["order"] = f"{column}.{'asc' if ascending else 'desc'}"
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params


class NetworkClient:
    """Thin wrapper over ``requests`` for a PostgREST-compatible backend.

    Every failure surfaces as :class:`NetworkError`. Requests are never
    retried; a transfer RPC in particular must run at most once per call.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout_config: TimeoutConfig | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.timeout_config = timeout_config or DEFAULT_TIMEOUT_CONFIG

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _execute(self, operation: Callable[[], T], context: str = "") -> T:
        try:
            return operation()
        except NetworkError:
            raise
        except Exception as e:
            network_error = create_network_error(e, self.base_url, context)
            logger.warning("%s failed: %s", context or "Request", network_error)
            raise network_error from e

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    def rpc(self, function: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.rest_url}/rpc/{function}"
        payload = {k: v for k, v in (params or {}).items() if v is not None}

        def operation() -> Any:
            response = requests.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout_config.request_timeout,
            )
            return self._decode(response)

        return self._execute(operation, context=f"RPC {function}")

    def select(self, table: str, options: QueryOptions | None = None) -> Any:
        options = options or QueryOptions()
        url = f"{self.rest_url}/{table}"
        extra = {"Accept": SINGLE_OBJECT_MEDIA_TYPE} if options.single else None

        def operation() -> Any:
            response = requests.get(
                url,
                params=options.to_params(),
                headers=self._headers(extra),
                timeout=self.timeout_config.request_timeout,
            )
            return self._decode(response)

        return self._execute(operation, context=f"Select {table}")

    def count(self, table: str, filters: dict[str, tuple[str, Any]]) -> int:
        url = f"{self.rest_url}/{table}"
        options = QueryOptions(filters=filters)

        def operation() -> int:
            response = requests.head(
                url,
                params=options.to_params(),
                headers=self._headers({"Prefer": "count=exact"}),
                timeout=self.timeout_config.request_timeout,
            )
            response.raise_for_status()
            return parse_content_range_total(response.headers.get("Content-Range"))

        return self._execute(operation, context=f"Count {table}")

    def insert(self, table: str, row: dict[str, Any], single: bool = True) -> Any:
        url = f"{self.rest_url}/{table}"
        extra = {"Prefer": "return=representation"}
        if single:
            extra["Accept"] = SINGLE_OBJECT_MEDIA_TYPE

        def operation() -> Any:
            response = requests.post(
                url,
                json=row,
                headers=self._headers(extra),
                timeout=self.timeout_config.request_timeout,
            )
            return self._decode(response)

        return self._execute(operation, context=f"Insert {table}")

    def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, tuple[str, Any]],
        single: bool = True,
    ) -> Any:
        url = f"{self.rest_url}/{table}"
        options = QueryOptions(filters=filters)
        extra = {"Prefer": "return=representation"}
        if single:
            extra["Accept"] = SINGLE_OBJECT_MEDIA_TYPE

        def operation() -> Any:
            response = requests.patch(
                url,
                params=options.to_params(),
                json=values,
                headers=self._headers(extra),
                timeout=self.timeout_config.request_timeout,
            )
            return self._decode(response)

        return self._execute(operation, context=f"Update {table}")


_CONTENT_RANGE_TOTAL = re.compile(r"/(\d+)$")


def parse_content_range_total(content_range: str | None) -> int:
    if not content_range:
        return 0
    match = _CONTENT_RANGE_TOTAL.search(content_range.strip())
    if not match:
        return 0
    return int(match.group(1))
