"""HTTP transport for the inventory backend."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Protocol, Type, TypeVar
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic_core import PydanticSerializationError, to_json

from farmacia.config import Settings

from .endpoints import Endpoint
from .envelope import EmptyResponse, classify_response
from .errors import (
    EncodeFailure,
    InvalidRequest,
    NetworkError,
    NetworkUnavailable,
    Timeout,
    UnknownError,
)

T = TypeVar("T")

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_RESOURCE_TIMEOUT = 60.0
DEFAULT_USER_AGENT = "FarmaciaApp/1.0"
SESSION_TOKEN_HEADER = "X-Session-Token"

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    """Read-only view of the credentials held by the auth collaborator."""

    @property
    def primary_token(self) -> Optional[str]: ...

    @property
    def session_token(self) -> Optional[str]: ...

    @property
    def location_id(self) -> Optional[str]: ...


@dataclass(frozen=True)
class StaticTokens:
    """Fixed credentials, handy for scripts and tests."""

    primary_token: Optional[str] = None
    session_token: Optional[str] = None
    location_id: Optional[str] = None


@dataclass(frozen=True)
class PreparedRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None


def encode_body(body: Any) -> bytes:
    """Serialize a request body to JSON with ISO-8601 dates, omitting unset optionals."""

    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        return to_json(body, by_alias=True, exclude_none=True)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodeFailure(str(exc)) from exc


def _auth_headers(endpoint: Endpoint, tokens: Optional[TokenProvider]) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if tokens is None:
        return headers
    if endpoint.requires_primary_token and tokens.primary_token:
        headers["Authorization"] = f"Bearer {tokens.primary_token}"
    if endpoint.requires_session_token and tokens.session_token:
        headers[SESSION_TOKEN_HEADER] = tokens.session_token
    return headers


def build_url(base_url: str, endpoint: Endpoint, query: Optional[Mapping[str, str]] = None) -> str:
    url = base_url.rstrip("/") + endpoint.path
    if query:
        url = f"{url}?{urlencode([(key, str(value)) for key, value in query.items()])}"
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidRequest(f"Invalid URL: {url}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidRequest(f"Invalid URL: {url}")
    return url


def build_request(
    endpoint: Endpoint,
    body: Any = None,
    query: Optional[Mapping[str, str]] = None,
    *,
    base_url: str,
    tokens: Optional[TokenProvider] = None,
    user_agent: str = DEFAULT_USER_AGENT,
) -> PreparedRequest:
    """Build the request for ``endpoint`` without performing any I/O."""

    url = build_url(base_url, endpoint, query)
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": user_agent,
    }
    headers.update(_auth_headers(endpoint, tokens))
    content = encode_body(body) if body is not None else None
    return PreparedRequest(method=endpoint.method.value, url=url, headers=headers, content=content)


def translate_transport_error(exc: httpx.HTTPError) -> NetworkError:
    """Map an httpx failure onto the client error taxonomy."""

    if isinstance(exc, httpx.TimeoutException):
        return Timeout()
    if isinstance(exc, httpx.NetworkError):
        return NetworkUnavailable()
    if isinstance(exc, httpx.UnsupportedProtocol):
        return InvalidRequest(str(exc))
    return UnknownError(exc)


@lru_cache(maxsize=256)
def _adapter_for(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def _log_response(prepared: PreparedRequest, response: httpx.Response) -> None:
    logger.debug("%s %s -> %s", prepared.method, prepared.url, response.status_code)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Response body: %s", response.text[:500])


def _check_deadline(deadline: float, prepared: PreparedRequest) -> None:
    if time.monotonic() > deadline:
        logger.debug("%s %s exceeded its total timeout", prepared.method, prepared.url)
        raise Timeout()


class _BaseClient:
    def __init__(
        self,
        *,
        base_url: str,
        tokens: Optional[TokenProvider] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._tokens = tokens
        self._user_agent = user_agent
        self._request_timeout = request_timeout
        self._resource_timeout = resource_timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def tokens(self) -> Optional[TokenProvider]:
        return self._tokens

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self._request_timeout, pool=self._resource_timeout)

    def prepare(
        self,
        endpoint: Endpoint,
        body: Any = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> PreparedRequest:
        return build_request(
            endpoint,
            body,
            query,
            base_url=self._base_url,
            tokens=self._tokens,
            user_agent=self._user_agent,
        )

    def _prepare_upload(self, endpoint: Endpoint) -> PreparedRequest:
        prepared = self.prepare(endpoint)
        headers = dict(prepared.headers)
        # httpx writes the multipart boundary header itself.
        headers.pop("Content-Type", None)
        return PreparedRequest(method="POST", url=prepared.url, headers=headers)


class APIClient(_BaseClient):
    """Blocking API client.

    ``request`` returns the decoded payload; ``request_void`` discards it but still
    applies status and envelope handling. Every failure is raised as a
    :class:`~farmacia.network.errors.NetworkError` subclass.
    """

    def __init__(
        self,
        *,
        base_url: str,
        tokens: Optional[TokenProvider] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            tokens=tokens,
            user_agent=user_agent,
            request_timeout=request_timeout,
            resource_timeout=resource_timeout,
        )
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=self._timeout(), transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        tokens: Optional[TokenProvider] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "APIClient":
        return cls(
            base_url=settings.resolved_base_url,
            tokens=tokens,
            user_agent=settings.user_agent,
            request_timeout=settings.request_timeout,
            resource_timeout=settings.resource_timeout,
            transport=transport,
        )

    def request(
        self,
        endpoint: Endpoint,
        response_type: Type[T] | Any,
        *,
        body: Any = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> T:
        prepared = self.prepare(endpoint, body, query)
        response = self._send(prepared)
        return classify_response(
            response.status_code, response.content, _adapter_for(response_type)
        )

    def request_void(
        self,
        endpoint: Endpoint,
        *,
        body: Any = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> None:
        prepared = self.prepare(endpoint, body, query)
        response = self._send(prepared)
        classify_response(
            response.status_code,
            response.content,
            _adapter_for(EmptyResponse),
            expects_body=False,
        )

    def upload_image(
        self,
        endpoint: Endpoint,
        image_data: bytes,
        response_type: Type[T] | Any,
        *,
        filename: str = "image.jpg",
        mime_type: str = "image/jpeg",
    ) -> T:
        prepared = self._prepare_upload(endpoint)
        response = self._send(prepared, files={"image": (filename, image_data, mime_type)})
        return classify_response(
            response.status_code, response.content, _adapter_for(response_type)
        )

    def _send(self, prepared: PreparedRequest, **extra: Any) -> httpx.Response:
        # httpx only bounds each connect/read; the whole exchange gets its own deadline.
        deadline = time.monotonic() + self._resource_timeout
        try:
            with self._http.stream(
                prepared.method,
                prepared.url,
                headers=prepared.headers,
                content=prepared.content,
                **extra,
            ) as streamed:
                _check_deadline(deadline, prepared)
                chunks = []
                for chunk in streamed.iter_raw():
                    chunks.append(chunk)
                    _check_deadline(deadline, prepared)
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", prepared.method, prepared.url, exc)
            raise translate_transport_error(exc) from exc
        response = httpx.Response(
            streamed.status_code,
            headers=streamed.headers,
            content=b"".join(chunks),
            request=streamed.request,
        )
        _log_response(prepared, response)
        return response

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncAPIClient(_BaseClient):
    """Asyncio flavour of :class:`APIClient` used by the feature view-models.

    Calls may run concurrently. Cancelling the awaiting task cancels the underlying
    request and propagates :class:`asyncio.CancelledError` untouched.
    """

    def __init__(
        self,
        *,
        base_url: str,
        tokens: Optional[TokenProvider] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            tokens=tokens,
            user_agent=user_agent,
            request_timeout=request_timeout,
            resource_timeout=resource_timeout,
        )
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._timeout(), transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        tokens: Optional[TokenProvider] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsyncAPIClient":
        return cls(
            base_url=settings.resolved_base_url,
            tokens=tokens,
            user_agent=settings.user_agent,
            request_timeout=settings.request_timeout,
            resource_timeout=settings.resource_timeout,
            transport=transport,
        )

    async def request(
        self,
        endpoint: Endpoint,
        response_type: Type[T] | Any,
        *,
        body: Any = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> T:
        prepared = self.prepare(endpoint, body, query)
        response = await self._send(prepared)
        return classify_response(
            response.status_code, response.content, _adapter_for(response_type)
        )

    async def request_void(
        self,
        endpoint: Endpoint,
        *,
        body: Any = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> None:
        prepared = self.prepare(endpoint, body, query)
        response = await self._send(prepared)
        classify_response(
            response.status_code,
            response.content,
            _adapter_for(EmptyResponse),
            expects_body=False,
        )

    async def upload_image(
        self,
        endpoint: Endpoint,
        image_data: bytes,
        response_type: Type[T] | Any,
        *,
        filename: str = "image.jpg",
        mime_type: str = "image/jpeg",
    ) -> T:
        prepared = self._prepare_upload(endpoint)
        response = await self._send(
            prepared, files={"image": (filename, image_data, mime_type)}
        )
        return classify_response(
            response.status_code, response.content, _adapter_for(response_type)
        )

    async def _send(self, prepared: PreparedRequest, **extra: Any) -> httpx.Response:
        try:
            response = await asyncio.wait_for(
                self._http.request(
                    prepared.method,
                    prepared.url,
                    headers=prepared.headers,
                    content=prepared.content,
                    **extra,
                ),
                timeout=self._resource_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise Timeout() from exc
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", prepared.method, prepared.url, exc)
            raise translate_transport_error(exc) from exc
        _log_response(prepared, response)
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "AsyncAPIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = [
    "APIClient",
    "AsyncAPIClient",
    "PreparedRequest",
    "SESSION_TOKEN_HEADER",
    "StaticTokens",
    "TokenProvider",
    "build_request",
    "build_url",
    "encode_body",
    "translate_transport_error",
]
