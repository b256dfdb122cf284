"""Typed HTTP client, endpoint catalog, and error taxonomy for the inventory backend."""

from farmacia.network.client import (
    APIClient,
    AsyncAPIClient,
    PreparedRequest,
    StaticTokens,
    TokenProvider,
    build_request,
)
from farmacia.network.endpoints import CATALOG, Endpoint, EndpointSpec, HTTPMethod, Operation, endpoint
from farmacia.network.envelope import classify_response, decode_payload
from farmacia.network.errors import ErrorKind, NetworkError, is_cancellation

__all__ = [
    "APIClient",
    "AsyncAPIClient",
    "CATALOG",
    "Endpoint",
    "EndpointSpec",
    "ErrorKind",
    "HTTPMethod",
    "NetworkError",
    "Operation",
    "PreparedRequest",
    "StaticTokens",
    "TokenProvider",
    "build_request",
    "classify_response",
    "decode_payload",
    "endpoint",
    "is_cancellation",
]
