"""HTTP module for gateway requests.

This module provides the blocking and non-blocking gateway clients and the
QueryResult type they return.
"""

from .client import (
    BaseGatewayClient,
    GatewayClient,
    AsyncGatewayClient,
    GatewayClientConfig,
    create_gateway_client,
    create_async_gateway_client,
    HTTP_VERSIONS,
)

from .response import (
    QueryResult,
    ResultKind,
    charset_from_headers,
    decode_body,
    is_success_status,
    reason_phrase,
)

__all__ = [
    "BaseGatewayClient",
    "GatewayClient",
    "AsyncGatewayClient",
    "GatewayClientConfig",
    "create_gateway_client",
    "create_async_gateway_client",
    "HTTP_VERSIONS",
    "QueryResult",
    "ResultKind",
    "charset_from_headers",
    "decode_body",
    "is_success_status",
    "reason_phrase",
]
