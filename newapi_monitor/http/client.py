"""Gateway HTTP clients built on curl_cffi.

Each request runs in its own curl_cffi session with Chrome TLS
impersonation. The session's built-in browser headers are disabled so the
console header set goes out exactly as built. Nothing is retried and no
server cookie outlives the call.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from curl_cffi import CurlError, CurlHttpVersion, CurlOpt
from curl_cffi.requests import AsyncSession, Session

from .response import (
    QueryResult,
    body_read_error_result,
    charset_from_headers,
    decode_body,
    http_status_result,
    is_success_status,
    success_result,
    transport_error_result,
)


# Accepted values of GatewayClientConfig.http_version
HTTP_VERSIONS = {
    "v1": CurlHttpVersion.V1_1,
    "v2": CurlHttpVersion.V2_0,
    "v2tls": CurlHttpVersion.V2TLS,
    "v2_prior_knowledge": CurlHttpVersion.V2_PRIOR_KNOWLEDGE,
}


@dataclass
class GatewayClientConfig:
    """Configuration for gateway client behavior."""
    # None waits for as long as the transport does
    timeout: Optional[float] = 30.0

    # curl_cffi impersonation target for the TLS handshake
    impersonate: Optional[str] = "chrome"

    verify_ssl: bool = True
    proxy_url: Optional[str] = None
    follow_redirects: bool = True
    max_redirects: int = 10

    # None keeps the impersonation target's choice (HTTP/2 over TLS). With a
    # Chrome profile curl only sends the priority header on HTTP/2.
    http_version: Optional[str] = None

    def __post_init__(self):
        if self.http_version is not None and self.http_version not in HTTP_VERSIONS:
            raise ValueError(
                f"Unknown http_version {self.http_version!r}; "
                f"expected one of: {', '.join(HTTP_VERSIONS)}"
            )


class BaseGatewayClient:
    """Shared configuration and response classification."""

    def __init__(self, config: Optional[GatewayClientConfig] = None):
        self.config = config or GatewayClientConfig()
        self.logger = logging.getLogger(__name__)

    def _session_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "verify": self.config.verify_ssl,
            "timeout": self.config.timeout,
            "default_headers": False,
        }
        if self.config.impersonate:
            kwargs["impersonate"] = self.config.impersonate
        if self.config.proxy_url:
            kwargs["proxies"] = {"http": self.config.proxy_url, "https": self.config.proxy_url}
        if self.config.http_version:
            # Applied after impersonation, which would otherwise pick the version
            kwargs["curl_options"] = {CurlOpt.HTTP_VERSION: HTTP_VERSIONS[self.config.http_version]}
        return kwargs

    def _request_kwargs(self, headers: Mapping[str, str]) -> Dict[str, Any]:
        return {
            "headers": dict(headers),
            "stream": True,
            "allow_redirects": self.config.follow_redirects,
            "max_redirects": self.config.max_redirects,
        }

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.perf_counter() - start) * 1000)

    def _transport_failure(self, url: str, error: Exception, start: float) -> QueryResult:
        self.logger.warning(f"Request to {url} failed: {error}")
        return transport_error_result(url, str(error), self._elapsed_ms(start))

    def _body_failure(self, url: str, response: Any, error: Exception,
                      start: float) -> QueryResult:
        self.logger.warning(f"Reading body from {url} failed: {error}")
        return body_read_error_result(
            url, response.status_code, getattr(response, "reason", None),
            str(error), self._elapsed_ms(start),
        )

    def _classify(self, url: str, response: Any, content: bytes, start: float) -> QueryResult:
        """Turn a fully read response into a QueryResult."""
        status_code = response.status_code
        reason = getattr(response, "reason", None)
        body = decode_body(content, charset_from_headers(getattr(response, "headers", None)))
        elapsed_ms = self._elapsed_ms(start)

        if not is_success_status(status_code):
            self.logger.warning(f"GET {url} returned HTTP {status_code}")
            return http_status_result(url, status_code, reason, body, elapsed_ms)

        self.logger.debug(f"GET {url} -> {status_code} ({len(content)} bytes, {elapsed_ms} ms)")
        return success_result(url, status_code, reason, body, elapsed_ms)


class GatewayClient(BaseGatewayClient):
    """
    Blocking gateway client.

    ``get`` issues one GET and always returns a QueryResult; transport,
    status and body-read failures are reported in the result, not raised.
    """

    def __init__(self, config: Optional[GatewayClientConfig] = None,
                 session_factory: Optional[Callable[..., Any]] = None):
        super().__init__(config)
        self._session_factory = session_factory or Session

    def get(self, url: str, headers: Mapping[str, str]) -> QueryResult:
        """Perform a GET request with the given header set."""
        self.logger.debug(f"GET {url}")
        start = time.perf_counter()

        session = self._session_factory(**self._session_kwargs())
        try:
            try:
                response = session.get(url, **self._request_kwargs(headers))
            except CurlError as e:
                return self._transport_failure(url, e, start)

            try:
                content = b"".join(response.iter_content())
            except CurlError as e:
                return self._body_failure(url, response, e, start)
            finally:
                response.close()

            return self._classify(url, response, content, start)
        finally:
            session.close()


class AsyncGatewayClient(BaseGatewayClient):
    """Non-blocking gateway client with the same contract as GatewayClient."""

    def __init__(self, config: Optional[GatewayClientConfig] = None,
                 session_factory: Optional[Callable[..., Any]] = None):
        super().__init__(config)
        self._session_factory = session_factory or AsyncSession

    async def get(self, url: str, headers: Mapping[str, str]) -> QueryResult:
        """Perform a GET request with the given header set."""
        self.logger.debug(f"GET {url}")
        start = time.perf_counter()

        session = self._session_factory(**self._session_kwargs())
        try:
            try:
                response = await session.get(url, **self._request_kwargs(headers))
            except CurlError as e:
                return self._transport_failure(url, e, start)

            try:
                chunks = [chunk async for chunk in response.aiter_content()]
            except CurlError as e:
                return self._body_failure(url, response, e, start)
            finally:
                await response.aclose()

            return self._classify(url, response, b"".join(chunks), start)
        finally:
            await session.close()


# Utility functions
def create_gateway_client(timeout: Optional[float] = 30.0,
                          proxy_url: Optional[str] = None,
                          impersonate: Optional[str] = "chrome",
                          http_version: Optional[str] = None) -> GatewayClient:
    """Create a blocking gateway client."""
    config = GatewayClientConfig(
        timeout=timeout,
        proxy_url=proxy_url,
        impersonate=impersonate,
        http_version=http_version,
    )
    return GatewayClient(config)


def create_async_gateway_client(timeout: Optional[float] = 30.0,
                                proxy_url: Optional[str] = None,
                                impersonate: Optional[str] = "chrome",
                                http_version: Optional[str] = None) -> AsyncGatewayClient:
    """Create a non-blocking gateway client."""
    config = GatewayClientConfig(
        timeout=timeout,
        proxy_url=proxy_url,
        impersonate=impersonate,
        http_version=http_version,
    )
    return AsyncGatewayClient(config)
