"""
Unit tests for the gateway HTTP clients.

These tests verify session configuration, response classification, body
decoding and error handling with curl_cffi sessions replaced by fakes.
"""

import pytest
from curl_cffi import CurlError, CurlHttpVersion, CurlOpt

from newapi_monitor.errors import BodyReadError, HttpStatusError, TransportError
from newapi_monitor.http import (
    AsyncGatewayClient,
    GatewayClient,
    GatewayClientConfig,
    ResultKind,
    charset_from_headers,
    decode_body,
    reason_phrase,
)


class FakeResponse:
    """Streamed response stand-in."""

    def __init__(self, status_code=200, body=b"", reason="OK", headers=None, read_error=None):
        self.status_code = status_code
        self.reason = reason
        self.headers = headers if headers is not None else {"Content-Type": "application/json"}
        self._body = body
        self._read_error = read_error
        self.closed = False

    def iter_content(self):
        yield self._body[:4]
        if self._read_error is not None:
            raise self._read_error
        yield self._body[4:]

    async def aiter_content(self):
        for chunk in self.iter_content():
            yield chunk

    def close(self):
        self.closed = True

    async def aclose(self):
        self.closed = True


class FakeSession:
    """Session stand-in recording how it was built and used."""

    def __init__(self, response=None, error=None, **kwargs):
        self.kwargs = kwargs
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


class FakeAsyncSession(FakeSession):
    """Async session stand-in."""

    async def get(self, url, **kwargs):
        return FakeSession.get(self, url, **kwargs)

    async def close(self):
        self.closed = True


def session_factory(session_class, response=None, error=None):
    """Create a factory that remembers every session it builds."""
    sessions = []

    def factory(**kwargs):
        session = session_class(response=response, error=error, **kwargs)
        sessions.append(session)
        return session

    return factory, sessions


HEADERS = {"authority": "api.husanai.com", "new-api-user": "7", "cookie": "session=a"}


class TestGatewayClient:
    """Test blocking client behavior."""

    def test_success_returns_body_verbatim(self):
        """Test 2xx replies come back untouched."""
        response = FakeResponse(200, b'{"data":{"quota":1000}}')
        factory, sessions = session_factory(FakeSession, response=response)
        client = GatewayClient(session_factory=factory)

        result = client.get("https://x.test/api/user/self", HEADERS)

        assert result.ok
        assert result.kind is ResultKind.OK
        assert result.body == '{"data":{"quota":1000}}'
        assert result.status_code == 200
        assert result.unwrap() == '{"data":{"quota":1000}}'
        assert result.error is None
        assert response.closed
        assert sessions[0].closed

    def test_request_shape(self):
        """Test one streamed GET with the header set as given."""
        factory, sessions = session_factory(FakeSession, response=FakeResponse(200, b"{}"))
        client = GatewayClient(session_factory=factory)

        client.get("https://x.test/api/user/self", HEADERS)

        assert len(sessions) == 1
        assert len(sessions[0].calls) == 1
        url, kwargs = sessions[0].calls[0]
        assert url == "https://x.test/api/user/self"
        assert list(kwargs["headers"].items()) == list(HEADERS.items())
        assert kwargs["stream"] is True
        assert kwargs["allow_redirects"] is True
        assert kwargs["max_redirects"] == 10

    def test_session_configuration(self):
        """Test impersonation, timeout and library header suppression."""
        factory, sessions = session_factory(FakeSession, response=FakeResponse(200, b"{}"))
        client = GatewayClient(session_factory=factory)

        client.get("https://x.test/", HEADERS)

        kwargs = sessions[0].kwargs
        assert kwargs["impersonate"] == "chrome"
        assert kwargs["timeout"] == 30.0
        assert kwargs["verify"] is True
        assert kwargs["default_headers"] is False
        assert "proxies" not in kwargs

    def test_custom_configuration(self):
        """Test proxy, unbounded timeout and disabled impersonation."""
        config = GatewayClientConfig(
            timeout=None,
            impersonate=None,
            proxy_url="http://127.0.0.1:8080",
            verify_ssl=False,
            follow_redirects=False,
        )
        factory, sessions = session_factory(FakeSession, response=FakeResponse(200, b"{}"))
        client = GatewayClient(config, session_factory=factory)

        client.get("https://x.test/", HEADERS)

        kwargs = sessions[0].kwargs
        assert kwargs["timeout"] is None
        assert "impersonate" not in kwargs
        assert kwargs["verify"] is False
        assert kwargs["proxies"] == {"http": "http://127.0.0.1:8080", "https": "http://127.0.0.1:8080"}
        assert sessions[0].calls[0][1]["allow_redirects"] is False

    def test_http_version_option(self):
        """Test a forced HTTP version is set after impersonation via curl_options."""
        config = GatewayClientConfig(http_version="v2_prior_knowledge")
        factory, sessions = session_factory(FakeSession, response=FakeResponse(200, b"{}"))
        client = GatewayClient(config, session_factory=factory)

        client.get("http://x.test/", HEADERS)

        kwargs = sessions[0].kwargs
        assert kwargs["curl_options"] == {CurlOpt.HTTP_VERSION: CurlHttpVersion.V2_PRIOR_KNOWLEDGE}
        assert kwargs["impersonate"] == "chrome"

    def test_default_http_version_is_left_to_curl(self):
        factory, sessions = session_factory(FakeSession, response=FakeResponse(200, b"{}"))

        GatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert "curl_options" not in sessions[0].kwargs

    def test_unknown_http_version(self):
        with pytest.raises(ValueError):
            GatewayClientConfig(http_version="v9")

    def test_fresh_session_per_call(self):
        """Test no session (and so no server cookie) is reused."""
        factory, sessions = session_factory(FakeSession, response=FakeResponse(200, b"{}"))
        client = GatewayClient(session_factory=factory)

        client.get("https://x.test/a", HEADERS)
        client.get("https://x.test/b", HEADERS)

        assert len(sessions) == 2
        assert sessions[0] is not sessions[1]
        assert all(session.closed for session in sessions)

    def test_http_error_keeps_body(self):
        """Test non-2xx replies carry status and body."""
        response = FakeResponse(401, b'{"error":"unauthorized"}', reason="Unauthorized")
        factory, _ = session_factory(FakeSession, response=response)
        client = GatewayClient(session_factory=factory)

        result = client.get("https://x.test/api/user/self", HEADERS)

        assert not result.ok
        assert result.kind is ResultKind.HTTP_STATUS_ERROR
        assert result.status_code == 401
        assert result.body == '{"error":"unauthorized"}'
        assert isinstance(result.error, HttpStatusError)
        assert result.error_message == 'HTTP 401 Unauthorized: {"error":"unauthorized"}'

        with pytest.raises(HttpStatusError) as exc_info:
            result.unwrap()
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == '{"error":"unauthorized"}'

    def test_missing_reason_uses_standard_phrase(self):
        """Test HTTP/2 replies without a reason phrase still read well."""
        response = FakeResponse(404, b"not here", reason="")
        factory, _ = session_factory(FakeSession, response=response)

        result = GatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.error_message == "HTTP 404 Not Found: not here"

    @pytest.mark.parametrize("status_code", [204, 299])
    def test_whole_2xx_range_is_success(self, status_code):
        """Test every 2xx status counts as success."""
        factory, _ = session_factory(FakeSession, response=FakeResponse(status_code, b""))

        result = GatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.ok
        assert result.body == ""

    @pytest.mark.parametrize("status_code", [301, 404, 500, 503])
    def test_non_2xx_is_failure(self, status_code):
        """Test redirects left unfollowed and errors are failures."""
        factory, _ = session_factory(FakeSession, response=FakeResponse(status_code, b"x", reason=""))

        result = GatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.kind is ResultKind.HTTP_STATUS_ERROR
        assert result.error_message.startswith(f"HTTP {status_code}")

    def test_transport_error(self):
        """Test failures before any response are transport errors."""
        error = CurlError("Failed to connect to x.test port 443: Connection refused")
        factory, sessions = session_factory(FakeSession, error=error)
        client = GatewayClient(session_factory=factory)

        result = client.get("https://x.test/", HEADERS)

        assert result.kind is ResultKind.TRANSPORT_ERROR
        assert result.status_code is None
        assert result.body is None
        assert isinstance(result.error, TransportError)
        assert result.error_message == (
            "Request failed: Failed to connect to x.test port 443: Connection refused"
        )
        assert sessions[0].closed

    def test_body_read_error(self):
        """Test failures after the status line are body read errors."""
        response = FakeResponse(200, b'{"data":{}}', read_error=CurlError("Connection reset"))
        factory, _ = session_factory(FakeSession, response=response)

        result = GatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.kind is ResultKind.BODY_READ_ERROR
        assert result.status_code == 200
        assert isinstance(result.error, BodyReadError)
        assert result.error_message == "Read body failed: Connection reset"
        assert response.closed

    def test_body_charset(self):
        """Test bodies are decoded with the declared charset."""
        body = '{"message":"额度不足"}'.encode("gbk")
        response = FakeResponse(200, body, headers={"content-type": "application/json; charset=GBK"})
        factory, _ = session_factory(FakeSession, response=response)

        result = GatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.body == '{"message":"额度不足"}'

    def test_result_to_dict(self):
        """Test result serialization."""
        factory, _ = session_factory(FakeSession, response=FakeResponse(200, b"{}"))

        data = GatewayClient(session_factory=factory).get("https://x.test/", HEADERS).to_dict()

        assert data["kind"] == "ok"
        assert data["status_code"] == 200
        assert data["body"] == "{}"
        assert data["error"] is None


@pytest.mark.asyncio
class TestAsyncGatewayClient:
    """Test non-blocking client behavior."""

    async def test_success(self):
        """Test async success returns the body."""
        response = FakeResponse(200, b'{"data":{"quota":1000}}')
        factory, sessions = session_factory(FakeAsyncSession, response=response)
        client = AsyncGatewayClient(session_factory=factory)

        result = await client.get("https://x.test/api/user/self", HEADERS)

        assert result.ok
        assert result.body == '{"data":{"quota":1000}}'
        assert response.closed
        assert sessions[0].closed
        assert sessions[0].kwargs["default_headers"] is False
        assert sessions[0].calls[0][1]["stream"] is True

    async def test_http_error(self):
        """Test async non-2xx handling matches the blocking client."""
        response = FakeResponse(401, b'{"error":"unauthorized"}', reason="Unauthorized")
        factory, _ = session_factory(FakeAsyncSession, response=response)

        result = await AsyncGatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.error_message == 'HTTP 401 Unauthorized: {"error":"unauthorized"}'

    async def test_transport_error(self):
        """Test async transport failures."""
        factory, sessions = session_factory(FakeAsyncSession, error=CurlError("Could not resolve host: x.test"))

        result = await AsyncGatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.kind is ResultKind.TRANSPORT_ERROR
        assert result.error_message == "Request failed: Could not resolve host: x.test"
        assert sessions[0].closed

    async def test_body_read_error(self):
        """Test async body read failures."""
        response = FakeResponse(200, b"abcdefgh", read_error=CurlError("Operation timed out"))
        factory, _ = session_factory(FakeAsyncSession, response=response)

        result = await AsyncGatewayClient(session_factory=factory).get("https://x.test/", HEADERS)

        assert result.kind is ResultKind.BODY_READ_ERROR
        assert result.error_message == "Read body failed: Operation timed out"


class TestResponseHelpers:
    """Test response decoding helpers."""

    def test_charset_from_headers(self):
        assert charset_from_headers({"Content-Type": "text/plain; charset=ISO-8859-1"}) == "ISO-8859-1"
        assert charset_from_headers({"content-type": 'text/html; charset="utf-8"'}) == "utf-8"
        assert charset_from_headers({"Content-Type": "application/json"}) == "utf-8"
        assert charset_from_headers(None) == "utf-8"

    def test_decode_body_unknown_charset(self):
        """Test unknown charsets fall back to UTF-8."""
        assert decode_body("ok".encode("utf-8"), "x-no-such-charset") == "ok"

    def test_decode_body_replaces_invalid_bytes(self):
        assert decode_body(b"ok\xff", "utf-8") == "ok�"

    def test_reason_phrase(self):
        assert reason_phrase(401) == "Unauthorized"
        assert reason_phrase(401, "Custom") == "Custom"
        assert reason_phrase(599) == ""
