"""Quota and usage-stat queries against a gateway's self-service API.

Both queries build the console header set, issue a single GET and hand back
the raw response body. Failures raise the GatewayError subclass describing
them; ``str()`` of that error is the message shown to users.

The same prepared request can run on the blocking GatewayClient or on the
AsyncGatewayClient, so command-line tools and async hosts share one code
path:

    >>> body = fetch_quota("https://gw.example", "session=abc", "7")
    >>> body = await fetch_usage_stat_async("https://gw.example", "session=abc", "7",
    ...                                     1700000000, 1700003600)
"""

from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlencode

from .browser.headers import ConsoleHeadersBuilder, HeaderProfile, DEFAULT_PROFILE
from .http.client import (
    AsyncGatewayClient,
    GatewayClient,
    create_async_gateway_client,
    create_gateway_client,
)
from .http.response import QueryResult
from .models.auth_context import AuthContext, TimeRange


QUOTA_PATH = "/api/user/self"
USAGE_STAT_PATH = "/api/log/self/stat"

# Consumption logs; the console filters on this type for spend totals.
USAGE_LOG_TYPE = 2


@dataclass(frozen=True)
class PreparedRequest:
    """A fully shaped gateway request that has not been sent yet."""
    url: str
    headers: Dict[str, str]

    def send(self, client: GatewayClient) -> QueryResult:
        return client.get(self.url, self.headers)

    async def send_async(self, client: AsyncGatewayClient) -> QueryResult:
        return await client.get(self.url, self.headers)


class GatewayQuery:
    """Base class for console API queries."""

    path: str = ""

    def __init__(self, profile: Optional[HeaderProfile] = None):
        self.profile = profile or DEFAULT_PROFILE
        self.headers_builder = ConsoleHeadersBuilder(self.profile)

    def build_url(self, auth: AuthContext, **params) -> str:
        return auth.url_for(self.path)

    def prepare(self, auth: AuthContext, **params) -> PreparedRequest:
        """Validate inputs and shape the request without sending it."""
        headers = self.headers_builder.generate_headers(auth)
        return PreparedRequest(url=self.build_url(auth, **params), headers=headers)

    def default_client(self, timeout: Optional[float] = 30.0) -> GatewayClient:
        return create_gateway_client(timeout=timeout, impersonate=self.profile.impersonate)

    def default_async_client(self, timeout: Optional[float] = 30.0) -> AsyncGatewayClient:
        return create_async_gateway_client(timeout=timeout, impersonate=self.profile.impersonate)

    def execute(self, auth: AuthContext, client: Optional[GatewayClient] = None,
                **params) -> str:
        """Run the query on a blocking client and return the body text."""
        request = self.prepare(auth, **params)
        client = client or self.default_client()
        return request.send(client).unwrap()

    async def execute_async(self, auth: AuthContext,
                            client: Optional[AsyncGatewayClient] = None,
                            **params) -> str:
        """Run the query on a non-blocking client and return the body text."""
        request = self.prepare(auth, **params)
        client = client or self.default_async_client()
        result = await request.send_async(client)
        return result.unwrap()


class QuotaQuery(GatewayQuery):
    """Fetches the caller's account record, including remaining quota."""

    path = QUOTA_PATH


class UsageStatQuery(GatewayQuery):
    """Fetches consumption totals over a time window."""

    path = USAGE_STAT_PATH

    def build_url(self, auth: AuthContext, time_range: Optional[TimeRange] = None,
                  **params) -> str:
        if time_range is None:
            raise TypeError("UsageStatQuery requires a time_range")

        # Order and empty filters are part of what the console sends.
        query = urlencode([
            ("type", USAGE_LOG_TYPE),
            ("token_name", ""),
            ("model_name", ""),
            ("start_timestamp", time_range.start_timestamp),
            ("end_timestamp", time_range.end_timestamp),
            ("group", ""),
        ])
        return f"{auth.url_for(self.path)}?{query}"


def fetch_quota(url: str, cookie: str, user_id: str,
                client: Optional[GatewayClient] = None,
                profile: Optional[HeaderProfile] = None) -> str:
    """
    Fetch the account/quota record of a gateway user.

    Args:
        url: Gateway base URL; trailing slashes are ignored
        cookie: Console session cookie, forwarded verbatim
        user_id: Console user id, sent as ``new-api-user``
        client: Optional blocking client; a fresh one is built per call
        profile: Header profile to send; defaults to DEFAULT_PROFILE

    Returns:
        The raw response body

    Raises:
        ValidationError: An input cannot be encoded into the request
        TransportError: The gateway was never reached
        HttpStatusError: The gateway answered with a non-2xx status
        BodyReadError: The response body could not be read
    """
    auth = AuthContext(base_url=url, cookie=cookie, user_id=user_id)
    return QuotaQuery(profile).execute(auth, client)


def fetch_usage_stat(url: str, cookie: str, user_id: str,
                     start_timestamp: int, end_timestamp: int,
                     client: Optional[GatewayClient] = None,
                     profile: Optional[HeaderProfile] = None) -> str:
    """
    Fetch usage-log totals between two Unix timestamps.

    The window is passed through as given; an inverted window is not an
    error here.
    """
    auth = AuthContext(base_url=url, cookie=cookie, user_id=user_id)
    time_range = TimeRange(start_timestamp=int(start_timestamp), end_timestamp=int(end_timestamp))
    return UsageStatQuery(profile).execute(auth, client, time_range=time_range)


async def fetch_quota_async(url: str, cookie: str, user_id: str,
                            client: Optional[AsyncGatewayClient] = None,
                            profile: Optional[HeaderProfile] = None) -> str:
    """Non-blocking variant of fetch_quota."""
    auth = AuthContext(base_url=url, cookie=cookie, user_id=user_id)
    return await QuotaQuery(profile).execute_async(auth, client)


async def fetch_usage_stat_async(url: str, cookie: str, user_id: str,
                                 start_timestamp: int, end_timestamp: int,
                                 client: Optional[AsyncGatewayClient] = None,
                                 profile: Optional[HeaderProfile] = None) -> str:
    """Non-blocking variant of fetch_usage_stat."""
    auth = AuthContext(base_url=url, cookie=cookie, user_id=user_id)
    time_range = TimeRange(start_timestamp=int(start_timestamp), end_timestamp=int(end_timestamp))
    return await UsageStatQuery(profile).execute_async(auth, client, time_range=time_range)
