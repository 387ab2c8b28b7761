"""Console header generation for gateway session emulation.

The gateway only answers its self-service endpoints for requests that look
like they came from its own web console: same-origin fetch metadata, Chrome
client hints, the console referer, the session cookie and the
``new-api-user`` header. This module builds that header set in the order the
console sends it.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, Optional
from urllib.parse import urlparse

from ..errors import ValidationError
from ..models.auth_context import AuthContext


# Tab or visible ASCII; anything else is rejected as a header field value.
_HEADER_VALUE_RE = re.compile(r"[\t\x20-\x7e]*")


@dataclass(frozen=True)
class HeaderProfile:
    """Browser fingerprint constants sent with every console request."""
    name: str
    authority: str
    accept: str
    accept_language: str
    cache_control: str
    dnt: str
    priority: str
    sec_ch_ua: str
    sec_ch_ua_mobile: str
    sec_ch_ua_platform: str
    sec_fetch_dest: str
    sec_fetch_mode: str
    sec_fetch_site: str
    user_agent: str
    impersonate: str = "chrome"  # curl_cffi TLS target

    def with_overrides(self, **kwargs) -> "HeaderProfile":
        """Return a copy of this profile with some constants replaced."""
        return replace(self, **kwargs)


CHROME_143_WINDOWS = HeaderProfile(
    name="chrome-143-windows",
    authority="api.husanai.com",
    accept="application/json, text/plain, */*",
    accept_language="zh-CN,zh;q=0.9,en-US;q=0.8,en;q=0.7",
    cache_control="no-store",
    dnt="1",
    priority="u=1, i",
    sec_ch_ua='"Google Chrome";v="143", "Chromium";v="143", "Not A(Brand";v="24"',
    sec_ch_ua_mobile="?0",
    sec_ch_ua_platform='"Windows"',
    sec_fetch_dest="empty",
    sec_fetch_mode="cors",
    sec_fetch_site="same-origin",
    user_agent=(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36"
    ),
)

DEFAULT_PROFILE = CHROME_143_WINDOWS

HEADER_ORDER = (
    "authority",
    "accept",
    "accept-language",
    "cache-control",
    "dnt",
    "new-api-user",
    "priority",
    "referer",
    "sec-ch-ua",
    "sec-ch-ua-mobile",
    "sec-ch-ua-platform",
    "sec-fetch-dest",
    "sec-fetch-mode",
    "sec-fetch-site",
    "user-agent",
    "cookie",
)


def is_valid_header_value(value: str) -> bool:
    """Check whether a string can be sent as an HTTP header field value."""
    return _HEADER_VALUE_RE.fullmatch(value) is not None


def validate_header_value(field_name: str, value: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(field_name, f"expected text, got {type(value).__name__}")
    if not is_valid_header_value(value):
        raise ValidationError(
            field_name, "contains characters not allowed in an HTTP header value"
        )
    return value


def validate_console_url(url: str) -> str:
    """Check that the derived console URL is an absolute http(s) URL."""
    if not is_valid_header_value(url):
        raise ValidationError(
            "base_url", f"{url!r} contains characters not allowed in a URL"
        )

    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError for a malformed port
    except ValueError as e:
        raise ValidationError("base_url", f"{url!r} is not a valid URL ({e})") from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValidationError("base_url", f"{url!r} is not an absolute http(s) URL")

    return url


class ConsoleHeadersBuilder:
    """
    Builds the ordered header set of a gateway console request.

    Output depends only on the AuthContext and the profile, so two builds
    from the same inputs are identical. Invalid inputs raise
    ValidationError before any request is made.
    """

    def __init__(self, profile: Optional[HeaderProfile] = None):
        self.profile = profile or DEFAULT_PROFILE

    def generate_headers(self, auth: AuthContext) -> Dict[str, str]:
        """Generate console headers for the given session."""
        user_id = validate_header_value("user_id", auth.user_id)
        cookie = validate_header_value("cookie", auth.cookie)
        referer = validate_console_url(auth.referer)

        profile = self.profile
        return {
            "authority": profile.authority,
            "accept": profile.accept,
            "accept-language": profile.accept_language,
            "cache-control": profile.cache_control,
            "dnt": profile.dnt,
            "new-api-user": user_id,
            "priority": profile.priority,
            "referer": referer,
            "sec-ch-ua": profile.sec_ch_ua,
            "sec-ch-ua-mobile": profile.sec_ch_ua_mobile,
            "sec-ch-ua-platform": profile.sec_ch_ua_platform,
            "sec-fetch-dest": profile.sec_fetch_dest,
            "sec-fetch-mode": profile.sec_fetch_mode,
            "sec-fetch-site": profile.sec_fetch_site,
            "user-agent": profile.user_agent,
            "cookie": cookie,
        }


def build_console_headers(user_id: str, cookie: str, base_url: str,
                          profile: Optional[HeaderProfile] = None) -> Dict[str, str]:
    """Quick utility to build console headers from raw strings."""
    auth = AuthContext(base_url=base_url, cookie=cookie, user_id=user_id)
    return ConsoleHeadersBuilder(profile).generate_headers(auth)
