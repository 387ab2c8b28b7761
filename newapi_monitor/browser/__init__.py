"""Browser emulation for gateway console requests.

Exposes the named header profiles and the builder that turns session
credentials into the console's ordered header set.
"""

from .headers import (
    HeaderProfile,
    ConsoleHeadersBuilder,
    build_console_headers,
    is_valid_header_value,
    validate_header_value,
    validate_console_url,
    CHROME_143_WINDOWS,
    DEFAULT_PROFILE,
    HEADER_ORDER,
)

# Registry of named profiles
PROFILES = {
    CHROME_143_WINDOWS.name: CHROME_143_WINDOWS,
}


def get_profile(name: str) -> HeaderProfile:
    """Look up a header profile by name."""
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown header profile {name!r}; available: {', '.join(sorted(PROFILES))}"
        ) from None


__all__ = [
    "HeaderProfile",
    "ConsoleHeadersBuilder",
    "build_console_headers",
    "is_valid_header_value",
    "validate_header_value",
    "validate_console_url",
    "get_profile",
    "CHROME_143_WINDOWS",
    "DEFAULT_PROFILE",
    "HEADER_ORDER",
    "PROFILES",
]
