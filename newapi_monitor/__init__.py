"""Balance and usage monitor for new-api gateways.

Queries a self-hosted gateway's console API the way its own web console
does: a browser session cookie, the ``new-api-user`` header and a Chrome
fingerprint header set sent over a Chrome-impersonating TLS stack.

Key Features:
- Ordered, named browser header profiles
- Blocking and async clients sharing one request shape
- Classified failures (validation, transport, HTTP status, body read)
- Multi-site JSON configuration and a command-line watcher
"""

from typing import Any, Dict

# Primary interface
from .queries import (
    fetch_quota,
    fetch_usage_stat,
    fetch_quota_async,
    fetch_usage_stat_async,
    QuotaQuery,
    UsageStatQuery,
    GatewayQuery,
    PreparedRequest,
    QUOTA_PATH,
    USAGE_STAT_PATH,
)

# Errors
from .errors import (
    GatewayError,
    ValidationError,
    TransportError,
    HttpStatusError,
    BodyReadError,
    ConfigError,
)

# Core models
from .models import (
    AuthContext,
    TimeRange,
    SiteConfig,
    MonitorConfig,
    load_config,
)

# Browser emulation
from .browser import (
    HeaderProfile,
    ConsoleHeadersBuilder,
    build_console_headers,
    get_profile,
    CHROME_143_WINDOWS,
    DEFAULT_PROFILE,
)

# HTTP
from .http import (
    GatewayClient,
    AsyncGatewayClient,
    GatewayClientConfig,
    QueryResult,
    ResultKind,
)

# Dashboard
from .dashboard import (
    SiteSnapshot,
    collect_snapshot,
    format_money,
)

# Version information
__version__ = "0.1.0"
__author__ = "newapi-monitor contributors"
__license__ = "MIT"

# Module metadata
__title__ = "newapi-monitor"
__description__ = "Balance and usage monitor for new-api gateways"


def get_module_info() -> Dict[str, Any]:
    """Get package and default profile information."""
    return {
        "name": __title__,
        "version": __version__,
        "description": __description__,
        "default_profile": DEFAULT_PROFILE.name,
        "endpoints": {
            "quota": QUOTA_PATH,
            "usage_stat": USAGE_STAT_PATH,
        },
    }


# Export public API
__all__ = [
    # Queries
    "fetch_quota",
    "fetch_usage_stat",
    "fetch_quota_async",
    "fetch_usage_stat_async",
    "QuotaQuery",
    "UsageStatQuery",
    "GatewayQuery",
    "PreparedRequest",

    # Errors
    "GatewayError",
    "ValidationError",
    "TransportError",
    "HttpStatusError",
    "BodyReadError",
    "ConfigError",

    # Models
    "AuthContext",
    "TimeRange",
    "SiteConfig",
    "MonitorConfig",
    "load_config",

    # Browser emulation
    "HeaderProfile",
    "ConsoleHeadersBuilder",
    "build_console_headers",
    "get_profile",
    "CHROME_143_WINDOWS",
    "DEFAULT_PROFILE",

    # HTTP
    "GatewayClient",
    "AsyncGatewayClient",
    "GatewayClientConfig",
    "QueryResult",
    "ResultKind",

    # Dashboard
    "SiteSnapshot",
    "collect_snapshot",
    "format_money",

    # Version info
    "get_module_info",
    "__version__",
]


# Module initialization
def _initialize_logging():
    """Initialize default logging configuration."""
    import logging

    logger = logging.getLogger(__name__)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)


# Initialize on import
_initialize_logging()
