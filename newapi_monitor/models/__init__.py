"""Data models for the gateway monitor.

Request inputs (credentials, time windows) and the site configuration
consumed by the command-line monitor.
"""

from .auth_context import (
    AuthContext,
    TimeRange,
)

from .site_config import (
    SiteConfig,
    MonitorConfig,
    load_config,
    save_config,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_TIMEOUT,
)

__all__ = [
    "AuthContext",
    "TimeRange",
    "SiteConfig",
    "MonitorConfig",
    "load_config",
    "save_config",
    "DEFAULT_REFRESH_INTERVAL",
    "DEFAULT_TIMEOUT",
]
