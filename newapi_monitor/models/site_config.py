"""Monitor configuration: the list of gateway sites to watch.

Configuration files are JSON, either an object with a ``sites`` list and
optional client settings, or a bare list of sites.
"""

import json
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import ConfigError
from .auth_context import AuthContext


DEFAULT_REFRESH_INTERVAL = 60.0
DEFAULT_TIMEOUT = 30.0


@dataclass
class SiteConfig:
    """One gateway site with the session used to query it."""
    name: str
    url: str
    cookie: str
    user_id: str
    id: Optional[str] = None

    def auth_context(self) -> AuthContext:
        """Build request credentials; surrounding cookie whitespace is dropped."""
        return AuthContext(
            base_url=self.url,
            cookie=self.cookie.strip(),
            user_id=str(self.user_id),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SiteConfig":
        """Create a site from a JSON object.

        Accepts ``userId`` as written by the desktop widget as an alias of
        ``user_id``.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Site entry must be an object, got {type(data).__name__}")

        user_id = data.get("user_id", data.get("userId"))
        missing = [
            key for key, value in (("url", data.get("url")),
                                   ("cookie", data.get("cookie")),
                                   ("user_id", user_id))
            if value is None
        ]
        if missing:
            raise ConfigError(f"Site entry is missing required keys: {', '.join(missing)}")

        return cls(
            name=str(data.get("name") or data["url"]),
            url=str(data["url"]),
            cookie=str(data["cookie"]),
            user_id=str(user_id),
            id=str(data["id"]) if data.get("id") is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "url": self.url,
            "cookie": self.cookie,
            "user_id": self.user_id,
        }
        if self.id is not None:
            result["id"] = self.id
        return result


@dataclass
class MonitorConfig:
    """Top-level configuration for the command-line monitor."""
    sites: List[SiteConfig] = field(default_factory=list)
    timeout: Optional[float] = DEFAULT_TIMEOUT
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    proxy_url: Optional[str] = None
    http_version: Optional[str] = None

    def find_site(self, key: str) -> SiteConfig:
        """Look up a site by id, falling back to its name."""
        for site in self.sites:
            if site.id is not None and site.id == key:
                return site
        for site in self.sites:
            if site.name == key:
                return site
        raise ConfigError(f"No site with id or name {key!r}")

    def add_site(self, site: SiteConfig) -> SiteConfig:
        """Append a site, giving it a millisecond timestamp id if it has none."""
        if site.id is None:
            taken = {s.id for s in self.sites}
            stamp = int(time.time() * 1000)
            while str(stamp) in taken:
                stamp += 1
            site = replace(site, id=str(stamp))
        self.sites.append(site)
        return site

    def update_site(self, key: str, **changes: Optional[str]) -> SiteConfig:
        """Replace the given fields of a site; None leaves a field as it is."""
        current = self.find_site(key)
        updated = replace(current, **{k: v for k, v in changes.items() if v is not None})
        self.sites[self.sites.index(current)] = updated
        return updated

    def remove_site(self, key: str) -> SiteConfig:
        site = self.find_site(key)
        self.sites.remove(site)
        return site

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], List[Any]]) -> "MonitorConfig":
        if isinstance(data, list):
            return cls(sites=[SiteConfig.from_dict(item) for item in data])

        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object or a list of sites")

        sites = data.get("sites", [])
        if not isinstance(sites, list):
            raise ConfigError("'sites' must be a list")

        return cls(
            sites=[SiteConfig.from_dict(item) for item in sites],
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            refresh_interval=float(data.get("refresh_interval", DEFAULT_REFRESH_INTERVAL)),
            proxy_url=data.get("proxy_url"),
            http_version=data.get("http_version"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sites": [site.to_dict() for site in self.sites],
            "timeout": self.timeout,
            "refresh_interval": self.refresh_interval,
            "proxy_url": self.proxy_url,
            "http_version": self.http_version,
        }


def load_config(path: Union[str, Path]) -> MonitorConfig:
    """Load a monitor configuration file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    return MonitorConfig.from_dict(data)


def save_config(config: MonitorConfig, path: Union[str, Path]) -> None:
    """Write a monitor configuration file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
