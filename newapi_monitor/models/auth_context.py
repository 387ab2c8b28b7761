"""Per-call request inputs: session credentials and usage time windows."""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AuthContext:
    """Browser session credentials for one gateway site.

    The cookie is forwarded verbatim and may hold several ``name=value``
    pairs. The user id is the numeric console user id as text.
    """
    base_url: str
    cookie: str
    user_id: str

    @property
    def normalized_base_url(self) -> str:
        """Base URL with every trailing slash removed."""
        return self.base_url.rstrip("/")

    @property
    def referer(self) -> str:
        """Console page URL the gateway expects as the referer."""
        return f"{self.normalized_base_url}/console"

    def url_for(self, path: str) -> str:
        """Join an absolute API path onto the normalized base URL."""
        return f"{self.normalized_base_url}{path}"

    def __repr__(self) -> str:
        return f"AuthContext(base_url={self.base_url!r}, user_id={self.user_id!r}, cookie=<redacted>)"


@dataclass(frozen=True)
class TimeRange:
    """Unix-second window for usage statistics.

    No ordering is enforced; the gateway decides what an inverted window means.
    """
    start_timestamp: int
    end_timestamp: int

    @classmethod
    def today(cls, now: Optional[float] = None) -> "TimeRange":
        """Window from local midnight to the current second."""
        current = time.time() if now is None else now
        moment = datetime.fromtimestamp(current)
        midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        return cls(
            start_timestamp=int(midnight.timestamp()),
            end_timestamp=int(current),
        )

    @property
    def duration_seconds(self) -> int:
        return self.end_timestamp - self.start_timestamp
