"""Per-site balance and daily spend summary.

This is the presentation side of the monitor: it runs both queries for a
configured site and reads the two numbers the widget shows out of the
gateway's ``{"success": ..., "data": {"quota": ...}}`` envelopes.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import GatewayError
from .browser.headers import HeaderProfile
from .http.client import GatewayClient
from .models.auth_context import TimeRange
from .models.site_config import SiteConfig
from .queries import QuotaQuery, UsageStatQuery


logger = logging.getLogger(__name__)

# Gateway quota units per US dollar
QUOTA_PER_UNIT = 500000


@dataclass
class SiteSnapshot:
    """Balance and today's spend for one site at one point in time."""
    site_name: str
    balance: float = 0
    used_today: float = 0
    error: Optional[str] = None
    last_updated: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site": self.site_name,
            "balance": self.balance,
            "used_today": self.used_today,
            "error": self.error,
            "last_updated": self.last_updated,
        }

    def format_line(self) -> str:
        if self.error:
            return f"{self.site_name}: ERROR {self.error}"
        return (
            f"{self.site_name}: Today {format_money(self.used_today)} "
            f"| Balance {format_money(self.balance)}"
        )


class EnvelopeError(Exception):
    """Raised when a gateway reply does not report success."""
    pass


def format_money(quota: float) -> str:
    """Render gateway quota units as dollars."""
    return f"${quota / QUOTA_PER_UNIT:.3f}"


def extract_quota(body: str, failure_message: str) -> float:
    """Read ``data.quota`` from a gateway reply envelope."""
    try:
        envelope = json.loads(body)
    except json.JSONDecodeError as e:
        raise EnvelopeError(f"{failure_message}: invalid JSON ({e})") from e

    if not isinstance(envelope, dict) or not envelope.get("success") or envelope.get("data") is None:
        message = envelope.get("message") if isinstance(envelope, dict) else None
        raise EnvelopeError(message or failure_message)

    data = envelope["data"]
    if not isinstance(data, dict):
        raise EnvelopeError(failure_message)
    # Missing or null quota reads as zero
    quota = data.get("quota") or 0
    if isinstance(quota, bool) or not isinstance(quota, (int, float)):
        raise EnvelopeError(f"{failure_message}: quota is not a number ({quota!r})")
    return quota


def collect_snapshot(site: SiteConfig, client: Optional[GatewayClient] = None,
                     now: Optional[float] = None,
                     profile: Optional[HeaderProfile] = None) -> SiteSnapshot:
    """Fetch balance then today's usage for a site.

    Any failure is recorded on the snapshot with both figures zeroed.
    """
    current = time.time() if now is None else now
    auth = site.auth_context()

    try:
        balance_body = QuotaQuery(profile).execute(auth, client)
        balance = extract_quota(balance_body, "Balance failed")

        usage_body = UsageStatQuery(profile).execute(
            auth, client, time_range=TimeRange.today(current)
        )
        used_today = extract_quota(usage_body, "Usage failed")
    except (GatewayError, EnvelopeError) as e:
        logger.warning(f"Error fetching {site.name}: {e}")
        return SiteSnapshot(site_name=site.name, error=str(e), last_updated=current)

    return SiteSnapshot(
        site_name=site.name,
        balance=balance,
        used_today=used_today,
        last_updated=current,
    )
