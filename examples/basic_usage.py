"""
Basic Usage Example for newapi-monitor

This example demonstrates fetching an account record and today's usage
from a new-api gateway with a console session cookie, in both blocking and
async form.
"""

import asyncio
import logging
import os
from typing import Optional

from newapi_monitor import (
    GatewayError,
    TimeRange,
    fetch_quota,
    fetch_quota_async,
    fetch_usage_stat,
    fetch_usage_stat_async,
)


BASE_URL = os.environ.get("NEWAPI_URL", "https://api.husanai.com")
COOKIE = os.environ.get("NEWAPI_COOKIE", "session=replace-me")
USER_ID = os.environ.get("NEWAPI_USER_ID", "39")


def blocking_example() -> Optional[str]:
    """
    Fetch quota and today's usage with the blocking client.

    Returns:
        The raw quota reply, or None if a request failed
    """
    print(f"Fetching quota from: {BASE_URL}")

    try:
        quota = fetch_quota(BASE_URL, COOKIE, USER_ID)
        print(f"Quota reply: {quota}")

        today = TimeRange.today()
        usage = fetch_usage_stat(BASE_URL, COOKIE, USER_ID,
                                 today.start_timestamp, today.end_timestamp)
        print(f"Usage reply: {usage}")
        return quota

    except GatewayError as e:
        print(f"Request failed: {e}")
        return None


async def async_example() -> None:
    """Run both queries concurrently on the async client."""
    today = TimeRange.today()

    results = await asyncio.gather(
        fetch_quota_async(BASE_URL, COOKIE, USER_ID),
        fetch_usage_stat_async(BASE_URL, COOKIE, USER_ID,
                               today.start_timestamp, today.end_timestamp),
        return_exceptions=True,
    )

    for name, result in zip(("quota", "usage"), results):
        if isinstance(result, GatewayError):
            print(f"{name} failed: {result}")
        else:
            print(f"{name}: {result}")


if __name__ == "__main__":
    logging.getLogger("newapi_monitor").setLevel(logging.INFO)

    print("=== Blocking ===")
    blocking_example()

    print("\n=== Async ===")
    asyncio.run(async_example())
