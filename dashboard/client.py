"""The dashboard's handle on the record service.

The URL is resolved once, on first use, the same way fundctl resolves it
($TRACKER_API_URL, then the config file, then the default).
"""

from functools import lru_cache

from fundctl.client import APIError, TrackerClient
from fundctl.config import resolve_api_url


@lru_cache(maxsize=1)
def get_client() -> TrackerClient:
    return TrackerClient(base_url=resolve_api_url())


__all__ = ["get_client", "TrackerClient", "APIError"]
