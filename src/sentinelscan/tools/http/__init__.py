"""HTTP helpers for SentinelScan."""

from .client import DEFAULT_USER_AGENT, FetchClient, FetchResult

__all__ = [
    "DEFAULT_USER_AGENT",
    "FetchClient",
    "FetchResult",
]
