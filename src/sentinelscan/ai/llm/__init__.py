"""LLM client for SentinelScan AI summaries."""

from .client import DEFAULT_BASE_URLS, LLMClient

__all__ = ["DEFAULT_BASE_URLS", "LLMClient"]
