"""Minimal chat client for the AI summary providers."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from sentinelscan.config import LLMConfig
from sentinelscan.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

DEFAULT_BASE_URLS = {
    "anthropic": "https://api.anthropic.com",
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "groq": "https://api.groq.com/openai/v1",
}
OPENAI_COMPATIBLE = ("openai", "openrouter", "groq")


class LLMClient:
    """Client for the Anthropic messages API and OpenAI-compatible chat APIs."""

    def __init__(self, config: LLMConfig, timeout: float = 60.0, max_tokens: int = 2048):
        if config.provider not in DEFAULT_BASE_URLS:
            raise ValueError(f"Unknown provider: {config.provider}")
        self.config = config
        self.max_tokens = max_tokens
        self.client: httpx.Client | None = httpx.Client(timeout=timeout)

    @property
    def provider(self) -> str:
        return self.config.provider

    @property
    def base_url(self) -> str:
        return (self.config.base_url or DEFAULT_BASE_URLS[self.provider]).rstrip("/")

    def close(self) -> None:
        """Close the underlying HTTP client and release the connection pool."""
        if self.client is not None:
            self.client.close()
            self.client = None

    def __enter__(self) -> LLMClient:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def chat(self, message: str, system_prompt: str | None = None) -> str:
        """Send one user message and return the assistant's text."""
        if self.client is None:
            raise CollaboratorFailure("LLM client is closed")
        if not self.config.api_key:
            raise CollaboratorFailure(f"API key not found for provider: {self.provider}")

        if self.provider == "anthropic":
            url, headers, payload = self._anthropic_request(message, system_prompt)
        else:
            url, headers, payload = self._openai_request(message, system_prompt)

        logger.debug("LLM request to %s (model %s)", url, self.config.model)
        try:
            response = self.client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise CollaboratorFailure(f"{self.provider} request failed: {exc}") from exc

        if response.status_code >= 400:
            raise CollaboratorFailure(
                f"{self.provider} API returned status {response.status_code}: "
                f"{response.text[:500]!r}"
            )

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise CollaboratorFailure(
                f"{self.provider} API returned invalid JSON: {exc}. "
                f"Raw response: {response.text[:500]!r}"
            ) from exc
        if not isinstance(data, dict):
            raise CollaboratorFailure(
                f"{self.provider} API response is not a dict (got {type(data).__name__})"
            )

        if self.provider == "anthropic":
            return self._anthropic_text(data)
        return self._openai_text(data)

    def _anthropic_request(
        self, message: str, system_prompt: str | None
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "x-api-key": self.config.api_key or "",
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": message}],
        }
        if system_prompt:
            payload["system"] = system_prompt
        return f"{self.base_url}/v1/messages", headers, payload

    def _openai_request(
        self, message: str, system_prompt: str | None
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": message})
        payload = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
        }
        return f"{self.base_url}/chat/completions", headers, payload

    def _anthropic_text(self, data: dict[str, Any]) -> str:
        content = data.get("content")
        if not isinstance(content, list) or not content:
            raise CollaboratorFailure("Anthropic API response missing 'content'")
        first = content[0]
        if not isinstance(first, dict) or "text" not in first:
            raise CollaboratorFailure("Anthropic API response content[0] missing 'text' key")
        return first["text"]

    def _openai_text(self, data: dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise CollaboratorFailure(f"{self.provider} API response missing 'choices'")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise CollaboratorFailure(
                f"{self.provider} API response choices[0] missing 'message' with 'content'"
            )
        return message["content"]
