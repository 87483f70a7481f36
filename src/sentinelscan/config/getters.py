"""Configuration getter functions."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .env_loader import load_global_config, load_project_config

DEFAULT_PROVIDER = "groq"

DEFAULT_MODELS = {
    "anthropic": "claude-3-5-sonnet-20241022",
    "openai": "gpt-4o",
    "openrouter": "openai/gpt-4o-mini",
    "groq": "llama-3.3-70b-versatile",
}

_PROVIDER_KEY_VARS = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "groq": "GROQ_API_KEY",
}


@dataclass(frozen=True)
class LLMConfig:
    """Connection settings for the AI summary provider."""

    provider: str
    api_key: str | None
    model: str
    base_url: str | None = None


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    project_config = load_project_config(project_dir)
    if key in project_config:
        return project_config[key]

    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    return default


def get_llm_provider(project_dir: Path | None = None) -> str:
    """Get LLM provider (default: groq)."""
    return str(get_config("SENTINELSCAN_LLM_PROVIDER", project_dir, DEFAULT_PROVIDER)).lower()


def get_api_key(provider: str = DEFAULT_PROVIDER, project_dir: Path | None = None) -> str | None:
    """Get API key for a provider, falling back to the provider's own variable."""
    unified = get_config("SENTINELSCAN_LLM_API_KEY", project_dir)
    if unified:
        return unified

    env_var = _PROVIDER_KEY_VARS.get(provider, f"{provider.upper()}_API_KEY")
    return get_config(env_var, project_dir)


def get_llm_model(project_dir: Path | None = None) -> str | None:
    """Get LLM model name."""
    return get_config("SENTINELSCAN_LLM_MODEL", project_dir)


def get_llm_base_url(project_dir: Path | None = None) -> str | None:
    """Get LLM base URL."""
    return get_config("SENTINELSCAN_LLM_BASE_URL", project_dir)


def get_llm_config(project_dir: Path | None = None) -> LLMConfig:
    """Assemble the LLM configuration that gets injected into the summarizer."""
    provider = get_llm_provider(project_dir)
    return LLMConfig(
        provider=provider,
        api_key=get_api_key(provider, project_dir),
        model=get_llm_model(project_dir) or DEFAULT_MODELS.get(provider, DEFAULT_MODELS["groq"]),
        base_url=get_llm_base_url(project_dir),
    )


def get_output_dir(project_dir: Path | None = None) -> Path:
    """Directory reports are written to."""
    return Path(get_config("SENTINELSCAN_OUTPUT_DIR", project_dir, "./reports"))


def is_verbose(project_dir: Path | None = None) -> bool:
    """Whether verbose logging was requested through configuration."""
    value = get_config("SENTINELSCAN_VERBOSE", project_dir, "")
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
