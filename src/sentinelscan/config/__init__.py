"""
Configuration management for SentinelScan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (.sentinelscan/.env)
3. Global config file (~/.sentinelscan/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    global_config_path,
    load_env_file,
    load_global_config,
    load_project_config,
    project_env_path,
)
from .getters import (
    DEFAULT_MODELS,
    LLMConfig,
    get_api_key,
    get_config,
    get_llm_base_url,
    get_llm_config,
    get_llm_model,
    get_llm_provider,
    get_output_dir,
    is_verbose,
)
from .settings import DetectorSettings, load_detector_settings

__all__ = [
    # env_loader
    "global_config_path",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    "project_env_path",
    # getters
    "DEFAULT_MODELS",
    "LLMConfig",
    "get_api_key",
    "get_config",
    "get_llm_base_url",
    "get_llm_config",
    "get_llm_model",
    "get_llm_provider",
    "get_output_dir",
    "is_verbose",
    # settings
    "DetectorSettings",
    "load_detector_settings",
]
