"""Tunable detector heuristics.

Every payload list, candidate path list, threshold and timeout the detectors
use lives here, so an operator can override them from the ``detectors:``
section of ``~/.sentinelscan/config.yml`` without touching detector code.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from .env_loader import load_global_config

logger = logging.getLogger(__name__)

THIRTY_DAYS = 30 * 24 * 60 * 60


@dataclass(frozen=True)
class DetectorSettings:
    """Heuristic knobs shared by the detector catalog."""

    user_agent: str = "SentinelScan/1.0"
    head_timeout: float = 5.0
    page_timeout: float = 10.0

    sql_payloads: tuple[str, ...] = (
        "' OR '1'='1",
        "'; DROP TABLE users; --",
        "' UNION SELECT * FROM users --",
        "admin' --",
        "1' OR '1' = '1",
    )
    sql_error_signatures: tuple[str, ...] = (
        "sql syntax",
        "mysql error",
        "postgresql error",
        "sqlite error",
        "ora-",
        "microsoft sql server",
        "syntax error",
    )
    xss_payload: str = '<script>alert("xss")</script>'
    redirect_probe_url: str = "http://evil.com"
    probe_methods: tuple[str, ...] = ("GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
    listing_paths: tuple[str, ...] = ("/admin/", "/backup/", "/config/", "/uploads/")
    upload_paths: tuple[str, ...] = ("/upload", "/fileupload", "/files", "/media")
    auth_paths: tuple[str, ...] = (
        "/login",
        "/signin",
        "/auth",
        "/admin",
        "/account/login",
        "/user/login",
        "/signin",
        "/signup",
        "/register",
        "/account/register",
    )
    dkim_selectors: tuple[str, ...] = ("default", "google", "mail")

    mixed_content_limit: int = 10
    session_max_age_seconds: int = THIRTY_DAYS
    tls_expiry_warning_days: int = 30

    rate_limit_requests: int = 15
    rate_limit_delay: float = 0.2
    throttle_factor: float = 1.5

    def with_overrides(self, overrides: dict[str, Any]) -> "DetectorSettings":
        """Return a copy with known fields replaced; unknown keys are ignored."""
        known = {f.name: f for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                logger.warning("Ignoring unknown detector setting: %s", key)
                continue
            if isinstance(value, list):
                value = tuple(value)
            changes[key] = value
        return dataclasses.replace(self, **changes)


def load_detector_settings(overrides: dict[str, Any] | None = None) -> DetectorSettings:
    """Build settings from defaults, the global YAML file, then explicit overrides."""
    settings = DetectorSettings()
    section = load_global_config().get("detectors") or {}
    if isinstance(section, dict) and section:
        settings = settings.with_overrides(section)
    if overrides:
        settings = settings.with_overrides(overrides)
    return settings
