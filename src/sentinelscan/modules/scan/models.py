"""Data models for one scan run."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

from sentinelscan.errors import InvalidTargetError
from sentinelscan.modules.detectors import Finding

SUPPORTED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class Target:
    """Validated absolute URL of the application under test."""

    url: str
    scheme: str
    host: str
    port: int
    origin: str


def parse_target(url: str) -> Target:
    """Validate *url* and split out its components."""
    url = (url or "").strip()
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise InvalidTargetError(f"Invalid target URL {url!r}: {exc}") from exc

    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise InvalidTargetError(
            f"Invalid target URL {url!r}: scheme must be http or https"
        )
    if not parts.hostname:
        raise InvalidTargetError(f"Invalid target URL {url!r}: missing host")

    return Target(
        url=url,
        scheme=scheme,
        host=parts.hostname,
        port=port or (443 if scheme == "https" else 80),
        origin=f"{scheme}://{parts.netloc}",
    )


@dataclass
class DetectorError:
    """Result entry for a detector that raised instead of returning a finding."""

    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error}


CheckResult = Finding | DetectorError


@dataclass
class ScanReport:
    """Ordered per-check results for one target."""

    target: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    results: dict[str, CheckResult] = field(default_factory=dict)
    ai_summary: Any = None

    def add_result(self, check_id: str, result: CheckResult) -> None:
        self.results[check_id] = result

    def attach_ai_summary(self, summary: Any) -> None:
        """Attach the AI assessment; only allowed once per report."""
        if self.ai_summary is not None:
            raise ValueError("AI summary already attached to this report")
        self.ai_summary = summary

    @property
    def failed_checks(self) -> list[str]:
        return [check for check, result in self.results.items() if isinstance(result, DetectorError)]

    @property
    def vulnerable_checks(self) -> list[str]:
        return [
            check
            for check, result in self.results.items()
            if isinstance(result, Finding) and result.vulnerable
        ]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.target,
            "timestamp": self.timestamp,
            "results": {check: result.to_dict() for check, result in self.results.items()},
        }
        if self.ai_summary is not None:
            summary = self.ai_summary
            data["ai_summary"] = summary.to_dict() if hasattr(summary, "to_dict") else summary
        return data
