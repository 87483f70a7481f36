"""Base contract for detector routines."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

from sentinelscan.config import DetectorSettings
from sentinelscan.tools.http import FetchClient

# Unreserved characters left unescaped in query values.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass
class Finding:
    """Result of one detector: named details plus a verdict and issue list."""

    vulnerable: bool
    issues: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.details, "vulnerable": self.vulnerable, "issues": list(self.issues)}

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)


def not_applicable(reason: str, **details: Any) -> Finding:
    """Finding for a check that does not apply to the target (e.g. plain http)."""
    return Finding(vulnerable=False, details={"applicable": False, "reason": reason, **details})


class Detector(ABC):
    """Interface every catalog entry implements."""

    name: str
    description: str = ""

    def __init__(self, settings: DetectorSettings | None = None):
        self.settings = settings or DetectorSettings()

    def client(self) -> FetchClient:
        """Fresh fetch client; detectors never share connections."""
        return FetchClient(timeout=self.settings.page_timeout, user_agent=self.settings.user_agent)

    @abstractmethod
    async def check(self, target: str) -> Finding:
        """Probe one target URL and classify it."""


def append_query(url: str, name: str, value: str) -> str:
    """Add ``name=value`` to the query of *url*, percent-encoding the value.

    The fragment stays at the end so the parameter is actually sent.
    """
    parts = urlsplit(url)
    pair = f"{name}={quote(value, safe=_URI_COMPONENT_SAFE)}"
    query = f"{parts.query}&{pair}" if parts.query else pair
    return urlunsplit(parts._replace(query=query))


def is_https(url: str) -> bool:
    return urlsplit(url).scheme == "https"


def join_path(url: str, path: str) -> str:
    """Append *path* to *url* without doubling the slash."""
    return url.rstrip("/") + path


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"
