"""Test configuration and fixtures for SentinelScan."""

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import httpx
import pytest

from sentinelscan.config import DetectorSettings
from sentinelscan.tools.http import FetchResult

TARGET = "https://example.com"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Point ``Path.home()`` at an empty directory and clear SentinelScan env vars."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    for key in (
        "SENTINELSCAN_LLM_PROVIDER",
        "SENTINELSCAN_LLM_API_KEY",
        "SENTINELSCAN_LLM_MODEL",
        "SENTINELSCAN_LLM_BASE_URL",
        "SENTINELSCAN_OUTPUT_DIR",
        "SENTINELSCAN_VERBOSE",
        "GROQ_API_KEY",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "OPENROUTER_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def fast_settings() -> DetectorSettings:
    """Detector settings with no inter-request delay."""
    return DetectorSettings(rate_limit_delay=0.0)


@pytest.fixture
def make_response() -> Callable[..., FetchResult]:
    """Factory for canned responses fed to detector ``evaluate`` methods."""

    def _make(
        status: int = 200,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: str = "",
        url: str = TARGET,
        elapsed_ms: float = 50.0,
    ) -> FetchResult:
        return FetchResult(
            url=url,
            status=status,
            headers=httpx.Headers(headers or {}),
            body=body,
            elapsed_ms=elapsed_ms,
        )

    return _make
