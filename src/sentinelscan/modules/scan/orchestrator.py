"""Coordinator for running selected detectors against one target."""

import logging
import time
from collections.abc import Callable, Sequence

from sentinelscan.modules.detectors import ALL_CHECKS, DetectorRegistry, resolve_checks

from .models import DetectorError, ScanReport, Target, parse_target

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """Run detectors sequentially and collect one result per requested check."""

    def __init__(self, registry: DetectorRegistry):
        self.registry = registry

    async def run(
        self,
        target: str | Target,
        checks: Sequence[str] | str = ALL_CHECKS,
        progress: Callable[[str], None] | None = None,
    ) -> ScanReport:
        """Scan *target* with *checks* and return the populated report.

        Invalid targets and unknown check ids raise before any detector runs.
        A detector that raises is recorded as a ``DetectorError`` and the scan
        moves on to the next check.
        """
        if isinstance(target, str):
            target = parse_target(target)
        selected = resolve_checks(checks)
        detectors = [self.registry.get(check) for check in selected]

        report = ScanReport(target=target.url)
        logger.info("Scanning %s with %d check(s)", target.url, len(detectors))
        for detector in detectors:
            started = time.perf_counter()
            if progress:
                progress(f"● [{detector.name}] started")
            try:
                finding = await detector.check(target.url)
            except Exception as exc:
                elapsed = time.perf_counter() - started
                logger.warning("Check %s failed: %s", detector.name, exc)
                logger.debug("Check %s traceback", detector.name, exc_info=True)
                if progress:
                    progress(f"! [{detector.name}] failed after {elapsed:.1f}s: {exc}")
                report.add_result(detector.name, DetectorError(str(exc) or type(exc).__name__))
                continue

            report.add_result(detector.name, finding)
            if progress:
                elapsed = time.perf_counter() - started
                progress(f"✓ [{detector.name}] completed ({elapsed:.1f}s)")
        return report
