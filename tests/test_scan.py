"""Tests for the detector registry, scan models and orchestrator."""

import pytest

from sentinelscan.errors import InvalidTargetError, UnknownCheckError
from sentinelscan.modules.detectors import (
    CATALOG,
    Detector,
    DetectorRegistry,
    Finding,
    create_default_detectors,
    create_default_registry,
    resolve_checks,
)
from sentinelscan.modules.scan import (
    DetectorError,
    ScanOrchestrator,
    ScanReport,
    parse_target,
)


class FakeDetector(Detector):
    """Detector returning a fixed finding."""

    def __init__(self, name: str, vulnerable: bool = False):
        super().__init__()
        self.name = name
        self.vulnerable = vulnerable
        self.targets: list[str] = []

    async def check(self, target: str) -> Finding:
        self.targets.append(target)
        return Finding(vulnerable=self.vulnerable, details={"checked": True})


class FailingDetector(Detector):
    """Detector that always raises."""

    def __init__(self, name: str, message: str):
        super().__init__()
        self.name = name
        self._message = message

    async def check(self, target: str) -> Finding:
        raise RuntimeError(self._message)


class TestCatalog:
    """Tests for the static catalog and check resolution."""

    def test_catalog_order(self):
        """Test catalog order."""
        assert len(CATALOG) == 20
        assert CATALOG[0] == "tls"
        assert CATALOG[-1] == "rateLimiting"

    def test_default_detectors_match_catalog(self):
        """Test default detectors match catalog."""
        detectors = create_default_detectors()
        assert [detector.name for detector in detectors] == list(CATALOG)
        assert all(detector.description for detector in detectors)

    def test_all_expands_to_catalog(self):
        """Test all expands to catalog."""
        assert resolve_checks(["all"]) == list(CATALOG)
        assert resolve_checks("all") == list(CATALOG)

    def test_duplicates_collapse_to_first_position(self):
        """Test duplicates collapse to first position."""
        assert resolve_checks(["cors", "xss", "cors", "tls"]) == ["cors", "xss", "tls"]

    def test_comma_separated_string(self):
        """Test comma separated string."""
        assert resolve_checks("headers, cookies") == ["headers", "cookies"]

    def test_unknown_check_rejected(self):
        """Test unknown check rejected."""
        with pytest.raises(UnknownCheckError) as exc_info:
            resolve_checks(["headers", "bogus"])
        assert "bogus" in str(exc_info.value)
        assert "rateLimiting" in str(exc_info.value)
        assert isinstance(exc_info.value, ValueError)

    def test_empty_request_rejected(self):
        """Test empty request rejected."""
        with pytest.raises(UnknownCheckError):
            resolve_checks([])

    def test_registry_rejects_foreign_ids(self):
        """Test registry rejects foreign ids."""
        with pytest.raises(UnknownCheckError):
            DetectorRegistry([FakeDetector("portScan")])

    def test_registry_lists_in_catalog_order(self):
        """Test registry lists in catalog order."""
        registry = DetectorRegistry([FakeDetector("xss"), FakeDetector("tls")])
        assert registry.available_checks() == ["tls", "xss"]
        assert "xss" in registry
        assert len(registry) == 2

    def test_default_registry_descriptions(self):
        """Test default registry descriptions."""
        descriptions = create_default_registry().descriptions()
        assert list(descriptions) == list(CATALOG)


class TestParseTarget:
    """Tests for parse_target."""

    def test_https_target(self):
        """Test https target."""
        target = parse_target("https://Example.com:8443/app?x=1")
        assert target.scheme == "https"
        assert target.host == "example.com"
        assert target.port == 8443
        assert target.origin == "https://Example.com:8443"

    def test_default_ports(self):
        """Test default ports."""
        assert parse_target("http://example.com").port == 80
        assert parse_target("https://example.com").port == 443

    @pytest.mark.parametrize(
        "url",
        ["", "example.com", "ftp://example.com", "https://", "http://example.com:notaport"],
    )
    def test_invalid_targets(self, url):
        """Test invalid targets."""
        with pytest.raises(InvalidTargetError):
            parse_target(url)


class TestScanReport:
    """Tests for ScanReport."""

    def test_to_dict_shape(self):
        """Test to dict shape."""
        report = ScanReport(target="https://example.com")
        report.add_result("headers", Finding(vulnerable=True, issues=["x"], details={"csp": False}))
        report.add_result("tls", DetectorError("boom"))

        data = report.to_dict()

        assert data["url"] == "https://example.com"
        assert data["timestamp"].endswith("Z")
        assert list(data["results"]) == ["headers", "tls"]
        assert data["results"]["headers"] == {"csp": False, "vulnerable": True, "issues": ["x"]}
        assert data["results"]["tls"] == {"error": "boom"}
        assert "ai_summary" not in data

    def test_ai_summary_attached_once(self):
        """Test ai summary attached once."""
        report = ScanReport(target="https://example.com")
        report.attach_ai_summary({"rating": "B"})
        with pytest.raises(ValueError):
            report.attach_ai_summary({"rating": "C"})
        assert report.to_dict()["ai_summary"] == {"rating": "B"}

    def test_vulnerable_and_failed_checks(self):
        """Test vulnerable and failed checks."""
        report = ScanReport(target="https://example.com")
        report.add_result("headers", Finding(vulnerable=True))
        report.add_result("cors", Finding(vulnerable=False))
        report.add_result("tls", DetectorError("boom"))
        assert report.vulnerable_checks == ["headers"]
        assert report.failed_checks == ["tls"]


class TestScanOrchestrator:
    """Tests for ScanOrchestrator."""

    @pytest.mark.asyncio
    async def test_results_follow_requested_order(self):
        """Test results follow requested order."""
        registry = DetectorRegistry(
            [FakeDetector("tls"), FakeDetector("headers", vulnerable=True), FakeDetector("xss")]
        )
        report = await ScanOrchestrator(registry).run(
            "https://example.com", ["xss", "tls", "headers"]
        )

        assert list(report.results) == ["xss", "tls", "headers"]
        assert report.results["headers"].vulnerable is True

    @pytest.mark.asyncio
    async def test_failing_detector_isolated(self):
        """Test failing detector isolated."""
        healthy = FakeDetector("headers")
        registry = DetectorRegistry([FailingDetector("tls", "handshake exploded"), healthy])
        messages: list[str] = []

        report = await ScanOrchestrator(registry).run(
            "https://example.com", ["tls", "headers"], progress=messages.append
        )

        assert isinstance(report.results["tls"], DetectorError)
        assert report.results["tls"].error == "handshake exploded"
        assert report.results["headers"]["checked"] is True
        assert healthy.targets == ["https://example.com"]
        assert messages[0] == "● [tls] started"
        assert messages[1].startswith("! [tls] failed after")
        assert messages[1].endswith("handshake exploded")
        assert messages[3].startswith("✓ [headers] completed")

    @pytest.mark.asyncio
    async def test_duplicate_ids_run_once(self):
        """Test duplicate ids run once."""
        detector = FakeDetector("cors")
        report = await ScanOrchestrator(DetectorRegistry([detector])).run(
            "https://example.com", ["cors", "cors"]
        )
        assert list(report.results) == ["cors"]
        assert len(detector.targets) == 1

    @pytest.mark.asyncio
    async def test_unknown_check_fails_before_running(self):
        """Test unknown check fails before running."""
        detector = FakeDetector("cors")
        with pytest.raises(UnknownCheckError):
            await ScanOrchestrator(DetectorRegistry([detector])).run(
                "https://example.com", ["cors", "nope"]
            )
        assert detector.targets == []

    @pytest.mark.asyncio
    async def test_invalid_target_fails_before_running(self):
        """Test invalid target fails before running."""
        detector = FakeDetector("cors")
        with pytest.raises(InvalidTargetError):
            await ScanOrchestrator(DetectorRegistry([detector])).run("not a url", ["cors"])
        assert detector.targets == []

    @pytest.mark.asyncio
    async def test_unregistered_catalog_id_rejected(self):
        """Test unregistered catalog id rejected."""
        with pytest.raises(UnknownCheckError):
            await ScanOrchestrator(DetectorRegistry([FakeDetector("cors")])).run(
                "https://example.com", ["tls"]
            )

    @pytest.mark.asyncio
    async def test_every_requested_id_present_despite_failures(self):
        """Test every requested id present despite failures."""
        registry = DetectorRegistry(
            [FailingDetector(name, "down") for name in CATALOG]
        )
        report = await ScanOrchestrator(registry).run("https://example.com", "all")
        assert list(report.results) == list(CATALOG)
        assert report.failed_checks == list(CATALOG)
