"""Static detector catalog and check-id resolution."""

from collections.abc import Iterable, Sequence

from sentinelscan.config import DetectorSettings
from sentinelscan.errors import UnknownCheckError

from .active_checks import (
    DirectoryListingDetector,
    HttpMethodsDetector,
    OpenRedirectDetector,
    SqlInjectionDetector,
    XssDetector,
)
from .base import Detector
from .form_checks import BrokenAuthDetector, CsrfDetector, FileUploadDetector, MixedContentDetector
from .passive_checks import (
    ClickjackingDetector,
    CookieFlagsDetector,
    CorsDetector,
    SecurityHeadersDetector,
    ServerInfoDetector,
    SessionManagementDetector,
)
from .rate_limiting import RateLimitingDetector
from .transport_checks import (
    CipherSuiteDetector,
    DnsSecurityDetector,
    RobotsDetector,
    TLSCertificateDetector,
)

ALL_CHECKS = "all"

CATALOG: tuple[str, ...] = (
    "tls",
    "headers",
    "methods",
    "mixedContent",
    "robots",
    "cookies",
    "xss",
    "openRedirect",
    "cors",
    "serverInfo",
    "directoryListing",
    "sqlInjection",
    "csrf",
    "sslCipher",
    "dnsSecurity",
    "brokenAuth",
    "clickjacking",
    "sessionManagement",
    "fileUpload",
    "rateLimiting",
)

DETECTOR_CLASSES: tuple[type[Detector], ...] = (
    TLSCertificateDetector,
    SecurityHeadersDetector,
    HttpMethodsDetector,
    MixedContentDetector,
    RobotsDetector,
    CookieFlagsDetector,
    XssDetector,
    OpenRedirectDetector,
    CorsDetector,
    ServerInfoDetector,
    DirectoryListingDetector,
    SqlInjectionDetector,
    CsrfDetector,
    CipherSuiteDetector,
    DnsSecurityDetector,
    BrokenAuthDetector,
    ClickjackingDetector,
    SessionManagementDetector,
    FileUploadDetector,
    RateLimitingDetector,
)


def _unknown(ids: Iterable[str]) -> UnknownCheckError:
    return UnknownCheckError(
        f"Unknown check(s): {', '.join(ids)}. Available checks: {', '.join(CATALOG)}"
    )


def resolve_checks(ids: Sequence[str] | str) -> list[str]:
    """Expand ``all``, reject unknown ids and collapse duplicates, keeping first positions."""
    if isinstance(ids, str):
        ids = [part.strip() for part in ids.split(",") if part.strip()]
    if not ids:
        raise UnknownCheckError("No checks requested")

    if ALL_CHECKS in ids:
        return list(CATALOG)

    missing = sorted({check for check in ids if check not in CATALOG})
    if missing:
        raise _unknown(missing)
    return list(dict.fromkeys(ids))


class DetectorRegistry:
    """Mapping of catalog id to detector instance."""

    def __init__(self, detectors: Iterable[Detector] | None = None):
        self._detectors: dict[str, Detector] = {}
        for detector in detectors or []:
            self.register(detector)

    def register(self, detector: Detector) -> None:
        """Register or replace a detector by catalog id."""
        if detector.name not in CATALOG:
            raise _unknown([detector.name])
        self._detectors[detector.name] = detector

    def get(self, check_id: str) -> Detector:
        try:
            return self._detectors[check_id]
        except KeyError:
            raise _unknown([check_id]) from None

    def available_checks(self) -> list[str]:
        """Registered ids in catalog order."""
        return [check for check in CATALOG if check in self._detectors]

    def descriptions(self) -> dict[str, str]:
        return {check: self._detectors[check].description for check in self.available_checks()}

    def __contains__(self, check_id: object) -> bool:
        return check_id in self._detectors

    def __len__(self) -> int:
        return len(self._detectors)


def create_default_detectors(settings: DetectorSettings | None = None) -> list[Detector]:
    """Return one instance of every catalog detector, in catalog order."""
    return [detector_class(settings) for detector_class in DETECTOR_CLASSES]


def create_default_registry(settings: DetectorSettings | None = None) -> DetectorRegistry:
    return DetectorRegistry(create_default_detectors(settings))
