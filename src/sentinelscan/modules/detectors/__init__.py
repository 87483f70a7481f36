"""Detector catalog: one routine per weakness category."""

from .active_checks import (
    DirectoryListingDetector,
    HttpMethodsDetector,
    OpenRedirectDetector,
    SqlInjectionDetector,
    XssDetector,
)
from .base import Detector, Finding, append_query, is_https, join_path, not_applicable
from .form_checks import BrokenAuthDetector, CsrfDetector, FileUploadDetector, MixedContentDetector
from .passive_checks import (
    ClickjackingDetector,
    CookieFlagsDetector,
    CorsDetector,
    SecurityHeadersDetector,
    ServerInfoDetector,
    SessionManagementDetector,
)
from .rate_limiting import Attempt, RateLimitingDetector, analyze_attempts
from .registry import (
    ALL_CHECKS,
    CATALOG,
    DetectorRegistry,
    create_default_detectors,
    create_default_registry,
    resolve_checks,
)
from .transport_checks import (
    CipherSuiteDetector,
    DnsSecurityDetector,
    RobotsDetector,
    TLSCertificateDetector,
    classify_cipher,
    evaluate_certificate,
)

__all__ = [
    "ALL_CHECKS",
    "Attempt",
    "BrokenAuthDetector",
    "CATALOG",
    "CipherSuiteDetector",
    "ClickjackingDetector",
    "CookieFlagsDetector",
    "CorsDetector",
    "CsrfDetector",
    "Detector",
    "DetectorRegistry",
    "DirectoryListingDetector",
    "DnsSecurityDetector",
    "FileUploadDetector",
    "Finding",
    "HttpMethodsDetector",
    "MixedContentDetector",
    "OpenRedirectDetector",
    "RateLimitingDetector",
    "RobotsDetector",
    "SecurityHeadersDetector",
    "ServerInfoDetector",
    "SessionManagementDetector",
    "SqlInjectionDetector",
    "TLSCertificateDetector",
    "XssDetector",
    "analyze_attempts",
    "append_query",
    "classify_cipher",
    "create_default_detectors",
    "create_default_registry",
    "evaluate_certificate",
    "is_https",
    "join_path",
    "not_applicable",
    "resolve_checks",
]
