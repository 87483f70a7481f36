"""Active single-probe detectors: injected parameters and verb probing."""

import logging
from typing import Any

from sentinelscan.errors import TransportError

from .base import Detector, Finding, append_query, join_path

logger = logging.getLogger(__name__)

RISKY_METHODS = ("PUT", "DELETE", "PATCH")


def looks_like_listing(body: str) -> bool:
    """Heuristic for an auto-generated directory index page."""
    content = body.lower()
    return (
        "<title>index of" in content
        or "directory listing" in content
        or ("<a href=" in content and ".." in content and "parent directory" in content)
    )


class SqlInjectionDetector(Detector):
    """Error-based SQL injection signals from a fixed payload list."""

    name = "sqlInjection"
    description = "SQL injection vulnerability test"

    async def check(self, target: str) -> Finding:
        findings: list[dict[str, Any]] = []
        async with self.client() as client:
            for payload in self.settings.sql_payloads:
                test_url = append_query(target, "test", payload)
                try:
                    response = await client.get(test_url, timeout=self.settings.head_timeout)
                except TransportError as exc:
                    logger.debug("SQLi probe failed for payload %r: %s", payload, exc)
                    continue

                if response.status == 500:
                    findings.append(
                        {"payload": payload, "url": test_url, "error": "500 Internal Server Error"}
                    )
                elif not response.is_server_error and self.has_sql_error(response.body):
                    findings.append(
                        {"payload": payload, "url": test_url, "error": "SQL error detected"}
                    )

        issues = [f"Payload {f['payload']!r} triggered: {f['error']}" for f in findings]
        return Finding(
            vulnerable=bool(findings),
            issues=issues,
            details={"findings": findings, "tested_payloads": len(self.settings.sql_payloads)},
        )

    def has_sql_error(self, body: str) -> bool:
        content = body.lower()
        return any(signature in content for signature in self.settings.sql_error_signatures)


class XssDetector(Detector):
    """Unescaped reflection of a script payload."""

    name = "xss"
    description = "XSS reflection quick test"

    async def check(self, target: str) -> Finding:
        payload = self.settings.xss_payload
        test_url = append_query(target, "test", payload)
        async with self.client() as client:
            response = await client.get(test_url, timeout=self.settings.page_timeout)

        reflected = payload in response.body
        issues = ["Script payload reflected unescaped in the response"] if reflected else []
        return Finding(vulnerable=reflected, issues=issues, details={"tested_url": test_url})


class OpenRedirectDetector(Detector):
    """Redirect to an attacker-controlled URL passed in a query parameter."""

    name = "openRedirect"
    description = "Open redirect test"

    async def check(self, target: str) -> Finding:
        evil_url = self.settings.redirect_probe_url
        test_url = append_query(target, "url", evil_url)
        try:
            async with self.client() as client:
                response = await client.fetch(
                    test_url, timeout=self.settings.head_timeout, follow_redirects=False
                )
        except TransportError as exc:
            return Finding(
                vulnerable=False, details={"tested_url": test_url, "error": str(exc)}
            )

        location = response.headers.get("location")
        vulnerable = bool(location) and evil_url in location
        issues = [f"Target redirects to attacker-supplied URL: {location}"] if vulnerable else []
        return Finding(
            vulnerable=vulnerable,
            issues=issues,
            details={
                "tested_url": test_url,
                "status": response.status,
                "redirect_location": location,
            },
        )


class HttpMethodsDetector(Detector):
    """Which HTTP verbs the target accepts."""

    name = "methods"
    description = "Allowed HTTP methods (GET, POST, PUT, DELETE...)"

    async def check(self, target: str) -> Finding:
        allowed: list[str] = []
        async with self.client() as client:
            for method in self.settings.probe_methods:
                try:
                    response = await client.fetch(
                        target, method=method, timeout=self.settings.head_timeout
                    )
                except TransportError as exc:
                    logger.debug("%s probe failed: %s", method, exc)
                    continue
                if response.is_server_error or response.status == 405:
                    continue
                allowed.append(method)

        risky = [method for method in allowed if method in RISKY_METHODS]
        issues = [f"Potentially dangerous methods accepted: {', '.join(risky)}"] if risky else []
        return Finding(vulnerable=bool(risky), issues=issues, details={"allowed": allowed})


class DirectoryListingDetector(Detector):
    """Auto-index pages on common directory names."""

    name = "directoryListing"
    description = "Directory listing vulnerability"

    async def check(self, target: str) -> Finding:
        directories: list[str] = []
        async with self.client() as client:
            for path in self.settings.listing_paths:
                try:
                    response = await client.get(
                        join_path(target, path), timeout=self.settings.head_timeout
                    )
                except TransportError as exc:
                    logger.debug("Directory probe %s failed: %s", path, exc)
                    continue
                if response.status == 200 and looks_like_listing(response.body):
                    directories.append(path)

        issues = [f"Directory listing enabled at {path}" for path in directories]
        return Finding(
            vulnerable=bool(directories), issues=issues, details={"directories": directories}
        )
