"""Passive header and cookie analysis detectors."""

import re
from typing import Any

from sentinelscan.tools.html import parse_document, script_text
from sentinelscan.tools.http import FetchResult

from .base import Detector, Finding, origin_of

SESSION_COOKIE_PATTERN = re.compile(r"session|sess|auth|token|jwt", re.IGNORECASE)
FRAME_BUSTING_PATTERNS = (
    re.compile(r"top\.location|window\.top|self\.parent"),
    re.compile(r"if\s*\(\s*window\s*!==\s*window\.top"),
)


def parse_set_cookie(header: str) -> dict[str, Any]:
    """Split one Set-Cookie header into its name, value and security attributes."""
    parts = [part.strip() for part in header.split(";")]
    name, _, value = parts[0].partition("=")
    cookie: dict[str, Any] = {
        "name": name.strip(),
        "value": value.strip(),
        "secure": False,
        "http_only": False,
        "same_site": None,
        "max_age": None,
        "expires": None,
    }
    for part in parts[1:]:
        key, _, val = part.partition("=")
        key = key.strip().lower()
        val = val.strip()
        if key == "secure":
            cookie["secure"] = True
        elif key == "httponly":
            cookie["http_only"] = True
        elif key == "samesite":
            cookie["same_site"] = val or None
        elif key == "max-age":
            try:
                cookie["max_age"] = int(val)
            except ValueError:
                pass
        elif key == "expires":
            cookie["expires"] = val
    return cookie


def is_session_cookie(name: str) -> bool:
    lowered = name.lower()
    return (
        bool(SESSION_COOKIE_PATTERN.search(name))
        or "jsessionid" in lowered
        or "phpsessid" in lowered
    )


class SecurityHeadersDetector(Detector):
    """Presence of the common browser security headers."""

    name = "headers"
    description = "HTTP security headers (CSP, HSTS, X-Frame-Options, etc.)"

    HEADERS = {
        "csp": "Content-Security-Policy",
        "hsts": "Strict-Transport-Security",
        "x_frame_options": "X-Frame-Options",
        "x_content_type_options": "X-Content-Type-Options",
        "referrer_policy": "Referrer-Policy",
        "permissions_policy": "Permissions-Policy",
    }

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.head(target, timeout=self.settings.head_timeout)
        return self.evaluate(response)

    def evaluate(self, response: FetchResult) -> Finding:
        details = {key: bool(response.headers.get(header)) for key, header in self.HEADERS.items()}
        issues = [
            f"Missing {header} header"
            for key, header in self.HEADERS.items()
            if not details[key]
        ]
        return Finding(vulnerable=bool(issues), issues=issues, details=details)


class CorsDetector(Detector):
    """Overly permissive Access-Control-Allow-Origin."""

    name = "cors"
    description = "CORS misconfiguration check"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.head(target, timeout=self.settings.head_timeout)
        return self.evaluate(target, response)

    def evaluate(self, target: str, response: FetchResult) -> Finding:
        headers = response.headers
        cors_headers = {
            name: headers.get(name)
            for name in (
                "access-control-allow-origin",
                "access-control-allow-methods",
                "access-control-allow-headers",
                "access-control-allow-credentials",
            )
        }
        allow_origin = cors_headers["access-control-allow-origin"]
        own_origins = {origin_of(target), target, target.rstrip("/")}
        misconfigured = allow_origin == "*" or bool(
            allow_origin and allow_origin not in own_origins and "null" not in allow_origin
        )

        issues: list[str] = []
        if allow_origin == "*":
            issues.append("Access-Control-Allow-Origin allows any origin (*)")
        elif misconfigured:
            issues.append(f"Access-Control-Allow-Origin trusts a foreign origin: {allow_origin}")
        credentials = (cors_headers["access-control-allow-credentials"] or "").lower() == "true"
        if allow_origin == "*" and credentials:
            issues.append("Wildcard origin combined with Access-Control-Allow-Credentials: true")

        return Finding(
            vulnerable=misconfigured,
            issues=issues,
            details={
                "cors_enabled": bool(allow_origin),
                "misconfigured": misconfigured,
                "headers": cors_headers,
            },
        )


class CookieFlagsDetector(Detector):
    """Secure / HttpOnly / SameSite coverage over every cookie the target sets."""

    name = "cookies"
    description = "Cookie security flags (Secure, HttpOnly, SameSite)"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.head(target, timeout=self.settings.head_timeout)
        return self.evaluate(response)

    def evaluate(self, response: FetchResult) -> Finding:
        cookies = [parse_set_cookie(value) for value in response.headers.get_list("set-cookie")]
        total = len(cookies)
        secure = sum(1 for cookie in cookies if cookie["secure"])
        http_only = sum(1 for cookie in cookies if cookie["http_only"])
        same_site = sum(1 for cookie in cookies if cookie["same_site"])

        issues: list[str] = []
        for cookie in cookies:
            if not cookie["secure"]:
                issues.append(f"Cookie '{cookie['name']}' not marked Secure")
            if not cookie["http_only"]:
                issues.append(f"Cookie '{cookie['name']}' not marked HttpOnly")
            if not cookie["same_site"]:
                issues.append(f"Cookie '{cookie['name']}' missing SameSite attribute")

        return Finding(
            vulnerable=bool(issues),
            issues=issues,
            details={
                "total": total,
                "secure": f"{secure}/{total}",
                "http_only": f"{http_only}/{total}",
                "same_site": f"{same_site}/{total}",
            },
        )


class SessionManagementDetector(Detector):
    """Security attributes and lifetime of session-like cookies."""

    name = "sessionManagement"
    description = "Session management analysis"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.head(target, timeout=self.settings.head_timeout)
        return self.evaluate(response)

    def evaluate(self, response: FetchResult) -> Finding:
        session_cookies: list[dict[str, Any]] = []
        issues: list[str] = []

        for header in response.headers.get_list("set-cookie"):
            cookie = parse_set_cookie(header)
            name = cookie["name"]
            if not is_session_cookie(name):
                continue
            session_cookies.append(cookie)

            if not cookie["secure"]:
                issues.append(f"Session cookie '{name}' not marked as Secure")
            if not cookie["http_only"]:
                issues.append(f"Session cookie '{name}' not marked as HttpOnly")
            if not cookie["same_site"]:
                issues.append(f"Session cookie '{name}' missing SameSite attribute")
            elif cookie["same_site"].lower() == "lax" and "auth" in name.lower():
                issues.append(
                    f"Authentication cookie '{name}' uses SameSite=Lax instead of Strict"
                )
            max_age = cookie["max_age"]
            if max_age is not None and max_age > self.settings.session_max_age_seconds:
                issues.append(
                    f"Session cookie '{name}' has very long expiration ({max_age} seconds)"
                )

        return Finding(
            vulnerable=bool(issues),
            issues=issues,
            details={
                "session_cookies_found": len(session_cookies),
                "cookies": session_cookies,
            },
        )


class ClickjackingDetector(Detector):
    """Framing protection from headers or frame-busting script."""

    name = "clickjacking"
    description = "Clickjacking vulnerability test"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.get(target, timeout=self.settings.page_timeout)
        return self.evaluate(response)

    def evaluate(self, response: FetchResult) -> Finding:
        x_frame_options = response.headers.get("x-frame-options")
        csp = response.headers.get("content-security-policy")

        x_frame_valid = bool(x_frame_options) and x_frame_options.strip().upper() in {
            "DENY",
            "SAMEORIGIN",
        }
        csp_frame_ancestors = bool(csp) and (
            "frame-ancestors" in csp and "frame-ancestors 'none'" not in csp
        )
        scripts = script_text(parse_document(response.body))
        frame_busting = any(pattern.search(scripts) for pattern in FRAME_BUSTING_PATTERNS)

        vulnerable = not x_frame_valid and not csp_frame_ancestors and not frame_busting
        issues = (
            ["No X-Frame-Options, CSP frame-ancestors, or frame-busting protection found"]
            if vulnerable
            else []
        )
        return Finding(
            vulnerable=vulnerable,
            issues=issues,
            details={
                "x_frame_options": x_frame_options or "Not set",
                "csp_frame_ancestors": csp_frame_ancestors,
                "frame_busting_code": frame_busting,
                "protected": not vulnerable,
                "protection_methods": {
                    "x_frame_options": x_frame_valid,
                    "csp_frame_ancestors": csp_frame_ancestors,
                    "frame_busting": frame_busting,
                },
            },
        )


class ServerInfoDetector(Detector):
    """Server software disclosure in response headers."""

    name = "serverInfo"
    description = "Server information disclosure"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.head(target, timeout=self.settings.head_timeout)
        return self.evaluate(response)

    def evaluate(self, response: FetchResult) -> Finding:
        server = response.headers.get("server")
        powered_by = response.headers.get("x-powered-by")
        issues: list[str] = []
        if server:
            issues.append(f"Server header discloses software: {server}")
        if powered_by:
            issues.append(f"X-Powered-By header discloses framework: {powered_by}")
        return Finding(
            vulnerable=bool(issues),
            issues=issues,
            details={
                "server_header": server or "Not disclosed",
                "information_disclosure": bool(server),
                "powered_by": powered_by,
            },
        )
