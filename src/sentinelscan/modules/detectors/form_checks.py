"""DOM and form structure analysis detectors."""

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from sentinelscan.errors import TransportError
from sentinelscan.tools.html import attr, form_method, parse_document
from sentinelscan.tools.http import FetchClient

from .base import Detector, Finding, is_https, join_path, not_applicable

logger = logging.getLogger(__name__)

STATE_CHANGING_METHODS = {"POST", "PUT", "DELETE", "PATCH"}
CSRF_TOKEN_MARKERS = ("csrf", "token", "nonce")
MIXED_CONTENT_SELECTOR = "img[src], script[src], link[href], iframe[src]"
USERNAME_SELECTOR = 'input[type="text"], input[type="email"], input[name*="user"], input[name*="email"]'
REMEMBER_ME_SELECTOR = 'input[name*="remember"], input[type="checkbox"]'


async def probe_paths(client: FetchClient, target: str, paths: tuple[str, ...], timeout: float):
    """Yield ``(path, response)`` for candidate paths answering 200; failures are skipped."""
    for path in paths:
        try:
            response = await client.get(join_path(target, path), timeout=timeout)
        except TransportError as exc:
            logger.debug("Candidate path %s unreachable: %s", path, exc)
            continue
        if response.status == 200:
            yield path, response


class CsrfDetector(Detector):
    """State-changing forms without an anti-CSRF token field."""

    name = "csrf"
    description = "CSRF token validation check"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.get(target, timeout=self.settings.page_timeout)
        return self.evaluate(parse_document(response.body))

    def evaluate(self, document: BeautifulSoup) -> Finding:
        forms: list[dict[str, Any]] = []
        for form in document.find_all("form"):
            method = form_method(form, "GET")
            has_token = any(
                marker in attr(field, "name").lower()
                for field in form.find_all("input")
                for marker in CSRF_TOKEN_MARKERS
            )
            state_changing = method in STATE_CHANGING_METHODS
            forms.append(
                {
                    "method": method,
                    "action": attr(form, "action"),
                    "has_csrf_token": has_token,
                    "is_state_changing": state_changing,
                    "vulnerable": state_changing and not has_token,
                }
            )

        vulnerable_forms = [form for form in forms if form["vulnerable"]]
        issues = [
            f"{form['method']} form (action '{form['action'] or '(self)'}') has no CSRF token"
            for form in vulnerable_forms
        ]
        return Finding(
            vulnerable=bool(vulnerable_forms),
            issues=issues,
            details={
                "total_forms": len(forms),
                "state_changing_forms": sum(1 for form in forms if form["is_state_changing"]),
                "vulnerable_forms": len(vulnerable_forms),
                "forms": forms,
            },
        )


class FileUploadDetector(Detector):
    """Loosely configured upload forms and exposed upload endpoints."""

    name = "fileUpload"
    description = "File upload vulnerabilities"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.get(target, timeout=self.settings.page_timeout)
            forms, issues = self.analyze_forms(parse_document(response.body))

            paths: list[str] = []
            async for path, _ in probe_paths(
                client, target, self.settings.upload_paths, self.settings.page_timeout
            ):
                paths.append(path)
                issues.append(f"Common upload path '{path}' is accessible")

        return Finding(
            vulnerable=bool(issues),
            issues=issues,
            details={
                "upload_forms_found": len(forms),
                "common_paths_found": len(paths),
                "forms": forms,
                "paths": paths,
            },
        )

    def analyze_forms(self, document: BeautifulSoup) -> tuple[list[dict[str, Any]], list[str]]:
        forms: list[dict[str, Any]] = []
        issues: list[str] = []
        for form in document.find_all("form"):
            file_inputs = form.select('input[type="file"]')
            if not file_inputs:
                continue
            method = form_method(form, "POST")
            enctype = attr(form, "enctype") or "application/x-www-form-urlencoded"
            accept = attr(file_inputs[0], "accept")
            multiple = file_inputs[0].has_attr("multiple")
            forms.append(
                {
                    "action": attr(form, "action"),
                    "method": method,
                    "enctype": enctype,
                    "accept": accept,
                    "multiple": multiple,
                    "file_inputs_count": len(file_inputs),
                }
            )

            if method != "POST":
                issues.append(f"Upload form uses {method} instead of POST")
            if enctype.lower() != "multipart/form-data":
                issues.append('Upload form missing enctype="multipart/form-data"')
            if not accept:
                issues.append("Upload form allows all file types (no accept attribute)")
            if multiple:
                issues.append("Upload form allows multiple files which increases risk")
        return forms, issues


class MixedContentDetector(Detector):
    """Plain-http subresources on an https page."""

    name = "mixedContent"
    description = "Mixed-content detection (HTTP assets on HTTPS site)"

    async def check(self, target: str) -> Finding:
        if not is_https(target):
            return not_applicable("Not HTTPS", mixed_content=False)

        async with self.client() as client:
            response = await client.get(target, timeout=self.settings.page_timeout)
        return self.evaluate(parse_document(response.body))

    def evaluate(self, document: BeautifulSoup) -> Finding:
        mixed_urls: list[str] = []
        for element in document.select(MIXED_CONTENT_SELECTOR):
            source = attr(element, "src") or attr(element, "href")
            if source.startswith("http://"):
                mixed_urls.append(source)

        issues = [f"{len(mixed_urls)} resource(s) loaded over plain HTTP"] if mixed_urls else []
        return Finding(
            vulnerable=bool(mixed_urls),
            issues=issues,
            details={
                "mixed_content": bool(mixed_urls),
                "count": len(mixed_urls),
                "urls": mixed_urls[: self.settings.mixed_content_limit],
            },
        )


class BrokenAuthDetector(Detector):
    """Weak login form construction and exposed authentication endpoints."""

    name = "brokenAuth"
    description = "Broken authentication detection"

    async def check(self, target: str) -> Finding:
        async with self.client() as client:
            response = await client.get(target, timeout=self.settings.page_timeout)
            main_forms = self.login_forms(parse_document(response.body), "main")

            paths: list[str] = []
            path_forms: list[dict[str, Any]] = []
            async for path, page in probe_paths(
                client, target, self.settings.auth_paths, self.settings.page_timeout
            ):
                paths.append(path)
                path_forms.extend(self.login_forms(parse_document(page.body), path))

        forms = main_forms + path_forms
        issues: list[str] = []
        for form in forms:
            if not form["secure_method"]:
                issues.append(f"Login form on {form['page']} uses insecure GET method")
            if not form["has_username"]:
                issues.append(f"Login form on {form['page']} missing username/email field")
            if form["has_remember_me"]:
                issues.append(
                    f"Login form on {form['page']} has 'Remember Me' which may extend "
                    "session unnecessarily"
                )
        if paths:
            issues.append(
                f"Found {len(paths)} accessible login/auth paths - ensure proper protection"
            )

        return Finding(
            vulnerable=bool(issues),
            issues=issues,
            details={
                "login_forms_found": len(forms),
                "common_paths_found": len(paths),
                "main_page_forms": len(main_forms),
                "path_forms": len(path_forms),
                "forms": forms,
                "paths": paths,
            },
        )

    def login_forms(self, document: BeautifulSoup, page: str) -> list[dict[str, Any]]:
        """Describe every form on the page that contains a password field."""
        forms: list[dict[str, Any]] = []
        seen: list[Tag] = []
        for password in document.select('input[type="password"]'):
            form = password.find_parent("form")
            if form is None or any(form is other for other in seen):
                continue
            seen.append(form)
            method = form_method(form, "GET")
            forms.append(
                {
                    "action": attr(form, "action"),
                    "method": method,
                    "has_username": bool(form.select(USERNAME_SELECTOR)),
                    "has_password": True,
                    "has_remember_me": bool(form.select(REMEMBER_ME_SELECTOR)),
                    "secure_method": method == "POST",
                    "page": page,
                }
            )
        return forms
