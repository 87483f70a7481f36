"""Transport-layer inspection: TLS certificate, cipher suite, DNS records, robots.txt."""

import asyncio
import logging
import math
import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

import dns.asyncresolver
import dns.exception

from sentinelscan.config import DetectorSettings
from sentinelscan.errors import ParseError, TransportError
from sentinelscan.tools.tls import CertificateInfo, TLSProbeResult, decode_certificate, probe_tls

from .base import Detector, Finding, is_https, not_applicable, origin_of

logger = logging.getLogger(__name__)

WEAK_CIPHER_MARKERS = ("RC4", "DES", "3DES", "NULL", "EXPORT")
OUTDATED_PROTOCOLS = {"TLSv1", "TLSv1.1"}
SITEMAP_PATTERN = re.compile(r"Sitemap:", re.IGNORECASE)
SENSITIVE_ROBOTS_MARKERS = ("admin", "backup", "config", "private", "secret", "internal")
DAY_SECONDS = 86_400

TLSProbe = Callable[[str, int, float], TLSProbeResult]


def _endpoint(target: str) -> tuple[str, int]:
    parts = urlsplit(target)
    return parts.hostname or "", parts.port or 443


def evaluate_certificate(
    cert: CertificateInfo, now: datetime, warning_days: int = 30
) -> Finding:
    """Validity window and days-to-expiry of a decoded certificate."""
    valid = cert.not_before <= now <= cert.not_after
    expiry_days = math.ceil((cert.not_after - now).total_seconds() / DAY_SECONDS)

    issues: list[str] = []
    if now < cert.not_before:
        issues.append("Certificate is not yet valid")
    elif now > cert.not_after:
        issues.append(f"Certificate expired {abs(expiry_days)} day(s) ago")
    elif expiry_days <= warning_days:
        issues.append(f"Certificate expires in {expiry_days} day(s)")

    return Finding(
        vulnerable=not valid,
        issues=issues,
        details={
            "valid": valid,
            "expiry_days": expiry_days,
            "valid_from": cert.not_before.isoformat(),
            "valid_to": cert.not_after.isoformat(),
            "issuer": cert.issuer,
            "subject": cert.subject,
        },
    )


def classify_cipher(cipher: str, protocol: str, bits: int | None) -> Finding:
    """Flag weak cipher names and outdated protocol versions."""
    is_weak = any(marker in cipher for marker in WEAK_CIPHER_MARKERS)
    is_outdated = protocol in OUTDATED_PROTOCOLS
    issues: list[str] = []
    if is_weak:
        issues.append(f"Weak cipher negotiated: {cipher}")
    if is_outdated:
        issues.append(f"Outdated protocol negotiated: {protocol}")
    recommended = not is_weak and not is_outdated
    return Finding(
        vulnerable=not recommended,
        issues=issues,
        details={
            "cipher": cipher,
            "protocol": protocol,
            "key_size": bits,
            "is_weak_cipher": is_weak,
            "is_outdated_protocol": is_outdated,
            "recommended": recommended,
        },
    )


class TLSCertificateDetector(Detector):
    """Peer certificate validity and expiry."""

    name = "tls"
    description = "SSL/TLS certificate validity & expiry"

    def __init__(
        self,
        settings: DetectorSettings | None = None,
        probe: TLSProbe = probe_tls,
        clock: Callable[[], datetime] | None = None,
    ):
        super().__init__(settings)
        self._probe = probe
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def check(self, target: str) -> Finding:
        if not is_https(target):
            return not_applicable("Not HTTPS", valid=False)

        host, port = _endpoint(target)
        try:
            result = await asyncio.to_thread(
                self._probe, host, port, self.settings.head_timeout
            )
            cert = decode_certificate(result.certificate_der)
        except (OSError, ParseError) as exc:
            reason = str(exc) or exc.__class__.__name__
            return Finding(
                vulnerable=False,
                issues=[f"Certificate could not be inspected: {reason}"],
                details={"valid": False, "reason": reason},
            )
        return evaluate_certificate(cert, self._clock(), self.settings.tls_expiry_warning_days)


class CipherSuiteDetector(Detector):
    """Negotiated cipher suite and protocol version."""

    name = "sslCipher"
    description = "SSL/TLS cipher suite analysis"

    def __init__(self, settings: DetectorSettings | None = None, probe: TLSProbe = probe_tls):
        super().__init__(settings)
        self._probe = probe

    async def check(self, target: str) -> Finding:
        if not is_https(target):
            return not_applicable("Not HTTPS", supported=False)

        host, port = _endpoint(target)
        try:
            result = await asyncio.to_thread(
                self._probe, host, port, self.settings.head_timeout
            )
        except OSError as exc:
            return Finding(
                vulnerable=False, details={"supported": False, "reason": str(exc)}
            )
        if not result.cipher or not result.protocol:
            return Finding(
                vulnerable=False,
                details={"supported": False, "reason": "No cipher negotiated"},
            )
        return classify_cipher(result.cipher, result.protocol, result.bits)


class DnsSecurityDetector(Detector):
    """DNSSEC, CAA, SPF and DKIM presence for the target's domain."""

    name = "dnsSecurity"
    description = "DNS security (DNSSEC, CAA, SPF, DKIM)"

    def __init__(
        self,
        settings: DetectorSettings | None = None,
        resolver_factory: Callable[[], Any] | None = None,
    ):
        super().__init__(settings)
        self._resolver_factory = resolver_factory or self._default_resolver

    def _default_resolver(self) -> dns.asyncresolver.Resolver:
        resolver = dns.asyncresolver.Resolver()
        resolver.timeout = self.settings.head_timeout
        resolver.lifetime = self.settings.page_timeout
        return resolver

    async def check(self, target: str) -> Finding:
        domain = urlsplit(target).hostname or ""
        resolver = self._resolver_factory()

        ds_records = await self._resolve(resolver, domain, "DS")
        caa_records = [
            {
                "flags": rdata.flags,
                "tag": _text(rdata.tag),
                "value": _text(rdata.value),
            }
            for rdata in await self._resolve(resolver, domain, "CAA")
        ]

        spf_record = None
        for rdata in await self._resolve(resolver, domain, "TXT"):
            txt = _txt_value(rdata)
            if txt.startswith("v=spf1"):
                spf_record = txt
                break

        dkim_records = []
        for selector in self.settings.dkim_selectors:
            answers = await self._resolve(resolver, f"{selector}._domainkey.{domain}", "TXT")
            if answers:
                dkim_records.append(
                    {"selector": selector, "record": "".join(_txt_value(r) for r in answers)}
                )

        dnssec = bool(ds_records)
        issues: list[str] = []
        if not dnssec:
            issues.append("DNSSEC not configured (no DS records)")
        if not caa_records:
            issues.append("No CAA records restricting certificate issuance")
        if spf_record is None:
            issues.append("No SPF record published")
        if not dkim_records:
            issues.append("No DKIM record found for common selectors")

        return Finding(
            vulnerable=spf_record is None or not dnssec,
            issues=issues,
            details={
                "domain": domain,
                "dnssec": dnssec,
                "caa_records": caa_records,
                "spf_record": spf_record,
                "dkim_records": dkim_records,
            },
        )

    async def _resolve(self, resolver: Any, name: str, rdtype: str) -> list[Any]:
        try:
            return list(await resolver.resolve(name, rdtype))
        except dns.exception.DNSException as exc:
            logger.debug("%s lookup for %s failed: %s", rdtype, name, exc)
            return []


def _text(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _txt_value(rdata: Any) -> str:
    return "".join(_text(part) for part in rdata.strings)


class RobotsDetector(Detector):
    """robots.txt and sitemap presence."""

    name = "robots"
    description = "Robots.txt & sitemap presence"

    async def check(self, target: str) -> Finding:
        robots_url = f"{origin_of(target)}/robots.txt"
        try:
            async with self.client() as client:
                response = await client.get(robots_url, timeout=self.settings.page_timeout)
        except TransportError as exc:
            return Finding(
                vulnerable=False,
                details={"robots_txt": False, "sitemap": False, "error": str(exc)},
            )
        return self.evaluate(response.status, response.body)

    def evaluate(self, status: int, body: str) -> Finding:
        has_robots = status == 200
        has_sitemap = bool(SITEMAP_PATTERN.search(body))
        disallowed = self.disallowed_paths(body) if has_robots else []
        sensitive = [
            path
            for path in disallowed
            if any(marker in path.lower() for marker in SENSITIVE_ROBOTS_MARKERS)
        ]

        issues: list[str] = []
        if not has_robots:
            issues.append("robots.txt not found")
        if not has_sitemap:
            issues.append("No sitemap declared")
        if sensitive:
            issues.append(f"robots.txt reveals sensitive paths: {', '.join(sensitive)}")

        details: dict[str, Any] = {
            "robots_txt": has_robots,
            "sitemap": has_sitemap,
            "disallowed_paths": disallowed,
        }
        return Finding(vulnerable=bool(sensitive), issues=issues, details=details)

    @staticmethod
    def disallowed_paths(body: str) -> list[str]:
        paths = []
        for line in body.splitlines():
            key, _, value = line.partition(":")
            value = value.split("#", 1)[0].strip()
            if key.strip().lower() == "disallow" and value:
                paths.append(value)
        return paths
