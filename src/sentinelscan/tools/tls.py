"""TLS handshake probing.

The handshake deliberately skips certificate verification so expired or
self-signed certificates can still be inspected; the detectors decide what
the certificate and negotiated parameters mean.
"""

import socket
import ssl
from dataclasses import dataclass
from datetime import datetime

from cryptography import x509
from cryptography.x509.oid import NameOID

from sentinelscan.errors import ParseError


@dataclass(frozen=True)
class CertificateInfo:
    """Decoded peer certificate fields."""

    not_before: datetime
    not_after: datetime
    issuer: str
    subject: str


@dataclass(frozen=True)
class TLSProbeResult:
    """Negotiated parameters of one TLS handshake."""

    cipher: str | None
    protocol: str | None
    bits: int | None
    certificate_der: bytes | None


def probe_context() -> ssl.SSLContext:
    """Client context that still negotiates legacy protocols and weak ciphers."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.minimum_version = ssl.TLSVersion.MINIMUM_SUPPORTED
    try:
        context.set_ciphers("ALL:@SECLEVEL=0")
    except ssl.SSLError:
        # builds without security levels
        context.set_ciphers("ALL")
    return context


def probe_tls(host: str, port: int = 443, timeout: float = 5.0) -> TLSProbeResult:
    """Open a raw TLS connection and read the negotiated cipher and peer certificate."""
    context = probe_context()

    with socket.create_connection((host, port), timeout=timeout) as sock:
        with context.wrap_socket(sock, server_hostname=host) as ssock:
            cipher = ssock.cipher()
            return TLSProbeResult(
                cipher=cipher[0] if cipher else None,
                protocol=ssock.version(),
                bits=cipher[2] if cipher else None,
                certificate_der=ssock.getpeercert(binary_form=True),
            )


def _common_name(name: x509.Name) -> str:
    values = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not values:
        return "Unknown"
    return str(values[0].value)


def decode_certificate(der: bytes | None) -> CertificateInfo:
    """Decode a DER certificate; raises ParseError when absent or malformed."""
    if not der:
        raise ParseError("No certificate found")
    try:
        cert = x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise ParseError(f"Malformed certificate: {exc}") from exc
    return CertificateInfo(
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        issuer=_common_name(cert.issuer),
        subject=_common_name(cert.subject),
    )
