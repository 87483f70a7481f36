"""Sequenced rate-limit probing.

The detector sends a burst of sequential requests and classifies the
server's defenses from the ordered list of observations, so analysis is a
pure function over the recorded attempts.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from sentinelscan.errors import TransportError
from sentinelscan.tools.http import FetchResult

from .base import Detector, Finding

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUSES = {429, 503}
BLOCKED_STATUSES = {401, 403}
PROGRESSIVE_STATUSES = {429, 403, 503}
# Requests before these indexes are still warming up the limiter.
THROTTLE_START_INDEX = 3
PROGRESSIVE_START_INDEX = 5
THROTTLE_MIN_SLOW = 2


@dataclass
class Attempt:
    """One request in the probing sequence."""

    index: int
    status: int | str
    elapsed_ms: float
    rate_limit_headers: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    @property
    def number(self) -> int:
        return self.index + 1

    @classmethod
    def from_response(cls, index: int, response: FetchResult) -> "Attempt":
        headers = {
            name: value
            for name, value in response.headers.items()
            if name.lower().startswith("x-ratelimit-") or name.lower() == "retry-after"
        }
        return cls(index, response.status, response.elapsed_ms, headers)

    @classmethod
    def from_error(cls, index: int, exc: TransportError) -> "Attempt":
        return cls(index, "Error", exc.elapsed_ms, error=str(exc))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "request": self.number,
            "status": self.status,
            "elapsed_ms": round(self.elapsed_ms, 2),
        }
        if self.rate_limit_headers:
            data["rate_limit_headers"] = dict(self.rate_limit_headers)
        if self.error:
            data["error"] = self.error
        return data


def _is_rate_limited(attempt: Attempt) -> bool:
    if attempt.status in RATE_LIMITED_STATUSES:
        return True
    return bool(attempt.error) and "rate limit" in attempt.error.lower()


def analyze_attempts(attempts: list[Attempt], throttle_factor: float = 1.5) -> Finding:
    """Classify rate-limit defenses from an ordered attempt sequence."""
    rate_limited = [a for a in attempts if _is_rate_limited(a)]
    blocked = [a for a in attempts if a.status in BLOCKED_STATUSES]

    average = sum(a.elapsed_ms for a in attempts) / len(attempts) if attempts else 0.0
    slow = [
        a
        for a in attempts
        if a.index >= THROTTLE_START_INDEX and a.elapsed_ms > average * throttle_factor
    ]
    has_throttling = len(slow) > THROTTLE_MIN_SLOW
    progressive = [
        a
        for a in attempts
        if a.index >= PROGRESSIVE_START_INDEX and a.status in PROGRESSIVE_STATUSES
    ]

    seen_headers: dict[str, str] = {}
    for attempt in attempts:
        seen_headers.update(attempt.rate_limit_headers)

    status_codes: list[int | str] = []
    for attempt in attempts:
        if attempt.status not in status_codes:
            status_codes.append(attempt.status)

    vulnerable = not rate_limited and not blocked and not has_throttling
    issues: list[str] = []
    if vulnerable:
        issues.append(
            "No rate limiting detected - server may be vulnerable to brute force attacks"
        )
    else:
        if rate_limited:
            issues.append(
                f"Rate limiting triggered at request #{rate_limited[0].number} "
                f"({len(rate_limited)} limited responses)"
            )
        if blocked:
            issues.append(
                f"Requests blocked (401/403) starting at request #{blocked[0].number}"
            )
        if has_throttling:
            issues.append(
                "Response time throttling detected - possible rate limiting implementation"
            )
        if progressive:
            issues.append(
                f"Progressive blocking detected starting at request #{progressive[0].number}"
            )
        if seen_headers:
            issues.append(f"Rate limit headers present: {', '.join(sorted(seen_headers))}")

    return Finding(
        vulnerable=vulnerable,
        issues=issues,
        details={
            "requests_made": len(attempts),
            "rate_limited": len(rate_limited),
            "blocked": len(blocked),
            "average_response_time": round(average, 2),
            "has_throttling": has_throttling,
            "progressive_blocking": [a.to_dict() for a in progressive],
            "rate_limit_headers": seen_headers,
            "status_codes": status_codes,
            "attempts": [a.to_dict() for a in attempts],
        },
    )


def spoofed_ip(index: int) -> str:
    """Per-request X-Forwarded-For value from the TEST-NET-3 range."""
    return f"203.0.113.{index % 254 + 1}"


class RateLimitingDetector(Detector):
    """Burst of sequential requests looking for 429s, blocks, or slow-downs."""

    name = "rateLimiting"
    description = "Rate limiting assessment"

    async def check(self, target: str) -> Finding:
        attempts: list[Attempt] = []
        total = self.settings.rate_limit_requests
        async with self.client() as client:
            for index in range(total):
                try:
                    response = await client.get(
                        target,
                        timeout=self.settings.head_timeout,
                        headers={"X-Forwarded-For": spoofed_ip(index)},
                    )
                    attempts.append(Attempt.from_response(index, response))
                except TransportError as exc:
                    logger.debug("Rate-limit probe #%d failed: %s", index + 1, exc)
                    attempts.append(Attempt.from_error(index, exc))
                if index < total - 1 and self.settings.rate_limit_delay > 0:
                    await asyncio.sleep(self.settings.rate_limit_delay)

        return analyze_attempts(attempts, self.settings.throttle_factor)
