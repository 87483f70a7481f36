"""AI security assessment of a finished scan."""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from sentinelscan.modules.scan import ScanReport

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "AI analysis failed - manual review recommended"
RATINGS = ("A", "B", "C", "D", "F")
RISK_LEVELS = ("Critical", "High", "Medium", "Low")

SYSTEM_PROMPT = (
    "You are a senior application security consultant. You review automated web "
    "security scan results and respond only with valid JSON."
)

PROMPT_TEMPLATE = """Analyze this web security scan report and provide a concise, actionable summary in JSON format.

Required JSON structure:
{{
  "summary": "Brief overall assessment (1-2 sentences)",
  "rating": "Letter grade (A, B, C, D, F) based on security posture",
  "recommendations": ["Array of 3 key actionable recommendations"],
  "critical_issues": ["List of most critical vulnerabilities found"],
  "severity_score": "Numerical score 0-100 (100 being most severe)",
  "overall_risk": "Critical/High/Medium/Low",
  "immediate_actions": ["2-3 urgent actions to take within 24 hours"]
}}

Focus on the most important findings. Keep it concise but actionable.

Report data:
URL: {url}
Timestamp: {timestamp}
Results: {results}

Respond only with valid JSON, no additional text."""


@dataclass
class AISummary:
    """Structured assessment returned by the LLM."""

    summary: str
    rating: str
    recommendations: list[str] = field(default_factory=list)
    critical_issues: list[str] = field(default_factory=list)
    severity_score: int = 0
    overall_risk: str = "Unknown"
    immediate_actions: list[str] = field(default_factory=list)

    @classmethod
    def fallback(cls) -> "AISummary":
        return cls(
            summary=FALLBACK_SUMMARY,
            rating="N/A",
            recommendations=["Review scan results manually"],
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AISummary":
        """Build from parsed JSON, substituting defaults for missing or ill-typed fields."""
        summary = payload.get("summary")
        rating = str(payload.get("rating") or "").strip().upper()
        risk = str(payload.get("overall_risk") or "").strip().capitalize()
        return cls(
            summary=summary if isinstance(summary, str) and summary else "Analysis unavailable",
            rating=rating if rating in RATINGS else "N/A",
            recommendations=_string_list(
                payload.get("recommendations"), ["Unable to generate recommendations"]
            ),
            critical_issues=_string_list(payload.get("critical_issues"), []),
            severity_score=_score(payload.get("severity_score")),
            overall_risk=risk if risk in RISK_LEVELS else "Unknown",
            immediate_actions=_string_list(payload.get("immediate_actions"), []),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _string_list(value: Any, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(item) for item in value]


def _score(value: Any) -> int:
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))


def extract_json_object(content: str) -> Any:
    """Parse the outermost ``{...}`` in *content*, tolerating markdown fences."""
    text = content.strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        text = text[start : end + 1]
    return json.loads(text)


def build_prompt(report: ScanReport) -> str:
    data = report.to_dict()
    return PROMPT_TEMPLATE.format(
        url=data["url"],
        timestamp=data["timestamp"],
        results=json.dumps(data["results"], indent=2, default=str),
    )


class AISummarizer:
    """Ask an LLM for an assessment of a scan report."""

    def __init__(self, llm: Any):
        self.llm = llm

    def summarize(self, report: ScanReport) -> AISummary:
        """Return the parsed assessment, or ``AISummary.fallback()`` on any failure."""
        try:
            content = self.llm.chat(build_prompt(report), SYSTEM_PROMPT)
            payload = extract_json_object(content)
        except Exception as exc:
            logger.warning("AI summary generation failed: %s", exc)
            return AISummary.fallback()

        if not isinstance(payload, dict):
            logger.warning("AI summary response is not a JSON object")
            return AISummary.fallback()
        return AISummary.from_payload(payload)
