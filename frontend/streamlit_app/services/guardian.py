# frontend/streamlit_app/services/guardian.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Guardian: AI credibility / risk analysis of a campaign description.

The description is embedded in a fixed instruction template and sent to a
Gemini model that is asked to answer with JSON only. The answer is loosely
structured in practice (code fences, localized risk labels, numbers as
strings), so `parse_analysis()` normalizes it into `GuardianAnalysis`.

Degrade-gracefully contract: when the answer cannot be parsed or lacks a
required field, `GuardianClient.analyze()` returns `FALLBACK_ANALYSIS`
instead of raising. This is the one place in the app that swallows an error
on purpose. Transport failures (no API key, HTTP errors) are not swallowed;
they raise `AnalysisUnavailable`.
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

from core.errors import AnalysisParseError, AnalysisUnavailable

log = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


_RISK_ALIASES: dict[str, RiskLevel] = {
    "low": RiskLevel.LOW,
    "rendah": RiskLevel.LOW,
    "medium": RiskLevel.MEDIUM,
    "sedang": RiskLevel.MEDIUM,
    "high": RiskLevel.HIGH,
    "tinggi": RiskLevel.HIGH,
}


@dataclass(frozen=True)
class GuardianAnalysis:
    credibility_score: int
    risk_level: RiskLevel
    summary: str
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "credibilityScore": self.credibility_score,
            "riskLevel": self.risk_level.value,
            "summary": self.summary,
            "suggestions": list(self.suggestions),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "GuardianAnalysis":
        """Strict conversion; raises AnalysisParseError on any missing field."""
        missing = [
            k for k in ("credibilityScore", "riskLevel", "summary", "suggestions")
            if raw.get(k) in (None, "")
        ]
        if missing:
            raise AnalysisParseError(f"Missing fields: {', '.join(missing)}")

        try:
            score = int(float(raw["credibilityScore"]))
        except (TypeError, ValueError) as e:
            raise AnalysisParseError("credibilityScore is not a number") from e

        level = _RISK_ALIASES.get(str(raw["riskLevel"]).strip().lower())
        if level is None:
            raise AnalysisParseError(f"Unknown riskLevel: {raw['riskLevel']!r}")

        suggestions = raw["suggestions"]
        if isinstance(suggestions, str):
            suggestions = [suggestions]
        if not isinstance(suggestions, list):
            raise AnalysisParseError("suggestions is not a list")

        return cls(
            credibility_score=max(0, min(score, 100)),
            risk_level=level,
            summary=str(raw["summary"]).strip(),
            suggestions=[str(s) for s in suggestions],
        )


FALLBACK_ANALYSIS = GuardianAnalysis(
    credibility_score=50,
    risk_level=RiskLevel.MEDIUM,
    summary="Automatic analysis failed, please review your campaign description.",
    suggestions=[
        "Make sure your campaign description is clear and specific",
        "Include concrete details about the campaign's goal",
    ],
)

PROMPT_TEMPLATE = """You are "Verifund Guardian", an objective and helpful risk analyst for a crowdfunding platform.
Analyze the following campaign description and answer ONLY with valid JSON, without any opening or closing text.

Scoring criteria:
1. **credibilityScore (number 0-100):** High when the goal is clear, specific, includes figures and feels sincere. Low when it is too generic, ambiguous or implausible.
2. **riskLevel (string):** One of "Low", "Medium" or "High". Risk is high when there are red flags such as promises of financial return, overly urgent language, or missing crucial details.
3. **summary (string):** One neutral, informative sentence summarizing your analysis.
4. **suggestions (array of strings):** One or two concrete, constructive suggestions that help the author improve the clarity and trustworthiness of the description.

Campaign description: "{description}"

Respond with valid JSON only:"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Remove an optional ```json ... ``` wrapper around the model answer."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_RE.sub("", cleaned)
    return cleaned.strip()


def parse_analysis(text: str) -> GuardianAnalysis:
    """Parse a model answer; raises AnalysisParseError when unusable."""
    try:
        raw = json.loads(strip_code_fence(text))
    except (json.JSONDecodeError, TypeError) as e:
        raise AnalysisParseError("Answer is not valid JSON") from e
    if not isinstance(raw, dict):
        raise AnalysisParseError("Answer is not a JSON object")
    return GuardianAnalysis.from_dict(raw)


class GuardianClient:
    """Thin client for the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        *,
        session: requests.Session | None = None,
        timeout: float = 60,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _generate(self, prompt: str) -> str:
        if not self._api_key:
            raise AnalysisUnavailable("GEMINI_API_KEY not configured")
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            resp = self.session.post(
                url,
                params={"key": self._api_key},
                json={
                    "contents": [{"parts": [{"text": prompt}]}],
                    "generationConfig": {"responseMimeType": "application/json"},
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AnalysisUnavailable(f"Risk model unreachable: {e.__class__.__name__}") from e
        if not resp.ok:
            raise AnalysisUnavailable(f"Risk model HTTP error: {resp.status_code}")

        data = resp.json()
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            # No usable candidate; treat like an unparseable answer.
            return ""

    def analyze(self, description: str) -> GuardianAnalysis:
        """Score `description`; falls back to `FALLBACK_ANALYSIS` on bad output."""
        text = self._generate(PROMPT_TEMPLATE.format(description=description))
        try:
            return parse_analysis(text)
        except AnalysisParseError as e:
            log.warning("Guardian answer unusable (%s); using fallback analysis", e)
            return FALLBACK_ANALYSIS
