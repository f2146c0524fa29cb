"""Finding extraction adapter: raw analysis text -> structured findings."""

import json
import os
import re
from typing import Protocol

from pydantic import BaseModel, ValidationError, field_validator

from ..config import DEFAULT_ANALYSIS_MODEL
from ..errors import AnalysisError, AnalysisErrorKind, ParseError
from ..llm import ILLMProvider
from ..logging_config import get_logger
from ..models import Finding, Severity

logger = get_logger(__name__)

EXTRACTION_PROMPT = (
    "Extract a JSON list of vulnerabilities from this analysis text. "
    "Respond with a JSON array only, no prose. Each item is an object with "
    'keys "severity" (one of high, medium, low, info), "issue", "location", '
    '"remediation" and optionally "fixedCode". "severity", "issue" and '
    '"remediation" are required.\n\n'
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.S)


class FindingPayload(BaseModel):
    """Schema one extracted item must satisfy."""

    severity: Severity
    issue: str
    location: str | None = "unknown"
    remediation: str
    fixedCode: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value):
        return Severity.parse(value)

    def to_finding(self) -> Finding:
        return Finding(
            severity=self.severity,
            issue=self.issue,
            location=self.location or "unknown",
            remediation=self.remediation,
            fixed_code=self.fixedCode,
        )


def parse_findings(payload: str) -> list[Finding]:
    """Parse a JSON array of findings.

    Raises ParseError when the payload is not a JSON array. Individual
    items that fail validation are dropped.
    """
    text = payload.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Could not decode JSON: {e}") from e

    if isinstance(data, dict):
        # Some completions wrap the list: {"findings": [...]}
        data = data.get("findings", data.get("items"))
    if not isinstance(data, list):
        raise ParseError("Expected a JSON array of findings")

    findings = []
    for index, item in enumerate(data):
        try:
            findings.append(FindingPayload.model_validate(item).to_finding())
        except (ValidationError, ValueError) as e:
            logger.warning("Dropping malformed finding #%s: %s", index, e)
    return findings


class IFindingExtractor(Protocol):
    """Turns raw analysis text into structured findings."""

    async def extract_findings(self, raw_text: str) -> list[Finding]:
        """Extract findings. Malformed output yields []; provider errors raise."""
        ...


class LLMFindingExtractor:
    """Extractor that asks the LLM to restate analysis text as JSON."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        model: str | None = None,
        max_tokens: int = 2048,
    ):
        self._llm = llm_provider
        self._model = model or os.getenv("ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL)
        self._max_tokens = max_tokens

    async def extract_findings(self, raw_text: str) -> list[Finding]:
        try:
            response = await self._llm.complete(
                messages=[{"role": "user", "content": EXTRACTION_PROMPT + raw_text}],
                max_tokens=self._max_tokens,
                model=self._model,
            )
        except AnalysisError as e:
            if e.kind == AnalysisErrorKind.EMPTY:
                return []
            raise

        if not response or not response.strip():
            return []

        try:
            return parse_findings(response)
        except ParseError as e:
            logger.warning("PARSING_FAILURE: %s", e)
            return []
