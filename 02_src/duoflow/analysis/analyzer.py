"""Analysis adapter: (role, source code) -> raw analysis text."""

import os
from typing import Protocol

from ..config import DEFAULT_ANALYSIS_MODEL, DEFAULT_REFACTOR_MODEL
from ..errors import AnalysisError, AnalysisErrorKind
from ..llm import ILLMProvider
from ..models import AgentRole

ROLE_INSTRUCTIONS: dict[AgentRole, str] = {
    AgentRole.SECURITY: (
        "You are a senior Security Engineer. Analyze the code for "
        "vulnerabilities (SQLi, XSS, RCE, etc.). Focus on high-risk issues."
    ),
    AgentRole.REVIEWER: (
        "You are a meticulous Code Reviewer. Check for complexity, style "
        "violations, and potential bugs. Suggest improvements."
    ),
    AgentRole.PERFORMANCE: (
        "You are a Performance Engineer. Analyze the code for runtime "
        "bottlenecks, memory overhead, and inefficient loops. Suggest "
        "optimizations."
    ),
    AgentRole.COMPLIANCE: (
        "You are a Compliance Officer. Evaluate if the code handles data "
        "safely and follows standard corporate policies."
    ),
    AgentRole.REFACTOR: (
        "You are an expert Software Architect. Provide the final refactored, "
        "secure version of the code snippet based on the findings."
    ),
    AgentRole.INTEGRATION: (
        "You are a DevOps and Release Engineer. Analyze if the code changes "
        "are safe for the build pipeline and evaluate deployment readiness."
    ),
}


class IAnalyzer(Protocol):
    """Turns (role, source) into natural-language findings."""

    async def analyze(self, role: AgentRole, source: str) -> str:
        """Analyze source from the point of view of role. Raises AnalysisError."""
        ...


class LLMAnalyzer:
    """Analyzer backed by an LLM provider, one instruction per role."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        analysis_model: str | None = None,
        refactor_model: str | None = None,
        max_tokens: int = 2048,
        refactor_max_tokens: int = 4096,
    ):
        self._llm = llm_provider
        self._analysis_model = analysis_model or os.getenv(
            "ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL
        )
        self._refactor_model = refactor_model or os.getenv(
            "REFACTOR_MODEL", DEFAULT_REFACTOR_MODEL
        )
        self._max_tokens = max_tokens
        self._refactor_max_tokens = refactor_max_tokens

    def model_for(self, role: AgentRole) -> str:
        # Refactoring produces whole code listings; give it the larger model.
        return self._refactor_model if role == AgentRole.REFACTOR else self._analysis_model

    async def analyze(self, role: AgentRole, source: str) -> str:
        is_refactor = role == AgentRole.REFACTOR
        text = await self._llm.complete(
            messages=[
                {
                    "role": "user",
                    "content": f"{ROLE_INSTRUCTIONS[role]}\n\nCODE TO ANALYZE:\n{source}",
                }
            ],
            max_tokens=self._refactor_max_tokens if is_refactor else self._max_tokens,
            model=self.model_for(role),
        )
        if not text or not text.strip():
            raise AnalysisError(
                AnalysisErrorKind.EMPTY,
                "The model returned a null or empty completion.",
            )
        return text
