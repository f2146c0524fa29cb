"""Single dispatch step: one agent reacting to one trigger."""

from dataclasses import dataclass, field
from typing import Sequence

from ..analysis import IAnalyzer, IFindingExtractor
from ..errors import AnalysisError, AnalysisErrorKind
from ..logging_config import get_logger
from ..models import Agent, AgentStatus, Finding, TriggerType
from .policy import DERIVED_TRIGGER_RULES, PolicyRule, derive_trigger

logger = get_logger(__name__)


@dataclass
class DispatchResult:
    """What the bus applies once a dispatch has finished."""

    agent: Agent
    status: AgentStatus
    findings: list[Finding] = field(default_factory=list)
    derived: TriggerType | None = None
    error: AnalysisError | None = None


async def dispatch(
    agent: Agent,
    source_code: str,
    analyzer: IAnalyzer,
    extractor: IFindingExtractor,
    rules: Sequence[PolicyRule] = DERIVED_TRIGGER_RULES,
) -> DispatchResult:
    """Run both adapter calls for agent. Never raises.

    Failures come back as a FAILED result with no findings and no
    derived trigger.
    """
    try:
        raw = await analyzer.analyze(agent.role, source_code)
        findings = list(await extractor.extract_findings(raw))
    except AnalysisError as e:
        return DispatchResult(agent=agent, status=AgentStatus.FAILED, error=e)
    except Exception as e:
        logger.exception("Unexpected error while dispatching %s", agent.id)
        return DispatchResult(
            agent=agent,
            status=AgentStatus.FAILED,
            error=AnalysisError(
                AnalysisErrorKind.UNKNOWN,
                str(e) or "Unknown execution error",
            ),
        )

    return DispatchResult(
        agent=agent,
        status=AgentStatus.COMPLETED,
        findings=findings,
        derived=derive_trigger(agent, findings, rules),
    )
