"""Derived-trigger policy: which trigger a completed dispatch emits."""

from dataclasses import dataclass
from typing import Callable, Sequence

from ..models import Agent, AgentRole, Finding, Severity, TriggerType

FindingsPredicate = Callable[[Sequence[Finding]], bool]


def _always(findings: Sequence[Finding]) -> bool:
    return True


def _non_empty(findings: Sequence[Finding]) -> bool:
    return len(findings) > 0


def any_severity(*severities: Severity) -> FindingsPredicate:
    """Predicate: at least one finding has one of the given severities."""
    wanted = frozenset(severities)

    def predicate(findings: Sequence[Finding]) -> bool:
        return any(finding.severity in wanted for finding in findings)

    return predicate


@dataclass(frozen=True)
class PolicyRule:
    """One row of the policy table. Unset role/agent_name match any agent."""

    emits: TriggerType
    role: AgentRole | None = None
    agent_name: str | None = None
    when: FindingsPredicate = _always

    def matches(self, agent: Agent, findings: Sequence[Finding]) -> bool:
        if self.role is not None and agent.role != self.role:
            return False
        if self.agent_name is not None and agent.name != self.agent_name:
            return False
        return self.when(findings)


# Evaluated top to bottom, first match wins.
DERIVED_TRIGGER_RULES: tuple[PolicyRule, ...] = (
    PolicyRule(
        TriggerType.VULNERABILITY_DETECTED,
        role=AgentRole.SECURITY,
        when=any_severity(Severity.HIGH, Severity.MEDIUM),
    ),
    PolicyRule(
        TriggerType.INEFFICIENCY_DETECTED,
        role=AgentRole.PERFORMANCE,
        when=_non_empty,
    ),
    PolicyRule(
        TriggerType.SCHEMA_MISMATCH,
        agent_name="SchemaGuardian",
        when=_non_empty,
    ),
    PolicyRule(TriggerType.REFACTOR_COMPLETE, role=AgentRole.REFACTOR),
    PolicyRule(
        TriggerType.BUILD_FAILED,
        role=AgentRole.INTEGRATION,
        when=any_severity(Severity.HIGH),
    ),
    PolicyRule(TriggerType.DEPLOYMENT_STARTED, role=AgentRole.INTEGRATION),
)


def derive_trigger(
    agent: Agent,
    findings: Sequence[Finding],
    rules: Sequence[PolicyRule] = DERIVED_TRIGGER_RULES,
) -> TriggerType | None:
    """Trigger type to emit after a successful dispatch, if any."""
    for rule in rules:
        if rule.matches(agent, findings):
            return rule.emits
    return None
