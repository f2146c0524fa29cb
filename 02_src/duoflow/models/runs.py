"""Run-level data models."""

from dataclasses import dataclass, field

from .agents import AgentStatus
from .findings import Finding


@dataclass
class RunSummary:
    """Outcome of one workflow run once the bus has settled."""

    run_id: str
    triggers_consumed: int
    findings: list[Finding] = field(default_factory=list)
    statuses: dict[str, AgentStatus] = field(default_factory=dict)
