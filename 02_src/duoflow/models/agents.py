"""Agent-related data models."""

from dataclasses import dataclass, field
from enum import Enum

from .triggers import TriggerType


class AgentRole(str, Enum):
    """Closed set of roles an agent can play."""

    SECURITY = "SECURITY"
    REVIEWER = "REVIEWER"
    COMPLIANCE = "COMPLIANCE"
    REFACTOR = "REFACTOR"
    PERFORMANCE = "PERFORMANCE"
    INTEGRATION = "INTEGRATION"


class AgentStatus(str, Enum):
    """Per-agent lifecycle state driven by the trigger bus."""

    IDLE = "IDLE"
    THINKING = "THINKING"
    ACTING = "ACTING"  # valid target, not driven by the bus
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Agent:
    """A named, role-tagged unit of analysis work."""

    id: str
    name: str
    role: AgentRole
    description: str = ""
    subscriptions: frozenset[TriggerType] = field(default_factory=frozenset)

    def subscribes_to(self, trigger_type: TriggerType) -> bool:
        return trigger_type in self.subscriptions
