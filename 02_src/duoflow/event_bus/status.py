"""Agent status state machine."""

from typing import Iterable

from ..errors import InvalidTransitionError
from ..models import AgentStatus

ALLOWED_TRANSITIONS: dict[AgentStatus, frozenset[AgentStatus]] = {
    AgentStatus.IDLE: frozenset({AgentStatus.THINKING}),
    AgentStatus.THINKING: frozenset(
        {AgentStatus.ACTING, AgentStatus.COMPLETED, AgentStatus.FAILED}
    ),
    AgentStatus.ACTING: frozenset({AgentStatus.COMPLETED, AgentStatus.FAILED}),
    # Re-dispatch within the same run
    AgentStatus.COMPLETED: frozenset({AgentStatus.THINKING}),
    AgentStatus.FAILED: frozenset({AgentStatus.THINKING}),
}


def can_transition(current: AgentStatus, target: AgentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class StatusBoard:
    """Current status of every agent. Only reset() leads back to IDLE."""

    def __init__(self, agent_ids: Iterable[str]):
        self._statuses: dict[str, AgentStatus] = {
            agent_id: AgentStatus.IDLE for agent_id in agent_ids
        }

    def get(self, agent_id: str) -> AgentStatus:
        return self._statuses[agent_id]

    def transition(self, agent_id: str, target: AgentStatus) -> AgentStatus:
        """Move agent_id to target, returning the previous status."""
        current = self._statuses[agent_id]
        if not can_transition(current, target):
            raise InvalidTransitionError(
                f"Agent {agent_id}: {current.value} -> {target.value} is not allowed"
            )
        self._statuses[agent_id] = target
        return current

    def reset(self) -> None:
        for agent_id in self._statuses:
            self._statuses[agent_id] = AgentStatus.IDLE

    def snapshot(self) -> dict[str, AgentStatus]:
        return dict(self._statuses)
