"""Static agent registry and subscription lookup."""

from typing import Iterable, Iterator, Protocol

from ..logging_config import get_logger
from ..models import Agent, AgentRole, TriggerType

logger = get_logger(__name__)


class IAgentRegistry(Protocol):
    """Read-only catalogue of agents and their subscriptions."""

    def subscribers(
        self, trigger_type: TriggerType, exclude_name: str | None = None
    ) -> list[Agent]:
        """Agents subscribed to trigger_type, minus the one named exclude_name."""
        ...

    def get(self, agent_id: str) -> Agent:
        """Look up an agent by id."""
        ...

    def __iter__(self) -> Iterator[Agent]:
        ...


class AgentRegistry:
    """Immutable set of agents, keyed by id, in registration order."""

    def __init__(self, agents: Iterable[Agent]):
        self._agents: dict[str, Agent] = {}
        for agent in agents:
            if agent.id in self._agents:
                raise ValueError(f"Duplicate agent id: {agent.id}")
            if not agent.subscriptions:
                logger.warning("Agent %s has no subscriptions and will never run", agent.id)
            self._agents[agent.id] = agent

    def subscribers(
        self, trigger_type: TriggerType, exclude_name: str | None = None
    ) -> list[Agent]:
        """Agents subscribed to trigger_type, minus the one named exclude_name.

        Exclusion is by exact name so an agent never reacts to its own
        emission; two differently-named agents of the same role can still
        trigger each other. An empty list is a normal dead end.
        """
        return [
            agent
            for agent in self._agents.values()
            if agent.subscribes_to(trigger_type) and agent.name != exclude_name
        ]

    def get(self, agent_id: str) -> Agent:
        """Look up an agent by id."""
        try:
            return self._agents[agent_id]
        except KeyError:
            raise KeyError(f"Unknown agent: {agent_id}") from None

    def by_role(self, role: AgentRole) -> list[Agent]:
        return [agent for agent in self._agents.values() if agent.role == role]

    def role_counts(self) -> dict[str, int]:
        """Agent counts per role, plus an ALL total."""
        counts: dict[str, int] = {"ALL": len(self._agents)}
        for agent in self._agents.values():
            counts[agent.role.value] = counts.get(agent.role.value, 0) + 1
        return counts

    @property
    def agent_ids(self) -> list[str]:
        return list(self._agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)
