"""Agent registry module."""

from .defaults import DEFAULT_AGENTS, INITIAL_CODE_SAMPLE
from .registry import AgentRegistry, IAgentRegistry

__all__ = ["AgentRegistry", "IAgentRegistry", "DEFAULT_AGENTS", "INITIAL_CODE_SAMPLE"]
