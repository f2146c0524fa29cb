"""Core data models for DuoFlow."""

from .agents import Agent, AgentRole, AgentStatus
from .findings import Finding, RiskPoint, Severity
from .runs import RunSummary
from .tracing import LogLevel, TraceEvent
from .triggers import Trigger, TriggerType

__all__ = [
    # Agents
    "Agent",
    "AgentRole",
    "AgentStatus",
    # Triggers
    "Trigger",
    "TriggerType",
    # Findings
    "Finding",
    "RiskPoint",
    "Severity",
    # Runs
    "RunSummary",
    # Tracing
    "LogLevel",
    "TraceEvent",
]
