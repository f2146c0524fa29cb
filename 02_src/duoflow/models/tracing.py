"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class LogLevel(str, Enum):
    """Level of a workflow log line shown on the dashboard timeline."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    TRIGGER = "trigger"


@dataclass
class TraceEvent:
    """A single observability event for the dashboard."""

    id: str
    event_type: str  # e.g. "trigger_enqueued", "agent_status_changed"
    actor: str  # who created this event
    data: dict  # full self-contained data for display
    timestamp: datetime
