"""Trigger-related data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class TriggerType(str, Enum):
    """Signals that can flow through the trigger bus."""

    CODE_SUBMITTED = "CODE_SUBMITTED"
    VULNERABILITY_DETECTED = "VULNERABILITY_DETECTED"
    INEFFICIENCY_DETECTED = "INEFFICIENCY_DETECTED"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    REFACTOR_READY = "REFACTOR_READY"
    REFACTOR_COMPLETE = "REFACTOR_COMPLETE"
    BUILD_FAILED = "BUILD_FAILED"
    DEPLOYMENT_STARTED = "DEPLOYMENT_STARTED"

    @property
    def label(self) -> str:
        """Human-readable form used in log lines."""
        return self.value.replace("_", " ")


def new_trigger_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Trigger:
    """A typed, timestamped signal injected into the bus."""

    type: TriggerType
    source: str  # agent name or system label
    id: str = field(default_factory=new_trigger_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }
