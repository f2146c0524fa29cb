"""Tracker implementation for creating TraceEvents."""

import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..event_bus import BusObserver
from ..models import AgentStatus, Finding, LogLevel, TraceEvent, Trigger
from ..storage import IStorage


class ITracker(Protocol):
    """Creating TraceEvents. Two channels: bus notifications + direct calls."""

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and save to Storage."""
        ...


class Tracker(BusObserver):
    """Persists every trigger bus notification as a TraceEvent."""

    def __init__(self, storage: IStorage):
        self._storage = storage
        self._run_id: str | None = None

    async def on_run_started(self, run_id: str) -> None:
        self._run_id = run_id
        await self.track("run_started", "trigger_bus", {"run_id": run_id})

    async def on_trigger_enqueued(self, trigger: Trigger) -> None:
        await self.track("trigger_enqueued", "trigger_bus", trigger.to_dict())

    async def on_trigger_consumed(self, trigger: Trigger) -> None:
        await self.track("trigger_consumed", "trigger_bus", trigger.to_dict())

    async def on_agent_status_changed(self, agent_id: str, status: AgentStatus) -> None:
        await self.track(
            "agent_status_changed",
            f"agent:{agent_id}",
            {"agent_id": agent_id, "status": status.value},
        )

    async def on_findings_appended(self, findings: list[Finding]) -> None:
        if self._run_id:
            await self._storage.save_findings(self._run_id, findings)
        await self.track(
            "findings_appended",
            "trigger_bus",
            {
                "run_id": self._run_id,
                "count": len(findings),
                "severities": [finding.severity.value for finding in findings],
            },
        )

    async def on_log_line(self, agent_label: str, message: str, level: LogLevel) -> None:
        await self.track(
            "log_line",
            agent_label,
            {"message": message, "level": level.value},
        )

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and save to Storage."""
        trace_event = TraceEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            actor=actor,
            data=data,
            timestamp=datetime.now(timezone.utc),
        )
        await self._storage.save_trace_event(trace_event)
