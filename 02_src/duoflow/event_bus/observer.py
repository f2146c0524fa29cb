"""Passive notifications the trigger bus sends outward."""

from typing import Protocol

from ..models import AgentStatus, Finding, LogLevel, Trigger


class IBusObserver(Protocol):
    """Receives kernel notifications. Never calls back into the bus."""

    async def on_run_started(self, run_id: str) -> None: ...

    async def on_trigger_enqueued(self, trigger: Trigger) -> None: ...

    async def on_trigger_consumed(self, trigger: Trigger) -> None: ...

    async def on_agent_status_changed(self, agent_id: str, status: AgentStatus) -> None: ...

    async def on_findings_appended(self, findings: list[Finding]) -> None: ...

    async def on_log_line(self, agent_label: str, message: str, level: LogLevel) -> None: ...


class BusObserver:
    """No-op base; subclasses override the notifications they care about."""

    async def on_run_started(self, run_id: str) -> None:
        return

    async def on_trigger_enqueued(self, trigger: Trigger) -> None:
        return

    async def on_trigger_consumed(self, trigger: Trigger) -> None:
        return

    async def on_agent_status_changed(self, agent_id: str, status: AgentStatus) -> None:
        return

    async def on_findings_appended(self, findings: list[Finding]) -> None:
        return

    async def on_log_line(self, agent_label: str, message: str, level: LogLevel) -> None:
        return
