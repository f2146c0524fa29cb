"""TriggerBus: the queue-drain loop that chains agents together."""

import asyncio
import logging
import uuid
from collections import deque
from typing import Protocol, Sequence

from ..analysis import IAnalyzer, IFindingExtractor
from ..errors import RunInProgressError
from ..logging_config import get_logger
from ..models import (
    Agent,
    AgentStatus,
    Finding,
    LogLevel,
    RunSummary,
    Trigger,
    TriggerType,
)
from ..registry import IAgentRegistry
from .dispatch import DispatchResult, dispatch
from .observer import IBusObserver
from .policy import DERIVED_TRIGGER_RULES, PolicyRule
from .status import StatusBoard

logger = get_logger(__name__)

SYSTEM_SOURCE = "DEV_COMMIT_WEBHOOK"
SYSTEM_LABEL = "SYSTEM"

_LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
}


class ITriggerBus(Protocol):
    """In-memory trigger queue with fan-out to subscribed agents."""

    async def enqueue(self, trigger_type: TriggerType, source: str) -> Trigger:
        """Append a new trigger to the pending queue."""
        ...

    async def drain(self) -> int:
        """Process pending triggers until the queue is empty."""
        ...

    async def start_run(self, source_code: str, run_id: str | None = None) -> RunSummary:
        """Reset run state, submit the code and drain until settled."""
        ...


class TriggerBus:
    """Owns the pending queue, processed set, agent statuses and findings.

    Triggers are consumed strictly one at a time in FIFO order. All agents
    subscribed to the same trigger run concurrently as one batch, and the
    batch must finish before the next trigger is popped. Dispatches only
    return results; every mutation of bus state happens here.
    """

    def __init__(
        self,
        registry: IAgentRegistry,
        analyzer: IAnalyzer,
        extractor: IFindingExtractor,
        rules: Sequence[PolicyRule] = DERIVED_TRIGGER_RULES,
        max_triggers_per_run: int | None = None,
    ):
        self._registry = registry
        self._analyzer = analyzer
        self._extractor = extractor
        self._rules = rules
        self._max_triggers = max_triggers_per_run

        self._pending: deque[Trigger] = deque()
        self._processed: set[str] = set()
        self._statuses = StatusBoard(agent.id for agent in registry)
        self._findings: list[Finding] = []
        self._observers: list[IBusObserver] = []

        self._run_id: str | None = None
        self._source_code = ""
        self._consumed = 0
        self._budget_used = 0
        self._draining = False
        self._drain_scheduled = False
        self._run_active = False
        self._drain_task: asyncio.Task | None = None
        self._settled = asyncio.Event()
        self._settled.set()

    def add_observer(self, observer: IBusObserver) -> None:
        """Register an observer for bus notifications."""
        self._observers.append(observer)

    # State (read-only views)

    @property
    def run_id(self) -> str | None:
        return self._run_id

    @property
    def source_code(self) -> str:
        return self._source_code

    @property
    def pending(self) -> list[Trigger]:
        return list(self._pending)

    @property
    def processed(self) -> frozenset[str]:
        return frozenset(self._processed)

    @property
    def findings(self) -> list[Finding]:
        return list(self._findings)

    @property
    def statuses(self) -> dict[str, AgentStatus]:
        return self._statuses.snapshot()

    @property
    def settled(self) -> bool:
        return not self._pending and not self._draining

    @property
    def busy(self) -> bool:
        return self._run_active or self._draining or self._drain_scheduled

    def summary(self) -> RunSummary:
        return RunSummary(
            run_id=self._run_id or "",
            triggers_consumed=self._consumed,
            findings=list(self._findings),
            statuses=self._statuses.snapshot(),
        )

    # Queue

    async def enqueue(self, trigger_type: TriggerType, source: str) -> Trigger:
        """Append a new trigger. Safe to call from inside a dispatch."""
        trigger = Trigger(type=trigger_type, source=source)
        await self.requeue(trigger)
        return trigger

    async def requeue(self, trigger: Trigger) -> None:
        """Append an already-built trigger; a consumed id is skipped on drain."""
        self._pending.append(trigger)
        self._settled.clear()
        await self._notify("on_trigger_enqueued", trigger)
        await self._log(
            SYSTEM_LABEL,
            f"Signal Emitted: {trigger.type.label} (via {trigger.source})",
            LogLevel.TRIGGER,
        )

    async def submit(self, trigger_type: TriggerType, source: str) -> Trigger:
        """Enqueue a trigger from outside and make sure something drains it."""
        trigger = await self.enqueue(trigger_type, source)
        if not self.busy:
            # Counts as busy until the task takes over the queue.
            self._drain_scheduled = True
            self._drain_task = asyncio.create_task(self.drain())
        return trigger

    async def drain(self) -> int:
        """Consume pending triggers until the queue is empty.

        Not reentrant: a call made while another drain is running returns 0
        immediately and the running loop picks up the new work.

        Returns:
            Number of triggers consumed by this call.
        """
        self._drain_scheduled = False
        if self._draining:
            return 0

        self._draining = True
        if not self._run_active:
            # Outside a run every drain episode gets a fresh budget.
            self._budget_used = 0
        consumed = 0
        try:
            while self._pending:
                if self._budget_exhausted():
                    await self._discard_pending()
                    break

                trigger = self._pending.popleft()
                if trigger.id in self._processed:
                    logger.debug("Skipping already processed trigger %s", trigger.id)
                    continue

                self._processed.add(trigger.id)
                self._consumed += 1
                self._budget_used += 1
                consumed += 1
                await self._notify("on_trigger_consumed", trigger)

                subscribers = self._registry.subscribers(trigger.type, trigger.source)
                if not subscribers:
                    logger.info(
                        "No subscribers for %s from %s",
                        trigger.type.value,
                        trigger.source,
                        extra={"context": {"trigger_id": trigger.id}},
                    )
                    continue

                await self._run_batch(trigger, subscribers)
        finally:
            self._draining = False
            if not self._pending:
                self._settled.set()

        return consumed

    async def wait_settled(self) -> None:
        """Wait until the queue is empty and no batch is in flight."""
        await self._settled.wait()
        if self._drain_task is not None:
            await self._drain_task
            self._drain_task = None

    # Runs

    async def start_run(self, source_code: str, run_id: str | None = None) -> RunSummary:
        """Reset run-scoped state, submit the code and drain until settled."""
        if self.busy:
            raise RunInProgressError("A run is already in progress")

        self._run_active = True
        try:
            self._reset_state()
            self._run_id = run_id or uuid.uuid4().hex
            self._source_code = source_code
            logger.info("Run %s started", self._run_id)
            await self._notify("on_run_started", self._run_id)

            await self.enqueue(TriggerType.CODE_SUBMITTED, SYSTEM_SOURCE)
            await self.drain()

            summary = self.summary()
            logger.info(
                "Run %s settled: %s triggers, %s findings",
                summary.run_id,
                summary.triggers_consumed,
                len(summary.findings),
            )
            return summary
        finally:
            self._run_active = False

    def reset(self) -> None:
        """Drop all run-scoped state. Not allowed while a run is active."""
        if self.busy:
            raise RunInProgressError("Cannot reset while a run is in progress")
        self._reset_state()
        self._run_id = None
        self._source_code = ""

    def _reset_state(self) -> None:
        self._pending.clear()
        self._processed.clear()
        self._findings.clear()
        self._statuses.reset()
        self._consumed = 0
        self._budget_used = 0
        self._settled.set()

    # Dispatch

    async def _run_batch(self, trigger: Trigger, agents: list[Agent]) -> None:
        """Dispatch all agents concurrently and wait for every one of them."""
        results = await asyncio.gather(
            *[self._dispatch_agent(agent, trigger) for agent in agents],
            return_exceptions=True,
        )

        for agent, result in zip(agents, results):
            if isinstance(result, Exception):
                logger.error(
                    "Dispatch of %s for %s raised: %s",
                    agent.id,
                    trigger.type.value,
                    result,
                    extra={"context": {"trigger_id": trigger.id, "agent_id": agent.id}},
                )

    async def _dispatch_agent(self, agent: Agent, trigger: Trigger) -> None:
        await self._set_status(agent.id, AgentStatus.THINKING)
        await self._log(agent.name, f"Reacting to {trigger.type.label}...", LogLevel.INFO)

        result = await dispatch(
            agent,
            self._source_code,
            self._analyzer,
            self._extractor,
            self._rules,
        )
        await self._apply(result)

    async def _apply(self, result: DispatchResult) -> None:
        agent = result.agent

        if result.status == AgentStatus.FAILED:
            await self._set_status(agent.id, AgentStatus.FAILED)
            await self._log(agent.name, f"CRITICAL FAILURE: {result.error}", LogLevel.ERROR)
            return

        if result.findings:
            self._findings.extend(result.findings)
            await self._notify("on_findings_appended", list(result.findings))

        await self._set_status(agent.id, AgentStatus.COMPLETED)
        await self._log(
            agent.name,
            f"Task complete. Found {len(result.findings)} actionable items.",
            LogLevel.SUCCESS,
        )

        if result.derived is not None:
            await self.enqueue(result.derived, agent.name)

    # Budget

    def _budget_exhausted(self) -> bool:
        return self._max_triggers is not None and self._budget_used >= self._max_triggers

    async def _discard_pending(self) -> None:
        dropped = len(self._pending)
        self._pending.clear()
        await self._log(
            SYSTEM_LABEL,
            f"Trigger budget of {self._max_triggers} reached; "
            f"discarded {dropped} pending signals.",
            LogLevel.WARNING,
        )

    # Notifications

    async def _set_status(self, agent_id: str, status: AgentStatus) -> None:
        self._statuses.transition(agent_id, status)
        await self._notify("on_agent_status_changed", agent_id, status)

    async def _log(self, agent_label: str, message: str, level: LogLevel) -> None:
        logger.log(
            _LOG_LEVELS.get(level, logging.INFO),
            "[%s] %s",
            agent_label,
            message,
            extra={"context": {"run_id": self._run_id, "level": level.value}},
        )
        await self._notify("on_log_line", agent_label, message, level)

    async def _notify(self, method: str, *args) -> None:
        """Call method on every observer concurrently; errors are only logged."""
        if not self._observers:
            return

        results = await asyncio.gather(
            *[_call_observer(observer, method, args) for observer in self._observers],
            return_exceptions=True,
        )

        for observer, result in zip(self._observers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Error in observer %s.%s: %s",
                    type(observer).__name__,
                    method,
                    result,
                )


async def _call_observer(observer: IBusObserver, method: str, args: tuple) -> None:
    # Observers may implement only part of IBusObserver.
    handler = getattr(observer, method, None)
    if handler is None:
        return
    await handler(*args)
