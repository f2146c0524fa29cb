"""Application bootstrap and lifecycle management."""

import asyncio
import os
import uuid
from typing import Iterable, Protocol

from .analysis import IAnalyzer, IFindingExtractor, LLMAnalyzer, LLMFindingExtractor
from .config import resolve_db_path, resolve_max_triggers
from .errors import RunInProgressError
from .event_bus import TriggerBus
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .models import Agent, RunSummary
from .registry import DEFAULT_AGENTS, AgentRegistry
from .risk import RiskAggregator
from .storage import IStorage, Storage
from .tracker import Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset run data and history."""
        ...

    def launch_run(self, source_code: str) -> str:
        """Start a run in the background and return its id."""
        ...

    @property
    def storage(self) -> IStorage: ...

    @property
    def bus(self) -> TriggerBus: ...

    @property
    def registry(self) -> AgentRegistry: ...

    @property
    def risk(self) -> RiskAggregator: ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        db_path: str | None = None,
        llm_provider: ILLMProvider | None = None,
        agents: Iterable[Agent] | None = None,
        max_triggers_per_run: int | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._agents = tuple(agents) if agents is not None else DEFAULT_AGENTS
        self._max_triggers = (
            max_triggers_per_run
            if max_triggers_per_run is not None
            else resolve_max_triggers()
        )

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._tracker: Tracker | None = None
        self._llm: ILLMProvider | None = llm_provider
        self._analyzer: IAnalyzer | None = None
        self._extractor: IFindingExtractor | None = None
        self._registry: AgentRegistry | None = None
        self._bus: TriggerBus | None = None
        self._risk: RiskAggregator | None = None
        self._run_task: asyncio.Task | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 3. LLMProvider (no internal dependencies)
        if self._llm is None:
            self._llm = LLMProvider()
        logger.info("LLM provider initialized")

        # 4. Adapters (depend on LLM)
        self._analyzer = LLMAnalyzer(self._llm)
        self._extractor = LLMFindingExtractor(self._llm)

        # 5. Registry (static)
        self._registry = AgentRegistry(self._agents)
        logger.info("Agent registry loaded with %s agents", len(self._registry))

        # 6. TriggerBus (depends on Registry + adapters)
        self._bus = TriggerBus(
            registry=self._registry,
            analyzer=self._analyzer,
            extractor=self._extractor,
            max_triggers_per_run=self._max_triggers,
        )

        # 7. Observers
        self._risk = RiskAggregator()
        self._bus.add_observer(self._tracker)
        self._bus.add_observer(self._risk)
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._run_task and not self._run_task.done():
            # Runs are not cancellable; let the current one settle.
            await asyncio.gather(self._run_task, return_exceptions=True)
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset run data and history."""
        if self._bus:
            self._bus.reset()
        if self._risk:
            self._risk.reset()
        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")
        logger.info("Reset complete")

    def launch_run(self, source_code: str) -> str:
        """Start a run in the background and return its id."""
        bus = self.bus
        if bus.busy or (self._run_task and not self._run_task.done()):
            raise RunInProgressError("A run is already in progress")

        run_id = uuid.uuid4().hex
        self._run_task = asyncio.create_task(bus.start_run(source_code, run_id=run_id))
        self._run_task.add_done_callback(self._on_run_done)
        return run_id

    async def wait_for_run(self) -> RunSummary | None:
        """Wait for the background run, if any, to settle."""
        if not self._run_task:
            return None
        return await self._run_task

    def _on_run_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Run failed: %s", error)

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def bus(self) -> TriggerBus:
        """Get trigger bus instance."""
        if not self._bus:
            raise RuntimeError("Application not started")
        return self._bus

    @property
    def registry(self) -> AgentRegistry:
        """Get agent registry instance."""
        if not self._registry:
            raise RuntimeError("Application not started")
        return self._registry

    @property
    def risk(self) -> RiskAggregator:
        """Get risk aggregator instance."""
        if not self._risk:
            raise RuntimeError("Application not started")
        return self._risk
