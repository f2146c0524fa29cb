"""Pytest configuration and fixtures."""

import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from duoflow.analysis.extractor import EXTRACTION_PROMPT  # noqa: E402
from duoflow.event_bus import BusObserver  # noqa: E402
from duoflow.models import (  # noqa: E402
    Agent,
    AgentRole,
    Finding,
    Severity,
    TriggerType,
)


def make_agent(agent_id: str, name: str, role: AgentRole, *subscriptions: TriggerType) -> Agent:
    """Build an agent with the given subscriptions."""
    return Agent(
        id=agent_id,
        name=name,
        role=role,
        description=f"{name} test agent",
        subscriptions=frozenset(subscriptions),
    )


def make_finding(severity: Severity, issue: str = "issue") -> Finding:
    """Build a finding with the given severity."""
    return Finding(
        severity=severity,
        issue=issue,
        location="app.js:7",
        remediation="fix it",
    )


class FakeAnalyzer:
    """Analyzer returning the role name as analysis text."""

    def __init__(self, failures: dict | None = None, delay: float = 0.0):
        self.failures = dict(failures or {})
        self.delay = delay
        self.calls: list[tuple[AgentRole, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def analyze(self, role: AgentRole, source: str) -> str:
        self.calls.append((role, source))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if role in self.failures:
                raise self.failures[role]
            return role.value
        finally:
            self.in_flight -= 1


class FakeExtractor:
    """Extractor returning scripted findings per role name."""

    def __init__(self, findings: dict | None = None):
        self.findings = {
            (role.value if isinstance(role, AgentRole) else role): items
            for role, items in (findings or {}).items()
        }
        self.calls: list[str] = []

    async def extract_findings(self, raw_text: str) -> list[Finding]:
        self.calls.append(raw_text)
        return list(self.findings.get(raw_text, []))


class RecordingObserver(BusObserver):
    """Observer that records every notification in order."""

    def __init__(self):
        self.events: list[tuple] = []

    async def on_run_started(self, run_id):
        self.events.append(("run_started", run_id))

    async def on_trigger_enqueued(self, trigger):
        self.events.append(("enqueued", trigger))

    async def on_trigger_consumed(self, trigger):
        self.events.append(("consumed", trigger))

    async def on_agent_status_changed(self, agent_id, status):
        self.events.append(("status", agent_id, status))

    async def on_findings_appended(self, findings):
        self.events.append(("findings", list(findings)))

    async def on_log_line(self, agent_label, message, level):
        self.events.append(("log", agent_label, message, level))

    def of(self, kind: str) -> list[tuple]:
        return [event for event in self.events if event[0] == kind]


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from duoflow.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def tracker(storage):
    """Create Tracker with storage."""
    from duoflow.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def recorder():
    """Create a recording bus observer."""
    return RecordingObserver()


@pytest.fixture
def make_bus(recorder):
    """Factory building a TriggerBus over the given agents and fakes."""
    from duoflow.event_bus import TriggerBus
    from duoflow.registry import AgentRegistry

    def _make(agents, analyzer=None, extractor=None, **kwargs):
        bus = TriggerBus(
            registry=AgentRegistry(agents),
            analyzer=analyzer or FakeAnalyzer(),
            extractor=extractor or FakeExtractor(),
            **kwargs,
        )
        bus.add_observer(recorder)
        return bus

    return _make


async def _fake_completion(messages, system=None, max_tokens=1024, model=None):
    content = messages[0]["content"]
    if content.startswith(EXTRACTION_PROMPT):
        return "[]"
    return "No significant issues found."


@pytest.fixture
def mock_llm():
    """Create mock LLM provider answering analysis and extraction prompts."""
    llm = Mock()
    llm.complete = AsyncMock(side_effect=_fake_completion)
    return llm

