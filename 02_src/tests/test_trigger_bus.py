"""Tests for TriggerBus."""

import asyncio

import pytest

from conftest import FakeAnalyzer, FakeExtractor, make_agent, make_finding
from duoflow.errors import AnalysisError, AnalysisErrorKind, RunInProgressError
from duoflow.event_bus import SYSTEM_SOURCE, BusObserver
from duoflow.models import AgentRole, AgentStatus, LogLevel, Severity, TriggerType
from duoflow.registry import DEFAULT_AGENTS


def trio():
    """Three CODE_SUBMITTED subscribers with distinct roles."""
    return [
        make_agent("sec", "Sec", AgentRole.SECURITY, TriggerType.CODE_SUBMITTED),
        make_agent("rev", "Rev", AgentRole.REVIEWER, TriggerType.CODE_SUBMITTED),
        make_agent("comp", "Comp", AgentRole.COMPLIANCE, TriggerType.CODE_SUBMITTED),
    ]


class TestTriggerBusEnqueue:
    """Tests for TriggerBus.enqueue()."""

    @pytest.mark.asyncio
    async def test_enqueue_appends_in_fifo_order(self, make_bus):
        """Test that enqueued triggers wait in FIFO order with fresh ids."""
        bus = make_bus(trio())

        first = await bus.enqueue(TriggerType.CODE_SUBMITTED, "a")
        second = await bus.enqueue(TriggerType.BUILD_FAILED, "b")

        assert [t.id for t in bus.pending] == [first.id, second.id]
        assert first.id != second.id
        assert not bus.settled

    @pytest.mark.asyncio
    async def test_enqueue_notifies_and_logs(self, make_bus, recorder):
        """Test that enqueue emits a notification and a trigger log line."""
        bus = make_bus(trio())

        trigger = await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")

        assert recorder.of("enqueued") == [("enqueued", trigger)]
        logs = recorder.of("log")
        assert logs[0][2] == "Signal Emitted: CODE SUBMITTED (via webhook)"
        assert logs[0][3] == LogLevel.TRIGGER


class TestTriggerBusDrain:
    """Tests for TriggerBus.drain()."""

    @pytest.mark.asyncio
    async def test_drain_empty_queue_is_noop(self, make_bus, recorder):
        """Test that draining an empty queue changes nothing."""
        bus = make_bus(trio())

        assert await bus.drain() == 0
        assert await bus.drain() == 0

        assert bus.findings == []
        assert set(bus.statuses.values()) == {AgentStatus.IDLE}
        assert recorder.events == []
        assert bus.settled

    @pytest.mark.asyncio
    async def test_duplicate_trigger_processed_once(self, make_bus):
        """Test that a trigger id is processed at most once."""
        analyzer = FakeAnalyzer()
        bus = make_bus(trio(), analyzer=analyzer)

        trigger = await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.requeue(trigger)
        await bus.requeue(trigger)

        consumed = await bus.drain()

        assert consumed == 1
        assert len(analyzer.calls) == 3
        assert trigger.id in bus.processed
        assert bus.pending == []

    @pytest.mark.asyncio
    async def test_same_type_with_new_id_is_processed_again(self, make_bus):
        """Test that re-triggering the same type with a new id is allowed."""
        analyzer = FakeAnalyzer()
        bus = make_bus(trio(), analyzer=analyzer)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")

        assert await bus.drain() == 2
        assert len(analyzer.calls) == 6

    @pytest.mark.asyncio
    async def test_trigger_without_subscribers_is_absorbed(self, make_bus, recorder):
        """Test that a trigger with no listeners dispatches nothing."""
        analyzer = FakeAnalyzer()
        bus = make_bus(trio(), analyzer=analyzer)

        trigger = await bus.enqueue(TriggerType.REFACTOR_READY, "manual")
        consumed = await bus.drain()

        assert consumed == 1
        assert trigger.id in bus.processed
        assert analyzer.calls == []
        assert bus.findings == []
        assert set(bus.statuses.values()) == {AgentStatus.IDLE}
        assert recorder.of("status") == []

    @pytest.mark.asyncio
    async def test_emitter_never_reacts_to_its_own_trigger(self, make_bus, recorder):
        """Test that the agent named as trigger source is excluded from the batch."""
        agents = [
            make_agent("alpha", "Alpha", AgentRole.SECURITY, TriggerType.VULNERABILITY_DETECTED),
            make_agent("beta", "Beta", AgentRole.SECURITY, TriggerType.VULNERABILITY_DETECTED),
        ]
        analyzer = FakeAnalyzer()
        bus = make_bus(agents, analyzer=analyzer)

        await bus.enqueue(TriggerType.VULNERABILITY_DETECTED, "Alpha")
        await bus.drain()

        dispatched = {e[1] for e in recorder.of("status") if e[2] == AgentStatus.THINKING}
        assert dispatched == {"beta"}
        assert len(analyzer.calls) == 1
        assert bus.statuses["alpha"] == AgentStatus.IDLE

    @pytest.mark.asyncio
    async def test_batch_runs_concurrently(self, make_bus):
        """Test that all subscribers of one trigger run in parallel."""
        analyzer = FakeAnalyzer(delay=0.05)
        bus = make_bus(trio(), analyzer=analyzer)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.drain()

        assert analyzer.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_batch_completes_before_next_trigger(self, make_bus, recorder):
        """Test that triggers are consumed one at a time, in FIFO order."""
        agents = trio() + [
            make_agent("ops", "Ops", AgentRole.INTEGRATION, TriggerType.BUILD_FAILED),
        ]
        bus = make_bus(agents, analyzer=FakeAnalyzer(delay=0.01))

        first = await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        second = await bus.enqueue(TriggerType.BUILD_FAILED, "ci")
        await bus.drain()

        kinds = [e for e in recorder.events if e[0] in ("consumed", "status")]
        second_index = kinds.index(("consumed", second))
        first_batch_done = [
            i
            for i, e in enumerate(kinds)
            if e[0] == "status" and e[1] in {"sec", "rev", "comp"} and e[2] == AgentStatus.COMPLETED
        ]
        assert kinds[0] == ("consumed", first)
        assert len(first_batch_done) == 3
        assert max(first_batch_done) < second_index

    @pytest.mark.asyncio
    async def test_drain_is_not_reentrant(self, make_bus):
        """Test that a concurrent drain call returns immediately."""
        bus = make_bus(trio(), analyzer=FakeAnalyzer(delay=0.02))
        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")

        first, second = await asyncio.gather(bus.drain(), bus.drain())

        assert first == 1
        assert second == 0
        assert bus.settled


class TestTriggerBusDispatch:
    """Tests for batch dispatch and result application."""

    @pytest.mark.asyncio
    async def test_status_moves_thinking_then_completed(self, make_bus, recorder):
        """Test per-agent status transitions for a successful dispatch."""
        agents = [make_agent("rev", "Rev", AgentRole.REVIEWER, TriggerType.CODE_SUBMITTED)]
        bus = make_bus(agents)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.drain()

        assert recorder.of("status") == [
            ("status", "rev", AgentStatus.THINKING),
            ("status", "rev", AgentStatus.COMPLETED),
        ]
        messages = [e[2] for e in recorder.of("log") if e[1] == "Rev"]
        assert messages == [
            "Reacting to CODE SUBMITTED...",
            "Task complete. Found 0 actionable items.",
        ]

    @pytest.mark.asyncio
    async def test_findings_appended_in_arrival_order(self, make_bus, recorder):
        """Test that findings from a dispatch are appended and announced."""
        high = make_finding(Severity.HIGH, "sqli")
        low = make_finding(Severity.LOW, "style")
        agents = [make_agent("rev", "Rev", AgentRole.REVIEWER, TriggerType.CODE_SUBMITTED)]
        bus = make_bus(agents, extractor=FakeExtractor({AgentRole.REVIEWER: [high, low]}))

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.drain()

        assert bus.findings == [high, low]
        assert recorder.of("findings") == [("findings", [high, low])]

    @pytest.mark.asyncio
    async def test_rate_limited_agent_fails_alone(self, make_bus, recorder):
        """Test that one failing agent does not affect its siblings or the loop."""
        finding = make_finding(Severity.LOW)
        analyzer = FakeAnalyzer(
            failures={
                AgentRole.SECURITY: AnalysisError(
                    AnalysisErrorKind.RATE_LIMIT, "Rate limit reached."
                )
            }
        )
        extractor = FakeExtractor(
            {
                AgentRole.SECURITY: [make_finding(Severity.HIGH)],
                AgentRole.REVIEWER: [finding],
                AgentRole.COMPLIANCE: [finding],
            }
        )
        agents = trio() + [
            make_agent("ops", "Ops", AgentRole.INTEGRATION, TriggerType.BUILD_FAILED),
        ]
        bus = make_bus(agents, analyzer=analyzer, extractor=extractor)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.enqueue(TriggerType.BUILD_FAILED, "ci")
        consumed = await bus.drain()

        assert consumed == 3  # Ops derives DEPLOYMENT_STARTED with no listeners
        assert bus.statuses["sec"] == AgentStatus.FAILED
        assert bus.statuses["rev"] == AgentStatus.COMPLETED
        assert bus.statuses["comp"] == AgentStatus.COMPLETED
        assert bus.statuses["ops"] == AgentStatus.COMPLETED
        assert bus.findings == [finding, finding]

        errors = [e for e in recorder.of("log") if e[3] == LogLevel.ERROR]
        assert errors == [
            ("log", "Sec", "CRITICAL FAILURE: RATE_LIMIT: Rate limit reached.", LogLevel.ERROR)
        ]

    @pytest.mark.asyncio
    async def test_failed_dispatch_emits_no_derived_trigger(self, make_bus, recorder):
        """Test that a FAILED dispatch never spawns a follow-up trigger."""
        agents = [make_agent("ref", "Ref", AgentRole.REFACTOR, TriggerType.CODE_SUBMITTED)]
        analyzer = FakeAnalyzer(
            failures={AgentRole.REFACTOR: AnalysisError(AnalysisErrorKind.NETWORK, "down")}
        )
        bus = make_bus(agents, analyzer=analyzer)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.drain()

        assert len(recorder.of("enqueued")) == 1

    @pytest.mark.asyncio
    async def test_derived_trigger_uses_agent_name_as_source(self, make_bus, recorder):
        """Test that a completed dispatch enqueues its derived trigger."""
        agents = [make_agent("ref", "Ref", AgentRole.REFACTOR, TriggerType.CODE_SUBMITTED)]
        bus = make_bus(agents)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        consumed = await bus.drain()

        derived = recorder.of("enqueued")[1][1]
        assert derived.type == TriggerType.REFACTOR_COMPLETE
        assert derived.source == "Ref"
        assert consumed == 2

    @pytest.mark.asyncio
    async def test_agent_redispatched_within_run(self, make_bus):
        """Test that an agent may return to THINKING for a later trigger."""
        agents = [
            make_agent(
                "ops",
                "Ops",
                AgentRole.REVIEWER,
                TriggerType.CODE_SUBMITTED,
                TriggerType.BUILD_FAILED,
            )
        ]
        analyzer = FakeAnalyzer()
        bus = make_bus(agents, analyzer=analyzer)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.enqueue(TriggerType.BUILD_FAILED, "ci")
        await bus.drain()

        assert len(analyzer.calls) == 2
        assert bus.statuses["ops"] == AgentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_observer_error_does_not_stop_bus(self, make_bus):
        """Test that a failing observer is logged and ignored."""

        class BrokenObserver(BusObserver):
            async def on_agent_status_changed(self, agent_id, status):
                raise RuntimeError("dashboard down")

        bus = make_bus(trio())
        bus.add_observer(BrokenObserver())

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.drain()

        assert set(bus.statuses.values()) == {AgentStatus.COMPLETED}

    @pytest.mark.asyncio
    async def test_partial_observer_is_tolerated(self, make_bus):
        """Test that an observer implementing only some notifications is skipped for the rest."""

        class EnqueueCounter:
            def __init__(self):
                self.count = 0

            async def on_trigger_enqueued(self, trigger):
                self.count += 1

        counter = EnqueueCounter()
        bus = make_bus(trio())
        bus.add_observer(counter)

        await bus.enqueue(TriggerType.CODE_SUBMITTED, "webhook")
        await bus.drain()

        assert counter.count == 1
        assert set(bus.statuses.values()) == {AgentStatus.COMPLETED}


class TestTriggerBusBudget:
    """Tests for the per-run trigger budget."""

    @pytest.mark.asyncio
    async def test_budget_stops_ping_pong(self, make_bus, recorder):
        """Test that two agents re-triggering each other are cut off."""
        agents = [
            make_agent("a", "A", AgentRole.SECURITY, TriggerType.VULNERABILITY_DETECTED),
            make_agent("b", "B", AgentRole.SECURITY, TriggerType.VULNERABILITY_DETECTED),
        ]
        extractor = FakeExtractor({AgentRole.SECURITY: [make_finding(Severity.HIGH)]})
        bus = make_bus(agents, extractor=extractor, max_triggers_per_run=5)

        await bus.enqueue(TriggerType.VULNERABILITY_DETECTED, "A")
        consumed = await bus.drain()

        assert consumed == 5
        assert bus.pending == []
        assert bus.settled
        warnings = [e for e in recorder.of("log") if e[3] == LogLevel.WARNING]
        assert len(warnings) == 1
        assert "budget of 5" in warnings[0][2]

    @pytest.mark.asyncio
    async def test_budget_resets_between_injected_drains(self, make_bus, recorder):
        """Test that triggers injected outside a run each get a fresh budget."""
        agents = [make_agent("ref", "Ref", AgentRole.REFACTOR, TriggerType.REFACTOR_READY)]
        analyzer = FakeAnalyzer()
        bus = make_bus(agents, analyzer=analyzer, max_triggers_per_run=2)

        for _ in range(3):
            await bus.submit(TriggerType.REFACTOR_READY, "manual")
            await bus.wait_settled()

        assert len(analyzer.calls) == 3
        assert not [e for e in recorder.of("log") if e[3] == LogLevel.WARNING]


class TestTriggerBusRuns:
    """Tests for start_run(), submit() and reset()."""

    @pytest.mark.asyncio
    async def test_start_run_chains_security_findings(self, make_bus, recorder):
        """Test the CODE_SUBMITTED -> VULNERABILITY_DETECTED chain on the default roster."""
        medium = make_finding(Severity.MEDIUM, "sqli")
        analyzer = FakeAnalyzer()
        extractor = FakeExtractor({AgentRole.SECURITY: [medium]})
        bus = make_bus(DEFAULT_AGENTS, analyzer=analyzer, extractor=extractor)

        summary = await bus.start_run("const q = req.query.id;")

        enqueued = [e[1] for e in recorder.of("enqueued")]
        assert enqueued[0].type == TriggerType.CODE_SUBMITTED
        assert enqueued[0].source == SYSTEM_SOURCE
        assert any(
            t.type == TriggerType.VULNERABILITY_DETECTED and t.source == "SecGuard-V2"
            for t in enqueued
        )

        # First batch: every CODE_SUBMITTED subscriber
        first_batch = [
            e[1]
            for e in recorder.events
            if e[0] == "status" and e[2] == AgentStatus.THINKING
        ][:5]
        assert set(first_batch) == {
            "sec-guard",
            "code-critic",
            "perf-optima",
            "cicd-integrator",
            "compliance-master",
        }

        assert summary.statuses["sec-guard"] == AgentStatus.COMPLETED
        assert summary.statuses["code-scanner"] == AgentStatus.COMPLETED
        assert summary.statuses["refactor-engine"] == AgentStatus.COMPLETED
        assert summary.statuses["risk-analyzer"] == AgentStatus.IDLE
        assert summary.statuses["code-refactorer"] == AgentStatus.IDLE
        # CODE_SUBMITTED, VULNERABILITY_DETECTED x2, REFACTOR_COMPLETE x2,
        # DEPLOYMENT_STARTED x3
        assert summary.triggers_consumed == 8
        assert summary.findings == [medium, medium]
        assert all(source == "const q = req.query.id;" for _, source in analyzer.calls)
        assert bus.settled

    @pytest.mark.asyncio
    async def test_start_run_resets_previous_run(self, make_bus):
        """Test that a new run starts from clean run-scoped state."""
        extractor = FakeExtractor({AgentRole.REVIEWER: [make_finding(Severity.LOW)]})
        bus = make_bus(trio(), extractor=extractor)

        first = await bus.start_run("v1")
        second = await bus.start_run("v2")

        assert first.run_id != second.run_id
        assert len(second.findings) == 1
        assert second.triggers_consumed == 1
        assert len(bus.processed) == 1
        assert bus.source_code == "v2"

    @pytest.mark.asyncio
    async def test_start_run_while_running_raises(self, make_bus):
        """Test that only one run may be active at a time."""
        bus = make_bus(trio(), analyzer=FakeAnalyzer(delay=0.05))

        task = asyncio.create_task(bus.start_run("code"))
        await asyncio.sleep(0.01)

        assert bus.busy
        with pytest.raises(RunInProgressError):
            await bus.start_run("other")
        with pytest.raises(RunInProgressError):
            bus.reset()

        await task
        assert not bus.busy

    @pytest.mark.asyncio
    async def test_submit_drains_in_background(self, make_bus):
        """Test that an injected trigger gets drained without an explicit call."""
        agents = [make_agent("ref", "Ref", AgentRole.REFACTOR, TriggerType.REFACTOR_READY)]
        analyzer = FakeAnalyzer()
        bus = make_bus(agents, analyzer=analyzer)

        trigger = await bus.submit(TriggerType.REFACTOR_READY, "manual")
        await bus.wait_settled()

        assert trigger.id in bus.processed
        assert analyzer.calls == [(AgentRole.REFACTOR, "")]
        assert bus.statuses["ref"] == AgentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_start_run_rejected_while_submit_pending(self, make_bus):
        """Test that the bus is busy from submit() until the scheduled drain finishes."""
        agents = [make_agent("ref", "Ref", AgentRole.REFACTOR, TriggerType.REFACTOR_READY)]
        bus = make_bus(agents)

        await bus.submit(TriggerType.REFACTOR_READY, "manual")

        assert bus.busy
        with pytest.raises(RunInProgressError):
            await bus.start_run("code")

        await bus.wait_settled()
        assert not bus.busy

    @pytest.mark.asyncio
    async def test_reset_clears_run_state(self, make_bus):
        """Test that reset() drops findings, statuses and processed ids."""
        extractor = FakeExtractor({AgentRole.REVIEWER: [make_finding(Severity.LOW)]})
        bus = make_bus(trio(), extractor=extractor)
        await bus.start_run("code")

        bus.reset()

        assert bus.findings == []
        assert bus.processed == frozenset()
        assert bus.run_id is None
        assert set(bus.statuses.values()) == {AgentStatus.IDLE}
