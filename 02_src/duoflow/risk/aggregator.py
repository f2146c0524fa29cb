"""Risk score aggregation over a run's findings."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable

from ..event_bus import BusObserver
from ..models import Finding, RiskPoint, Severity

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.HIGH: 40,
    Severity.MEDIUM: 20,
    Severity.LOW: 10,
    Severity.INFO: 10,
}
MAX_SCORE = 100
LIVE_WINDOW = 15


class RiskRange(str, Enum):
    """Time ranges the risk series can be viewed over."""

    LIVE = "LIVE"
    HOUR = "1H"
    DAY = "24H"
    WEEK = "7D"


_RANGE_SPANS = {
    RiskRange.HOUR: timedelta(hours=1),
    RiskRange.DAY: timedelta(hours=24),
    RiskRange.WEEK: timedelta(days=7),
}


def score_findings(findings: Iterable[Finding]) -> int:
    """Sum of severity weights, clamped to [0, 100]."""
    raw = sum(SEVERITY_WEIGHTS[finding.severity] for finding in findings)
    return max(0, min(MAX_SCORE, raw))


class RiskAggregator(BusObserver):
    """Appends a risk point every time a run accumulates new findings."""

    def __init__(self):
        self._run_findings: list[Finding] = []
        self._history: list[RiskPoint] = []

    @property
    def history(self) -> list[RiskPoint]:
        return list(self._history)

    @property
    def current_score(self) -> int:
        return score_findings(self._run_findings)

    async def on_run_started(self, run_id: str) -> None:
        self._run_findings = []

    async def on_findings_appended(self, findings: list[Finding]) -> None:
        if not findings:
            return
        self._run_findings.extend(findings)
        self._history.append(RiskPoint(score=score_findings(self._run_findings)))

    def window(
        self,
        range_: RiskRange = RiskRange.LIVE,
        now: datetime | None = None,
    ) -> list[RiskPoint]:
        """Points for the given range: last 15 for LIVE, else newer than the cutoff."""
        if range_ == RiskRange.LIVE:
            return self._history[-LIVE_WINDOW:]

        cutoff = (now or datetime.now(timezone.utc)) - _RANGE_SPANS[range_]
        return [point for point in self._history if point.timestamp >= cutoff]

    def reset(self) -> None:
        self._run_findings = []
        self._history = []
