"""Risk aggregation module."""

from .aggregator import (
    LIVE_WINDOW,
    SEVERITY_WEIGHTS,
    RiskAggregator,
    RiskRange,
    score_findings,
)

__all__ = [
    "RiskAggregator",
    "RiskRange",
    "SEVERITY_WEIGHTS",
    "LIVE_WINDOW",
    "score_findings",
]
