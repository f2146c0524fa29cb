"""DuoFlow: autonomous trigger bus for multi-agent code analysis."""

from .analysis import IAnalyzer, IFindingExtractor, LLMAnalyzer, LLMFindingExtractor
from .app import Application, IApplication
from .errors import (
    AnalysisError,
    AnalysisErrorKind,
    InvalidTransitionError,
    ParseError,
    RunInProgressError,
)
from .event_bus import BusObserver, IBusObserver, ITriggerBus, TriggerBus
from .llm import ILLMProvider, LLMProvider
from .models import (
    Agent,
    AgentRole,
    AgentStatus,
    Finding,
    LogLevel,
    RiskPoint,
    RunSummary,
    Severity,
    TraceEvent,
    Trigger,
    TriggerType,
)
from .registry import DEFAULT_AGENTS, AgentRegistry, IAgentRegistry
from .risk import RiskAggregator, score_findings
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Agent",
    "AgentRole",
    "AgentStatus",
    "Trigger",
    "TriggerType",
    "Finding",
    "Severity",
    "RiskPoint",
    "RunSummary",
    "LogLevel",
    "TraceEvent",
    # Errors
    "AnalysisError",
    "AnalysisErrorKind",
    "ParseError",
    "InvalidTransitionError",
    "RunInProgressError",
    # Components
    "IAgentRegistry",
    "AgentRegistry",
    "DEFAULT_AGENTS",
    "ITriggerBus",
    "TriggerBus",
    "IBusObserver",
    "BusObserver",
    "ILLMProvider",
    "LLMProvider",
    "IAnalyzer",
    "LLMAnalyzer",
    "IFindingExtractor",
    "LLMFindingExtractor",
    "RiskAggregator",
    "score_findings",
    "IStorage",
    "Storage",
    "ITracker",
    "Tracker",
]
