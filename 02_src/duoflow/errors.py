"""Error taxonomy shared by the adapters and the trigger bus."""

from enum import Enum


class AnalysisErrorKind(str, Enum):
    """Categories an analysis provider failure is mapped onto."""

    AUTH = "AUTH"
    RATE_LIMIT = "RATE_LIMIT"
    POLICY = "POLICY"
    NETWORK = "NETWORK"
    UNAVAILABLE = "UNAVAILABLE"
    CAPACITY = "CAPACITY"
    EMPTY = "EMPTY"
    UNKNOWN = "UNKNOWN"


class AnalysisError(Exception):
    """Failure reported by the analysis or extraction adapter."""

    def __init__(self, kind: AnalysisErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ParseError(Exception):
    """Structured output could not be parsed. Never leaves the extractor."""


class InvalidTransitionError(Exception):
    """An agent status change that the state machine does not allow."""


class RunInProgressError(Exception):
    """A run is already draining; it must settle before another starts."""
