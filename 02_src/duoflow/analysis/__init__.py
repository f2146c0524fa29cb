"""Analysis adapters module."""

from .analyzer import ROLE_INSTRUCTIONS, IAnalyzer, LLMAnalyzer
from .extractor import (
    EXTRACTION_PROMPT,
    IFindingExtractor,
    LLMFindingExtractor,
    parse_findings,
)

__all__ = [
    "IAnalyzer",
    "LLMAnalyzer",
    "ROLE_INSTRUCTIONS",
    "EXTRACTION_PROMPT",
    "IFindingExtractor",
    "LLMFindingExtractor",
    "parse_findings",
]
