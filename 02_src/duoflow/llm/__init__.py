"""LLM module."""

from .llm_provider import ILLMProvider, LLMProvider, classify_error

__all__ = ["ILLMProvider", "LLMProvider", "classify_error"]
