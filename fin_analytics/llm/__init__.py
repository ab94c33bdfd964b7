"""
LLM module for the analytics service.

Contains the LLM client interface and implementations for the two-stage
insight generation.
"""

from fin_analytics.llm.interface import LLMClient
from fin_analytics.llm.mock import MockLLMClient

__all__ = [
    "LLMClient",
    "MockLLMClient",
]
