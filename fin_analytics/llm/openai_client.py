"""
OpenAI LLM Client for the analytics service.

This module provides the real LLM implementation using OpenAI's API.
It implements the LLMClient Protocol: function calling for the analysis
stage and structured outputs for the insights stage.

Requires OPENAI_API_KEY environment variable to be set.
"""

import json
import logging
import os
from typing import Any, Optional

logger = logging.getLogger(__name__)

import openai
from openai import OpenAI

from fin_analytics.analysis_tools import AnalysisTool, run_tool
from fin_analytics.config import DEFAULT_LLM_CONFIG, LLMConfig
from fin_analytics.exceptions import InfrastructureError
from fin_analytics.llm.prompts import (
    format_analysis_system,
    format_analysis_user,
    format_insights_system,
    format_insights_user,
)
from fin_analytics.models import AnalysisMemo, AnalyticsInsights, AnalyticsMetrics


class LLMError(Exception):
    """Raised when LLM call fails."""

    pass


class OpenAILLMClient:
    """
    OpenAI LLM client implementing the LLMClient Protocol.

    All methods are synchronous to match the interface contract.

    Attributes:
        config: LLM configuration (model, temperature, max_tokens, max_tool_steps)
        client: OpenAI client instance

    Example:
        ```python
        client = OpenAILLMClient()
        memo = client.generate_analysis_memo(metrics, tools)
        insights = client.generate_insights(memo, metrics)
        ```
    """

    def __init__(
        self,
        config: LLMConfig = DEFAULT_LLM_CONFIG,
        api_key: Optional[str] = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            config: LLM configuration (defaults to DEFAULT_LLM_CONFIG)
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)

        Raises:
            ValueError: If no API key is provided or found in environment
        """
        self.config = config

        key = api_key or os.environ.get("OPENAI_API_KEY")
        if not key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.client = OpenAI(api_key=key)

    @property
    def model_name(self) -> str:
        return self.config.model

    def _wrap_api_errors(self, call):
        """
        Run an API call, mapping failures to InfrastructureError/LLMError.

        Raises:
            InfrastructureError: If API is unreachable or returns 5xx
            LLMError: For any other API failure
        """
        try:
            return call()
        except openai.APIConnectionError as e:
            raise InfrastructureError(f"Cannot reach OpenAI API: {e}") from e
        except openai.APIStatusError as e:
            if e.status_code >= 500:
                raise InfrastructureError(f"OpenAI API error ({e.status_code}): {e}") from e
            raise LLMError(f"OpenAI API call failed ({e.status_code}): {e}") from e
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"OpenAI API call failed: {e}") from e

    def generate_analysis_memo(
        self,
        metrics: AnalyticsMetrics,
        tools: dict[str, AnalysisTool],
    ) -> AnalysisMemo:
        """
        Run the tool-calling loop until the model answers with text.

        The loop is bounded by config.max_tool_steps; after the last step
        the model is asked once more without tools.
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": format_analysis_system()},
            {"role": "user", "content": format_analysis_user(metrics)},
        ]
        tool_schemas = [tool.to_openai_tool() for tool in tools.values()]
        called: list[str] = []
        steps = 0

        while True:
            allow_tools = bool(tool_schemas) and steps < self.config.max_tool_steps
            kwargs: dict[str, Any] = {
                "model": self.config.model,
                "messages": messages,
                "temperature": self.config.temperature,
                "max_completion_tokens": self.config.max_tokens,
            }
            if allow_tools:
                kwargs["tools"] = tool_schemas

            response = self._wrap_api_errors(lambda: self.client.chat.completions.create(**kwargs))
            message = response.choices[0].message

            if not message.tool_calls:
                if not message.content:
                    raise LLMError("LLM returned empty analysis memo")
                return AnalysisMemo(text=message.content, tool_calls=called, steps=steps)

            steps += 1
            messages.append(message.model_dump(exclude_none=True))
            for tool_call in message.tool_calls:
                name = tool_call.function.name
                called.append(name)
                try:
                    result = run_tool(tools, name)
                except KeyError as e:
                    logger.warning(f"LLM requested unknown tool: {name}")
                    result = {"error": str(e)}
                messages.append({
                    "role": "tool",
                    "tool_call_id": tool_call.id,
                    "content": json.dumps(result),
                })

    def generate_insights(
        self,
        memo: AnalysisMemo,
        metrics: AnalyticsMetrics,
    ) -> AnalyticsInsights:
        """Parse the memo into AnalyticsInsights via structured output."""
        response = self._wrap_api_errors(
            lambda: self.client.beta.chat.completions.parse(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": format_insights_system()},
                    {"role": "user", "content": format_insights_user(memo.text, metrics)},
                ],
                response_format=AnalyticsInsights,
                temperature=self.config.temperature,
                max_completion_tokens=self.config.max_tokens,
            )
        )

        parsed = response.choices[0].message.parsed
        if parsed is None:
            raise LLMError("LLM did not produce structured output")
        return parsed
