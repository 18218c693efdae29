"""
LLM Services

USES:
    - Value extraction: last-resort source tier for indicators
      (one number per question, validated by the Value Extractor)
    - Executive summary: one sentence about a finished CCPI reading

CRITICAL RULES:
    - LLMs never score. All scores come from the Composite Engine.
    - An LLM value is "best-effort", never "live".

FALLBACK BEHAVIOR:
    - Without any LLM API key the best-effort tier is skipped and
      summaries fall back to a template sentence.
"""

from ccpi.services.llm.client import (
    AnthropicClient,
    BaseLLMClient,
    GeminiClient,
    LLMProvider,
    LLMResponse,
    OpenAICompatibleClient,
    build_llm_providers,
)
from ccpi.services.llm.summary import ExecutiveSummaryService

__all__ = [
    "AnthropicClient",
    "BaseLLMClient",
    "GeminiClient",
    "LLMProvider",
    "LLMResponse",
    "OpenAICompatibleClient",
    "build_llm_providers",
    "ExecutiveSummaryService",
]
