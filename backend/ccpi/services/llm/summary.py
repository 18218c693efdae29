"""
Executive Summary Service

One sentence describing a CompositeResult, written by the first LLM in the
chain that answers (xAI Grok preferred). Falls back to a template sentence
if no LLM is configured or every provider fails.
"""

import asyncio
import logging
from typing import Optional, Sequence

from ccpi.schemas.composite import CompositeResult, ExecutiveSummary
from ccpi.schemas.indicators import Pillar
from ccpi.services.base import BaseService, ServiceError
from ccpi.services.llm.client import BaseLLMClient
from ccpi.services.llm.prompts import SUMMARY_SYSTEM_PROMPT, SUMMARY_USER_PROMPT_TEMPLATE
from ccpi.services.providers.chain import order_providers

logger = logging.getLogger(__name__)

MAX_SUMMARY_WORDS = 50
TEMPLATE_PROVIDER = "template"


def format_summary_prompt(result: CompositeResult) -> str:
    def pillar(p: Pillar) -> float:
        score = result.pillars.get(p.value)
        return score.score if score else 0.0

    return SUMMARY_USER_PROMPT_TEMPLATE.format(
        ccpi=result.amplified_score,
        certainty=result.certainty,
        active_canaries=len(result.canaries),
        total_indicators=result.total_indicators,
        regime_name=result.regime.name,
        regime_description=result.regime.description,
        momentum=pillar(Pillar.MOMENTUM),
        risk_appetite=pillar(Pillar.RISK_APPETITE),
        valuation=pillar(Pillar.VALUATION),
        macro=pillar(Pillar.MACRO),
    )


def truncate_words(text: str, limit: int = MAX_SUMMARY_WORDS) -> str:
    words = text.split()
    if len(words) <= limit:
        return " ".join(words)
    return " ".join(words[:limit]).rstrip(",;:") + "..."


class ExecutiveSummaryService(BaseService[CompositeResult, ExecutiveSummary]):
    def __init__(
        self,
        providers: Sequence[BaseLLMClient],
        preferred: Optional[str] = "xai",
        timeout: float = 20.0,
        max_tokens: int = 150,
        temperature: float = 0.7,
    ):
        self.providers = list(providers)
        self.preferred = preferred
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def name(self) -> str:
        return "ExecutiveSummaryService"

    async def execute(self, input_data: CompositeResult) -> ExecutiveSummary:
        prompt = format_summary_prompt(input_data)

        for provider in order_providers(self.providers, self.preferred):
            if not provider.is_available():
                continue
            try:
                response = await asyncio.wait_for(
                    provider.generate(
                        system_prompt=SUMMARY_SYSTEM_PROMPT,
                        user_prompt=prompt,
                        temperature=self.temperature,
                        max_tokens=self.max_tokens,
                    ),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"{provider.name} summary timed out after {self.timeout}s")
                continue
            except ServiceError as e:
                logger.warning(f"{provider.name} summary failed: {e.message}")
                continue

            text = response.content.strip().strip('"')
            if text:
                return ExecutiveSummary(summary=truncate_words(text), provider=provider.name)

        logger.info("No LLM summary available, using template")
        return self._template_summary(input_data)

    def _template_summary(self, result: CompositeResult) -> ExecutiveSummary:
        drivers = ", ".join(c.indicator for c in result.canaries[:3])
        signals = f"driven by {drivers}" if drivers else "with no active warning signals"
        text = (
            f"CCPI reads {result.amplified_score:g}/100 ({result.regime.name}) at "
            f"{result.certainty:g}% certainty, {signals}; positioning should follow the "
            f"{result.playbook.bias if result.playbook else result.regime.name} playbook."
        )
        return ExecutiveSummary(summary=truncate_words(text), provider=TEMPLATE_PROVIDER)

    async def health_check(self) -> bool:
        return any(p.is_available() for p in self.providers)
