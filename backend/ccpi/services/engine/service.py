"""
CCPI Service Implementation

Runs resolution cycles and owns the result cache:

    catalog -> IndicatorResolver.resolve_all -> CompositeEngine.compute -> ResultCache

A read within the cache TTL returns the cached result unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ccpi.core.config import Settings, get_settings
from ccpi.schemas.composite import CompositeResult, ExecutiveSummary
from ccpi.services.base import BaseService
from ccpi.services.cache import CacheEntry, ResultCache
from ccpi.services.indicators import IndicatorResolver, get_indicator_catalog
from ccpi.services.indicators.tiers import (
    BaselineTier,
    IndicatorDefinition,
    StructuredApiTier,
    tier_label,
)
from ccpi.services.llm.summary import ExecutiveSummaryService
from ccpi.services.providers.registry import ProviderRegistry, build_registry
from ccpi.services.scoring import CompositeEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleRequest:
    force_refresh: bool = False


class CCPIService(BaseService[CycleRequest, CompositeResult]):
    """
    CCPI engine service.

    Every collaborator can be injected; anything not given is built from
    settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[ProviderRegistry] = None,
        definitions: Optional[Sequence[IndicatorDefinition]] = None,
        cache: Optional[ResultCache] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or build_registry(self.settings)
        self.definitions = list(definitions) if definitions is not None else get_indicator_catalog()
        self.cache = cache or ResultCache(ttl_seconds=self.settings.cache_ttl_seconds)
        self.resolver = IndicatorResolver.from_settings(self.settings, self.registry)
        self.engine = CompositeEngine.from_settings(self.settings, self.definitions)
        self.summary_service = ExecutiveSummaryService(
            self.registry.language_models,
            preferred=self.settings.llm_summary_provider,
            timeout=self.settings.llm_tier_timeout,
        )

    @property
    def name(self) -> str:
        return "CCPIService"

    async def execute(self, input_data: CycleRequest) -> CompositeResult:
        """Cached result if fresh, otherwise a new resolution cycle."""
        if not input_data.force_refresh:
            cached = self.cache.get()
            if cached is not None:
                logger.debug("Serving CCPI from cache")
                return cached
        return await self.compute()

    async def compute(self) -> CompositeResult:
        """Run one resolution cycle and store the result."""
        logger.info(f"Starting CCPI cycle over {len(self.definitions)} indicators")
        indicators = await self.resolver.resolve_all(self.definitions)
        result = self.engine.compute(indicators)
        self.cache.put(result)
        return result

    def cached_entry(self) -> Optional[CacheEntry]:
        return self.cache.entry()

    def cache_age(self, entry: CacheEntry) -> float:
        return self.cache.age(entry)

    def seed_cache(self, result: CompositeResult) -> CacheEntry:
        """Store a result computed elsewhere (scheduled refresher)."""
        logger.info(f"CCPI cache seeded externally (score {result.amplified_score})")
        return self.cache.put(result)

    async def summarize(self, result: CompositeResult) -> ExecutiveSummary:
        return await self.summary_service.execute(result)

    def sources_status(self) -> dict:
        """Provider availability and, per indicator, its tier chain and last resolution."""
        cached = self.cache.get()
        resolved = {i.name: i for i in cached.indicators} if cached else {}

        indicators = []
        for definition in self.definitions:
            tiers = []
            for index, tier in enumerate(definition.tiers):
                entry = {"index": index, "tier": tier_label(tier).value}
                if isinstance(tier, StructuredApiTier):
                    entry["provider"] = tier.provider
                    entry["series"] = tier.series
                    entry["available"] = (
                        tier.provider in self.registry.structured
                        and self.registry.structured[tier.provider].is_available()
                    )
                elif isinstance(tier, BaselineTier):
                    entry["value"] = tier.value
                    entry["available"] = True
                else:
                    entry["provider"] = "llm_chain"
                    entry["available"] = any(
                        p.is_available() for p in self.registry.language_models
                    )
                tiers.append(entry)

            report = resolved.get(definition.name)
            indicators.append(
                {
                    "name": definition.name,
                    "label": definition.label,
                    "pillar": definition.pillar.value,
                    "tiers": tiers,
                    "resolved_tier": report.tier.value if report else None,
                    "resolved_source": report.source if report else None,
                }
            )

        return {
            "providers": self.registry.status(),
            "indicators": indicators,
            "cached": cached is not None,
        }

    async def health_check(self) -> bool:
        return bool(self.definitions)

    async def close(self) -> None:
        await self.registry.close()


# Singleton instance
_service_instance: Optional[CCPIService] = None


def get_ccpi_service() -> CCPIService:
    """Get or create CCPI service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = CCPIService()
    return _service_instance


async def close_ccpi_service() -> None:
    global _service_instance
    if _service_instance is not None:
        await _service_instance.close()
        _service_instance = None
