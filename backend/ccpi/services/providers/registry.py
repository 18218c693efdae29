"""
Provider Registry

Builds every provider once from settings at startup. The resolver looks
structured providers up by name; the language-model tier uses the ordered
LLM list as its chain.
"""

import logging
from dataclasses import dataclass, field

from ccpi.core.config import Settings
from ccpi.services.llm.client import build_llm_providers
from ccpi.services.providers.interface import Provider
from ccpi.services.providers.market_data import (
    CNNFearGreedProvider,
    FMPProvider,
    FredProvider,
    TwelveDataProvider,
    YahooFinanceProvider,
)

logger = logging.getLogger(__name__)


@dataclass
class ProviderRegistry:
    structured: dict[str, Provider] = field(default_factory=dict)
    language_models: list[Provider] = field(default_factory=list)

    def all(self) -> list[Provider]:
        return list(self.structured.values()) + list(self.language_models)

    def status(self) -> list[dict]:
        """Name, kind and availability of every provider."""
        return [
            {
                "name": provider.name,
                "kind": provider.kind.value,
                "available": provider.is_available(),
            }
            for provider in self.all()
        ]

    async def close(self) -> None:
        for provider in self.all():
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"Failed to close {provider.name}: {e}")


def build_registry(settings: Settings) -> ProviderRegistry:
    structured: list[Provider] = [
        FredProvider(api_key=settings.fred_api_key, base_url=settings.fred_base_url),
        FMPProvider(api_key=settings.fmp_api_key, base_url=settings.fmp_base_url),
        TwelveDataProvider(
            api_key=settings.twelve_data_api_key,
            base_url=settings.twelve_data_base_url,
        ),
        CNNFearGreedProvider(
            url=settings.cnn_fear_greed_url,
            enabled=settings.enable_cnn_fear_greed,
        ),
        YahooFinanceProvider(enabled=settings.enable_yahoo_finance),
    ]
    registry = ProviderRegistry(
        structured={provider.name: provider for provider in structured},
        language_models=build_llm_providers(settings),
    )

    available = [p["name"] for p in registry.status() if p["available"]]
    logger.info(f"Providers available: {', '.join(available) or 'none'}")
    return registry
