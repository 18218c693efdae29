"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings

# Float tolerance for the pillar weight sum check
WEIGHT_SUM_TOLERANCE = 1e-9


class ConfigurationError(ValueError):
    """Static configuration is inconsistent. Raised at startup only."""


def validate_pillar_weights(weights: dict[str, float]) -> dict[str, float]:
    """Pillar weights must be non-negative and sum to 1.00."""
    if any(w < 0 for w in weights.values()):
        raise ConfigurationError(f"Pillar weights must be non-negative: {weights}")
    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ConfigurationError(
            f"Pillar weights must sum to 1.00, got {total:.6f}: {weights}"
        )
    return weights


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "CCPI Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS (Frontend URL)
    frontend_url: str = "http://localhost:3000"
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Structured market data APIs
    fred_api_key: Optional[str] = None
    fred_base_url: str = "https://api.stlouisfed.org/fred"
    fmp_api_key: Optional[str] = None
    fmp_base_url: str = "https://financialmodelingprep.com/api/v3"
    twelve_data_api_key: Optional[str] = None
    twelve_data_base_url: str = "https://api.twelvedata.com"
    cnn_fear_greed_url: str = "https://production.dataviz.cnn.io/index/fearandgreed/graphdata"
    enable_yahoo_finance: bool = True
    enable_cnn_fear_greed: bool = True

    # LLM Providers (last-resort value extractors)
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    xai_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    perplexity_api_key: Optional[str] = None
    llm_provider_order: list[str] = [
        "openai",
        "anthropic",
        "groq",
        "xai",
        "gemini",
        "openrouter",
        "perplexity",
    ]
    llm_summary_provider: str = "xai"  # Preferred for executive summaries
    llm_max_tokens: int = 50
    llm_temperature: float = 0.1

    # Timeouts (seconds)
    structured_timeout: float = 10.0
    llm_provider_timeout: float = 8.0
    llm_tier_timeout: float = 20.0
    cycle_deadline: float = 45.0

    # Result cache
    cache_ttl_seconds: float = 300.0  # 5 minutes

    # Pillar weights (must sum to 1.00)
    weight_momentum: float = 0.35
    weight_risk_appetite: float = 0.30
    weight_valuation: float = 0.15
    weight_macro: float = 0.20

    # Certainty policy
    certainty_quality_weight: float = 0.7
    certainty_agreement_weight: float = 0.3
    certainty_credit_live: float = 1.0
    certainty_credit_best_effort: float = 0.5
    certainty_credit_baseline: float = 0.0
    certainty_low_pillar_penalty: float = 5.0

    # Crash amplifiers (bonus points on top of the weighted composite)
    enable_crash_amplifiers: bool = True

    # Rate limits: 0 disables cross-chain cooldown of rate-limited providers
    rate_limit_cooldown_seconds: float = 0.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def pillar_weights(self) -> dict[str, float]:
        return {
            "momentum": self.weight_momentum,
            "risk_appetite": self.weight_risk_appetite,
            "valuation": self.weight_valuation,
            "macro": self.weight_macro,
        }

    @model_validator(mode="after")
    def _check_pillar_weights(self) -> "Settings":
        validate_pillar_weights(self.pillar_weights)
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
