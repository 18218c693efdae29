"""
LLM Client Abstraction

Unified interface for every language-model backend the engine can ask:
- OpenAI, and the OpenAI-compatible APIs (Groq, xAI, OpenRouter, Perplexity)
- Anthropic Claude
- Google Gemini

Each client is also a Provider, so the Provider Chain Runner can use it as
a last-resort value source. Fallback between clients is the chain's job,
not the client's.
"""

import asyncio
import logging
import re
from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ccpi.services.base import ExternalAPIError, RateLimitError
from ccpi.services.llm.prompts import VALUE_SYSTEM_PROMPT, build_value_prompt
from ccpi.services.providers.interface import Provider, ProviderKind, Query

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    GROQ = "groq"
    XAI = "xai"
    OPENROUTER = "openrouter"
    PERPLEXITY = "perplexity"


# OpenAI-compatible endpoints
BASE_URLS = {
    LLMProvider.GROQ: "https://api.groq.com/openai/v1",
    LLMProvider.XAI: "https://api.x.ai/v1",
    LLMProvider.OPENROUTER: "https://openrouter.ai/api/v1",
    LLMProvider.PERPLEXITY: "https://api.perplexity.ai",
}

DEFAULT_MODELS = {
    LLMProvider.OPENAI: "gpt-4o",
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-latest",
    LLMProvider.GEMINI: "gemini-2.5-flash",
    LLMProvider.GROQ: "llama-3.3-70b-versatile",
    LLMProvider.XAI: "grok-2-latest",
    LLMProvider.OPENROUTER: "openai/gpt-4o-mini",
    LLMProvider.PERPLEXITY: "sonar",
}

# openai / anthropic RateLimitError, google-api-core ResourceExhausted
RATE_LIMIT_ERROR_TYPES = ("RateLimitError", "ResourceExhausted")
RATE_LIMIT_PATTERN = re.compile(
    r"\b429\b|\brate[ _-]?limit|\bquota\b|\btoo many requests\b", re.IGNORECASE
)


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: LLMProvider
    usage: dict = field(default_factory=dict)


def is_rate_limit_error(error: Exception) -> bool:
    """SDK rate-limit errors carry status 429; some only say so in the message."""
    if getattr(error, "status_code", None) == 429 or getattr(error, "code", None) == 429:
        return True
    if type(error).__name__ in RATE_LIMIT_ERROR_TYPES:
        return True
    return bool(RATE_LIMIT_PATTERN.search(str(error)))


class BaseLLMClient(Provider):
    """Abstract base class for LLM clients."""

    kind = ProviderKind.LANGUAGE_MODEL

    def __init__(
        self,
        provider: LLMProvider,
        api_key: Optional[str],
        model: Optional[str] = None,
        max_tokens: int = 50,
        temperature: float = 0.1,
    ):
        self.provider = provider
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[provider]
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = None

    @property
    def name(self) -> str:
        return self.provider.value

    def is_available(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        pass

    async def fetch(self, query: Query) -> str:
        """Ask for one number; the Value Extractor parses the text."""
        response = await self.generate(
            system_prompt=VALUE_SYSTEM_PROMPT,
            user_prompt=build_value_prompt(query.description),
        )
        return response.content

    def _api_error(self, error: Exception) -> ExternalAPIError:
        if is_rate_limit_error(error):
            return RateLimitError(self.name, str(error))
        logger.error(f"{self.name} API error: {error}")
        return ExternalAPIError(self.name, f"{type(error).__name__}: {error}")


class OpenAICompatibleClient(BaseLLMClient):
    """OpenAI chat completions, also used for Groq, xAI, OpenRouter and Perplexity."""

    def _get_client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            try:
                import openai

                self._client = openai.AsyncOpenAI(
                    api_key=self.api_key,
                    base_url=BASE_URLS.get(self.provider),
                )
            except ImportError:
                raise RuntimeError(
                    "openai package not installed. Run: pip install openai"
                )
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature if temperature is not None else self.temperature,
                max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
            )
        except Exception as e:
            raise self._api_error(e)

        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
            }
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            provider=self.provider,
            usage=usage,
        )


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude client implementation."""

    def __init__(self, api_key: Optional[str], **kwargs):
        super().__init__(LLMProvider.ANTHROPIC, api_key, **kwargs)

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            try:
                import anthropic

                self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
            except ImportError:
                raise RuntimeError(
                    "anthropic package not installed. Run: pip install anthropic"
                )
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
                temperature=temperature if temperature is not None else self.temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except Exception as e:
            raise self._api_error(e)

        return LLMResponse(
            content=response.content[0].text if response.content else "",
            model=self.model,
            provider=self.provider,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )


class GeminiClient(BaseLLMClient):
    """Google Gemini client implementation."""

    def __init__(self, api_key: Optional[str], **kwargs):
        super().__init__(LLMProvider.GEMINI, api_key, **kwargs)

    def _get_client(self):
        """Configure the SDK once and build the model."""
        if self._client is None:
            try:
                import google.generativeai as genai

                genai.configure(api_key=self.api_key)
                self._client = genai.GenerativeModel(self.model)
            except ImportError:
                raise RuntimeError(
                    "google-generativeai package not installed. Run: pip install google-generativeai"
                )
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        model = self._get_client()

        # Combine system and user prompts for Gemini
        full_prompt = f"{system_prompt}\n\n---\n\n{user_prompt}"
        generation_config = {
            "temperature": temperature if temperature is not None else self.temperature,
            "max_output_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }

        try:
            # Gemini's generate_content is synchronous, wrap in executor
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None,
                lambda: model.generate_content(
                    full_prompt,
                    generation_config=generation_config,
                ),
            )
            content = response.text
        except Exception as e:
            raise self._api_error(e)

        return LLMResponse(content=content, model=self.model, provider=self.provider)


def create_llm_client(
    provider: LLMProvider,
    api_key: Optional[str],
    max_tokens: int = 50,
    temperature: float = 0.1,
) -> BaseLLMClient:
    if provider == LLMProvider.ANTHROPIC:
        return AnthropicClient(api_key, max_tokens=max_tokens, temperature=temperature)
    if provider == LLMProvider.GEMINI:
        return GeminiClient(api_key, max_tokens=max_tokens, temperature=temperature)
    return OpenAICompatibleClient(
        provider, api_key, max_tokens=max_tokens, temperature=temperature
    )


def build_llm_providers(settings) -> list[BaseLLMClient]:
    """
    LLM providers in the configured order.

    Clients are built even without a key; the chain runner skips them
    through is_available().
    """
    clients = []
    for provider_name in settings.llm_provider_order:
        try:
            provider = LLMProvider(provider_name)
        except ValueError:
            logger.warning(f"Unknown LLM provider in llm_provider_order: {provider_name}")
            continue
        api_key = getattr(settings, f"{provider.value}_api_key", None)
        clients.append(
            create_llm_client(
                provider,
                api_key,
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        )

    if not any(client.is_available() for client in clients):
        logger.warning("No LLM API keys configured. Best-effort tier disabled.")
    return clients
