"""
Provider Interfaces

Contracts shared by every upstream data provider:
- Query: the single scalar fact being asked for
- Provider: one upstream service (market-data vendor or LLM backend)
- Success / Failure: explicit outcome of one provider attempt
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ProviderKind(str, Enum):
    STRUCTURED = "structured"  # JSON market-data API
    LANGUAGE_MODEL = "language_model"  # Free-text LLM backend


class FailureReason(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    RATE_LIMITED = "rate_limited"
    UNPARSEABLE_VALUE = "unparseable_value"


@dataclass(frozen=True)
class Query:
    """
    A request for one scalar value.

    description is what a language model sees. series/field describe the
    request shape for structured providers (ticker or series id, and which
    number to pull out of the payload).
    """

    indicator: str
    description: str
    series: Optional[str] = None
    field: str = "last"
    positive_only: bool = True


@dataclass(frozen=True)
class Success:
    value: float
    provider: str


@dataclass(frozen=True)
class Failure:
    reason: FailureReason
    provider: str
    detail: str = ""


Outcome = Union[Success, Failure]


class Provider(ABC):
    """
    One upstream data provider.

    Providers are built from static settings at startup. fetch() either
    returns a raw value (a number, or text for LLM providers) or raises one
    of the ServiceError subclasses; the Value Extractor turns both into an
    Outcome.
    """

    kind: ProviderKind = ProviderKind.STRUCTURED

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Capability test: is the credential for this provider configured?"""
        pass

    @abstractmethod
    async def fetch(self, query: Query) -> Union[float, str]:
        """Ask the upstream service for the value described by query."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
