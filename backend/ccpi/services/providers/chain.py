"""
Provider Chain Runner

Tries the Value Extractor against an ordered list of providers until one
succeeds. An explicit fold over Outcome values: no exception-driven flow.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

from ccpi.services.providers.extractor import DEFAULT_TIMEOUT, extract
from ccpi.services.providers.interface import (
    Failure,
    FailureReason,
    Provider,
    Query,
    Success,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainSuccess:
    value: float
    provider_used: str
    attempts: tuple[Failure, ...] = ()


@dataclass(frozen=True)
class AllFailed:
    attempts: tuple[Failure, ...] = ()
    skipped: tuple[str, ...] = ()


ChainOutcome = Union[ChainSuccess, AllFailed]


@dataclass
class ProviderCooldowns:
    """
    Lightweight circuit breaker for rate-limited providers.

    A provider that answered rate_limited is skipped by every chain until
    its window expires. Process-wide, in memory, lost on restart.
    """

    seconds: float
    clock: Callable[[], float] = time.monotonic
    _blocked_until: dict[str, float] = field(default_factory=dict)

    def block(self, provider_name: str) -> None:
        self._blocked_until[provider_name] = self.clock() + self.seconds
        logger.info(f"{provider_name} rate limited, cooling down for {self.seconds:.0f}s")

    def is_blocked(self, provider_name: str) -> bool:
        until = self._blocked_until.get(provider_name)
        if until is None:
            return False
        if self.clock() >= until:
            del self._blocked_until[provider_name]
            return False
        return True


def order_providers(
    providers: Sequence[Provider],
    preferred: Optional[str] = None,
) -> list[Provider]:
    """Configured order, with the preferred provider (if present) moved first."""
    ordered = list(providers)
    if preferred:
        for i, provider in enumerate(ordered):
            if provider.name == preferred:
                ordered.insert(0, ordered.pop(i))
                break
    return ordered


class ProviderChainRunner:
    """
    Resolves one query over an ordered provider list.

    Providers without credentials (or cooling down) are skipped and not
    counted as attempts. Returns AllFailed instead of raising.
    """

    def __init__(
        self,
        per_provider_timeout: float = DEFAULT_TIMEOUT,
        cooldowns: Optional[ProviderCooldowns] = None,
    ):
        self.per_provider_timeout = per_provider_timeout
        self.cooldowns = cooldowns

    async def resolve(
        self,
        providers: Sequence[Provider],
        query: Query,
        preferred: Optional[str] = None,
        on_failure: Optional[Callable[[Failure], None]] = None,
    ) -> ChainOutcome:
        """
        on_failure sees each failed attempt as it happens, so callers that
        cancel the chain midway still know which providers were tried.
        """
        attempts: list[Failure] = []
        skipped: list[str] = []

        for provider in order_providers(providers, preferred):
            if not provider.is_available():
                skipped.append(provider.name)
                continue
            if self.cooldowns is not None and self.cooldowns.is_blocked(provider.name):
                skipped.append(provider.name)
                continue

            outcome = await extract(provider, query, timeout=self.per_provider_timeout)
            if isinstance(outcome, Success):
                if attempts:
                    logger.info(
                        f"{query.indicator}: {provider.name} answered after "
                        f"{len(attempts)} failed provider(s)"
                    )
                return ChainSuccess(
                    value=outcome.value,
                    provider_used=provider.name,
                    attempts=tuple(attempts),
                )

            attempts.append(outcome)
            if on_failure is not None:
                on_failure(outcome)
            if outcome.reason == FailureReason.RATE_LIMITED and self.cooldowns is not None:
                self.cooldowns.block(provider.name)

        if attempts:
            logger.warning(f"{query.indicator}: all {len(attempts)} provider(s) failed")
        return AllFailed(attempts=tuple(attempts), skipped=tuple(skipped))


async def resolve_via_chain(
    providers: Sequence[Provider],
    query: Query,
    preferred: Optional[str] = None,
    per_provider_timeout: float = DEFAULT_TIMEOUT,
) -> ChainOutcome:
    """Stateless shortcut for a one-off chain."""
    runner = ProviderChainRunner(per_provider_timeout=per_provider_timeout)
    return await runner.resolve(providers, query, preferred=preferred)
