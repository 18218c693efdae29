"""
In-memory cache for the latest CCPI result.

Single slot, fixed TTL, last writer wins. Lost on restart.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ccpi.schemas.composite import CompositeResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0  # 5 minutes


@dataclass(frozen=True)
class CacheEntry:
    result: CompositeResult
    stored_at: float  # Clock reading at put()


class ResultCache:
    """
    Holds at most one CompositeResult.

    get() returns the stored result while it is younger than the TTL and
    None (a miss) otherwise. put() overwrites unconditionally.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    def get(self) -> Optional[CompositeResult]:
        entry = self.entry()
        return entry.result if entry else None

    def entry(self) -> Optional[CacheEntry]:
        """Current entry if fresh, else None."""
        if self._entry is None:
            return None
        if self.age(self._entry) >= self.ttl_seconds:
            logger.debug("CCPI cache expired")
            return None
        return self._entry

    def put(self, result: CompositeResult) -> CacheEntry:
        self._entry = CacheEntry(result=result, stored_at=self._clock())
        logger.debug(f"CCPI cache updated (ttl {self.ttl_seconds:.0f}s)")
        return self._entry

    def age(self, entry: CacheEntry) -> float:
        return self._clock() - entry.stored_at

    def clear(self) -> None:
        self._entry = None
