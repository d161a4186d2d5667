"""
In-memory cache of EMA scan results.

Entries expire lazily: a stale entry stays in memory but reads as a miss.
"""

import logging
import time
from typing import Callable, Dict, Optional

from config.settings import settings
from nse_scanner.data.models import EmaScanResult, ScanCacheEntry

logger = logging.getLogger(__name__)


class ScanCache:
    """Per-symbol cache of the last computed scan result."""

    def __init__(self, ttl_seconds: float = None, clock: Callable[[], float] = time.time):
        if ttl_seconds is None:
            ttl_seconds = settings.scan_cache_ttl_minutes * 60
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, ScanCacheEntry] = {}

    def get(self, symbol: str) -> Optional[EmaScanResult]:
        """Return the cached result if it is still fresh."""
        entry = self._entries.get(symbol)
        if entry is None:
            return None

        age = self._clock() - entry.timestamp
        if age < self.ttl_seconds:
            return entry.result

        logger.debug(f"{symbol}: cached result is stale ({age:.0f}s old)")
        return None

    def put(self, symbol: str, result: EmaScanResult) -> None:
        self._entries[symbol] = ScanCacheEntry(result=result, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._entries

    def __len__(self) -> int:
        return len(self._entries)
