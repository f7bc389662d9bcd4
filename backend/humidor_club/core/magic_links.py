"""
In-memory store of the latest sign-in link per email.

Development and test aid only: it lets a developer fetch the most recent
magic link without reading logs. It is per-process, not durable, and is
disabled unless ``magic_link_store_enabled`` (or debug mode) says otherwise.
"""
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from humidor_club.core.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class MagicLinkEntry:
    email: str
    url: str
    created_at: float


class MagicLinkStore:
    """
    TTL cache of sign-in links keyed by lower-cased email.

    Uses LRU eviction when the size limit is reached. Expired entries are
    swept on every write and dropped lazily on read.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: int = 60 * 60 * 24,
        clock: Callable[[], float] = time.time,
    ):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, MagicLinkEntry] = OrderedDict()

    def _is_expired(self, entry: MagicLinkEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def store(self, email: str, url: str) -> None:
        """Record the latest link for an email and sweep expired entries."""
        key = email.strip().lower()
        now = self._clock()

        if key in self._entries:
            del self._entries[key]
        if len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = MagicLinkEntry(email=key, url=url, created_at=now)

        expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("Swept expired magic links", count=len(expired))

    def get(self, email: str) -> Optional[str]:
        """Return the latest unexpired link for an email, or None."""
        key = email.strip().lower()
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return entry.url

    def entries(self) -> list[MagicLinkEntry]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_magic_link_store = MagicLinkStore(
    max_size=settings.magic_link_store_max_size,
    ttl_seconds=settings.magic_link_store_ttl_seconds,
)


def get_magic_link_store() -> Optional[MagicLinkStore]:
    """Get the process store, or None when the dev store is disabled."""
    if not settings.magic_link_store_active:
        return None
    return _magic_link_store
