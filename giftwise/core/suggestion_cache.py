"""Suggestion cache: short-lived memo of generated gift ideas.

Entries are keyed by a fingerprint of the full request and expire after
a TTL measured with an injected clock. Expired entries are purged on
every write, so keys that are never requested again do not pile up.

The fingerprint serializes fields in a fixed order and keeps
past_purchases in the order given. Two requests that list the same past
purchases in a different order get different keys (and so a second
generator call); callers that want them to share an entry must sort
before building the request.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from typing import Callable

from cachetools import TTLCache

from giftwise.data.models import GiftSuggestion, SuggestionRequest

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_MAXSIZE = 1024

_FINGERPRINT_FIELDS = (
    "recipient",
    "relationship",
    "contact_notes",
    "occasion",
    "occasion_notes",
    "preferences",
    "past_purchases",
)


def fingerprint(request: SuggestionRequest) -> str:
    """Canonical cache key for a suggestion request."""
    canonical = json.dumps(
        [[name, _plain(getattr(request, name))] for name in _FINGERPRINT_FIELDS],
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _plain(value: object) -> object:
    if isinstance(value, tuple):
        return list(value)
    return value


class SuggestionCache:
    """Thread-safe TTL map from fingerprint to suggestions.

    Backed by cachetools.TTLCache: an entry is fresh while
    clock() - stored_at < ttl_seconds, expired entries are purged on every
    write, and the least recently used entry is dropped once maxsize is hit.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = DEFAULT_MAXSIZE,
    ) -> None:
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=clock)
        self._lock = threading.RLock()
        logger.debug(
            "Suggestion cache initialized (maxsize=%d, ttl=%ss)", maxsize, ttl_seconds,
        )

    def get(self, key: str) -> list[GiftSuggestion] | None:
        """Return the cached suggestions, or None if absent or expired."""
        with self._lock:
            suggestions = self._entries.get(key)
        if suggestions is None:
            return None
        return list(suggestions)

    def put(self, key: str, suggestions: list[GiftSuggestion]) -> None:
        """Store (or overwrite) suggestions under key, stamped with now."""
        with self._lock:
            self._entries[key] = list(suggestions)

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
