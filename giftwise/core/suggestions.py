"""Gift suggestions — the cache sitting in front of the generator.

A hit returns immediately. A miss (or a forced refresh) calls the
generator under a timeout and stores the result; failures are never
cached, so the next request tries again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from giftwise.core.suggestion_cache import fingerprint
from giftwise.ports.suggestion_port import SuggestionError

if TYPE_CHECKING:
    from giftwise.core.suggestion_cache import SuggestionCache
    from giftwise.data.models import GiftSuggestion, SuggestionRequest
    from giftwise.ports.suggestion_port import SuggestionGenerator

logger = logging.getLogger(__name__)


class SuggestionService:
    """Cached access to the suggestion generator."""

    def __init__(
        self,
        cache: SuggestionCache,
        generator: SuggestionGenerator,
        timeout: float | None = None,
    ) -> None:
        if timeout is None:
            from giftwise.config import settings

            timeout = settings.SUGGESTION_TIMEOUT_SECONDS

        self._cache = cache
        self._generator = generator
        self._timeout = timeout

    async def get_suggestions(
        self,
        request: SuggestionRequest,
        force_refresh: bool = False,
    ) -> list[GiftSuggestion]:
        """Return gift ideas for request, from cache when fresh.

        Raises SuggestionError if the generator fails or times out.
        """
        key = fingerprint(request)

        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info("Suggestion cache hit %s", key[:12])
                return cached

        try:
            suggestions = await asyncio.wait_for(
                self._generator.generate(request), timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Suggestion generator timed out after %.1fs", self._timeout)
            raise SuggestionError("suggestion generator timed out") from exc
        except SuggestionError:
            raise
        except Exception as exc:
            logger.error("Suggestion generator failed: %s", exc)
            raise SuggestionError("suggestion generator failed") from exc

        self._cache.put(key, suggestions)
        logger.info(
            "Cached %d suggestions under %s%s",
            len(suggestions), key[:12], " (refresh)" if force_refresh else "",
        )
        return suggestions
