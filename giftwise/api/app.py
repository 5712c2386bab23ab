"""
GiftWise — HTTP surface.

Two operations plus a liveness probe:
- POST /api/trigger-reminders: run the reminder/nudge pass now
- POST /api/gift-ideas: cached AI gift suggestions (?refresh=true to bypass)
- GET /: liveness

The daily notification job is started and stopped with the app.
Errors are returned as structured JSON, never raw exception text.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from giftwise.api.schemas import GiftIdea, GiftIdeasRequest, TriggerResponse
from giftwise.core.scheduler import build_scheduler
from giftwise.ports.suggestion_port import SuggestionError

if TYPE_CHECKING:
    from giftwise.core.scheduler import NotificationTrigger
    from giftwise.core.suggestions import SuggestionService

logger = logging.getLogger(__name__)


def _default_trigger() -> NotificationTrigger:
    from giftwise.adapters.resend_email import ResendEmailSender
    from giftwise.adapters.store_factory import create_store
    from giftwise.core.dispatcher import NotificationDispatcher
    from giftwise.core.scheduler import NotificationTrigger

    dispatcher = NotificationDispatcher(create_store(), ResendEmailSender())
    return NotificationTrigger(dispatcher)


def _default_suggestions() -> SuggestionService:
    from giftwise.adapters.llm_suggestions import LLMSuggestionGenerator
    from giftwise.config import settings
    from giftwise.core.suggestion_cache import SuggestionCache
    from giftwise.core.suggestions import SuggestionService

    cache = SuggestionCache(ttl_seconds=settings.SUGGESTION_CACHE_TTL_SECONDS)
    return SuggestionService(cache, LLMSuggestionGenerator())


def create_app(
    trigger: NotificationTrigger | None = None,
    suggestions: SuggestionService | None = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """Build the FastAPI app around a trigger and a suggestion service.

    Args:
        trigger: Notification trigger. Defaults to the configured store + Resend.
        suggestions: Suggestion service. Defaults to an LLM generator behind
                     a fresh in-process cache.
        run_scheduler: Start the daily cron job with the app.
    """
    if trigger is None:
        trigger = _default_trigger()
    if suggestions is None:
        suggestions = _default_suggestions()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler = None
        if run_scheduler:
            scheduler = build_scheduler(trigger)
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None and scheduler.running:
                scheduler.shutdown(wait=False)
                logger.info("Scheduler shut down")

    app = FastAPI(title="GiftWise Backend", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.trigger = trigger
    app.state.suggestions = suggestions

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Backend is running"

    @app.post("/api/trigger-reminders", response_model=TriggerResponse)
    async def trigger_reminders():
        logger.info("Manual reminders/nudges run requested")
        result = await trigger.run_now()
        if not result.success:
            return JSONResponse(status_code=503, content=result.to_dict())
        return result.to_dict()

    @app.post("/api/gift-ideas", response_model=list[GiftIdea])
    async def gift_ideas(body: GiftIdeasRequest, refresh: bool = False):
        try:
            ideas = await suggestions.get_suggestions(body.to_request(), force_refresh=refresh)
        except SuggestionError as exc:
            logger.error("Gift ideas error: %s", exc)
            return JSONResponse(status_code=502, content={"error": "Failed to generate gift ideas"})
        return [{"name": s.name, "reason": s.reason} for s in ideas]

    return app
