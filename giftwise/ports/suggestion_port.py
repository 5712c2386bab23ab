"""Suggestion port — abstract interface for the gift-idea generator."""

from __future__ import annotations

from typing import Protocol

from giftwise.data.models import GiftSuggestion, SuggestionRequest


class SuggestionError(Exception):
    """Raised when gift ideas cannot be generated."""


class SuggestionGenerator(Protocol):
    """Produces gift ideas for a request. Potentially slow (seconds)."""

    async def generate(self, request: SuggestionRequest) -> list[GiftSuggestion]: ...
