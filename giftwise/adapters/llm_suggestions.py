"""LLM suggestion adapter — implements SuggestionGenerator.

Builds the gift-idea prompt, calls giftwise.core.llm.complete() and
parses the model's JSON answer into GiftSuggestion records.
"""

from __future__ import annotations

import json
import logging
import re

from giftwise.core.llm import complete
from giftwise.data.models import GiftSuggestion, SuggestionRequest
from giftwise.ports.suggestion_port import SuggestionError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful gift recommendation assistant. Given the recipient's "
    "relationship to the user, any notes about the recipient, the occasion "
    '(which may be "None"), any notes about the occasion, the recipient\'s '
    "preferences, and a list of their past purchases, suggest 3 realistic, "
    "thoughtful gift ideas. Avoid suggesting gifts similar to recent purchases. "
    "For each, provide a short name and a 1-2 sentence reason. Only suggest "
    "gifts that are likely to be available for purchase online."
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def build_user_prompt(request: SuggestionRequest) -> str:
    past = ", ".join(request.past_purchases) if request.past_purchases else "None"
    return (
        f"Relationship: {request.relationship}\n"
        f"Recipient Notes: {request.contact_notes}\n"
        f"Occasion: {request.occasion}\n"
        f"Occasion Notes: {request.occasion_notes}\n"
        f"Preferences: {request.preferences}\n"
        f"Past Purchases: {past}\n"
        "\n"
        'Return as JSON: [{ "name": "...", "reason": "..." }]'
    )


def parse_suggestions(text: str) -> list[GiftSuggestion]:
    """Parse the model's JSON array, tolerating a markdown code fence.

    Raises SuggestionError if the text is not a list of name/reason objects.
    """
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise SuggestionError(f"model returned invalid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise SuggestionError("model did not return a JSON array")

    suggestions: list[GiftSuggestion] = []
    for item in data:
        if not isinstance(item, dict) or not item.get("name"):
            logger.warning("Skipping malformed suggestion: %r", item)
            continue
        suggestions.append(
            GiftSuggestion(name=str(item["name"]), reason=str(item.get("reason", "")))
        )

    if not suggestions:
        raise SuggestionError("model returned no usable suggestions")
    return suggestions


class LLMSuggestionGenerator:
    """SuggestionGenerator backed by the configured LLM provider."""

    def __init__(self, max_tokens: int = 512, temperature: float = 0.7) -> None:
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate(self, request: SuggestionRequest) -> list[GiftSuggestion]:
        text = await complete(
            system=SYSTEM_PROMPT,
            user_message=build_user_prompt(request),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        return parse_suggestions(text)
