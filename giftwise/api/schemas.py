"""Request and response bodies for the HTTP surface.

Field aliases accept the camelCase names the web client sends.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from giftwise.data.models import SuggestionRequest


class GiftIdeasRequest(BaseModel):
    """Body of POST /api/gift-ideas."""

    model_config = ConfigDict(populate_by_name=True)

    recipient: str = ""
    relationship: str = ""
    contact_notes: str = Field("", alias="contactNotes")
    occasion: str = ""
    occasion_notes: str = Field("", alias="occasionNotes")
    preferences: str = ""
    past_purchases: list[str] = Field(default_factory=list, alias="pastPurchases")

    @field_validator(
        "recipient", "relationship", "contact_notes",
        "occasion", "occasion_notes", "preferences",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return "" if v is None else v

    @field_validator("past_purchases", mode="before")
    @classmethod
    def none_to_list(cls, v: list[str] | None) -> list[str]:
        return [] if v is None else v

    def to_request(self) -> SuggestionRequest:
        return SuggestionRequest(
            recipient=self.recipient,
            relationship=self.relationship,
            contact_notes=self.contact_notes,
            occasion=self.occasion,
            occasion_notes=self.occasion_notes,
            preferences=self.preferences,
            past_purchases=tuple(self.past_purchases),
        )


class GiftIdea(BaseModel):
    name: str
    reason: str


class TriggerResponse(BaseModel):
    """Body of POST /api/trigger-reminders."""

    success: bool
    reminders_sent: int = 0
    nudges_sent: int = 0
    failures: int = 0
    marker_failures: int = 0
    error: str | None = None
