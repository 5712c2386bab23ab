"""Supabase store adapter — implements StorePort over PostgREST.

Reads user_profiles, occasions (with the contact's name) and purchases
(with the gift's occasion_id) through Supabase's REST interface, and
patches the two sent-date markers on occasions.

Backend jobs should run with the service key: the anon key is subject to
row-level security and will typically see no rows.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from giftwise.data.models import (
    DEFAULT_REMINDER_DAYS_BEFORE,
    Occasion,
    Purchase,
    User,
    parse_date,
)
from giftwise.ports.store_port import StoreError

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 10

_OCCASION_SELECT = "*,contacts(name)"
_PURCHASE_SELECT = "id,user_id,gift_id,purchase_date,amount,gifts(id,occasion_id)"


def row_to_occasion(row: dict[str, Any]) -> Occasion:
    contact = row.get("contacts") or {}
    days_before = row.get("reminder_days_before")
    return Occasion(
        id=row["id"],
        user_id=row["user_id"],
        contact_id=row.get("contact_id"),
        occasion_type=row.get("occasion_type") or "",
        date=parse_date(row.get("date")),
        notes=row.get("notes"),
        reminder_days_before=(
            DEFAULT_REMINDER_DAYS_BEFORE if days_before is None else int(days_before)
        ),
        reminder_sent_date=parse_date(row.get("reminder_sent_date")),
        nudge_sent_date=parse_date(row.get("nudge_sent_date")),
        contact_name=contact.get("name") or "",
    )


def row_to_purchase(row: dict[str, Any]) -> Purchase:
    gift = row.get("gifts") or {}
    return Purchase(
        id=row["id"],
        user_id=row["user_id"],
        gift_id=row.get("gift_id"),
        purchase_date=parse_date(row.get("purchase_date")),
        amount=float(row.get("amount") or 0),
        occasion_id=gift.get("occasion_id"),
    )


class SupabaseStore:
    """PostgREST implementation of StorePort."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float = _TIMEOUT_SECONDS,
    ) -> None:
        if url is None or api_key is None:
            from giftwise.config import settings

            if url is None:
                url = settings.SUPABASE_URL
            if api_key is None:
                if not settings.SUPABASE_SERVICE_KEY:
                    logger.warning(
                        "SUPABASE_SERVICE_KEY not set, falling back to anon key; "
                        "backend jobs will not bypass row-level security",
                    )
                api_key = settings.supabase_key

        self._base_url = url.rstrip("/") + "/rest/v1"
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }

    def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str],
        json: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        headers = self._headers()
        if extra_headers:
            headers.update(extra_headers)
        try:
            with httpx.Client(base_url=self._base_url, timeout=self._timeout) as client:
                resp = client.request(method, f"/{table}", params=params, json=json, headers=headers)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            raise StoreError(
                f"{method} {table} failed with {exc.response.status_code}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"{method} {table} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # StorePort
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        rows = self._request("GET", "user_profiles", {"select": "id,email,name"})
        return [
            User(id=str(r["id"]), email=r.get("email") or "", name=r.get("name") or "")
            for r in rows
        ]

    def get_occasions(self, user_id: str) -> list[Occasion]:
        rows = self._request(
            "GET", "occasions",
            {"select": _OCCASION_SELECT, "user_id": f"eq.{user_id}", "order": "date"},
        )
        return [row_to_occasion(r) for r in rows]

    def get_purchases(self, user_id: str) -> list[Purchase]:
        rows = self._request(
            "GET", "purchases",
            {
                "select": _PURCHASE_SELECT,
                "user_id": f"eq.{user_id}",
                "order": "purchase_date.desc",
            },
        )
        return [row_to_purchase(r) for r in rows]

    def update_occasion(self, occasion_id: int, fields: dict[str, Any]) -> None:
        """Patch an occasion. Zero matched rows is an error."""
        rows = self._request(
            "PATCH", "occasions",
            {"id": f"eq.{occasion_id}"},
            json=fields,
            extra_headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise StoreError(f"No rows updated for occasion {occasion_id}")
        logger.info("Occasion #%s updated: %s", occasion_id, ", ".join(sorted(fields)))
