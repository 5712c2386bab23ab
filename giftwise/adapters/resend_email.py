"""Resend email adapter — implements EmailPort.

Posts to the Resend REST API. Any transport error or non-2xx answer is
raised as EmailError so the dispatcher can count it and move on.
"""

from __future__ import annotations

import logging

import httpx

from giftwise.ports.email_port import EmailError

logger = logging.getLogger(__name__)

_RESEND_URL = "https://api.resend.com/emails"
_TIMEOUT_SECONDS = 10


class ResendEmailSender:
    """Resend implementation of EmailPort."""

    def __init__(
        self,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float = _TIMEOUT_SECONDS,
    ) -> None:
        if api_key is None or sender is None:
            from giftwise.config import settings

            if api_key is None:
                api_key = settings.RESEND_API_KEY
            if sender is None:
                sender = settings.EMAIL_FROM

        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self._api_key:
            raise EmailError("RESEND_API_KEY is not configured")

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    _RESEND_URL,
                    json={
                        "from": self._sender,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                    },
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text[:200]
            logger.error("Resend rejected email to %s: %s %s", to, exc.response.status_code, detail)
            raise EmailError(f"Resend returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Resend request failed for %s: %s", to, exc)
            raise EmailError(str(exc)) from exc

        logger.debug("Resend accepted email to %s", to)
