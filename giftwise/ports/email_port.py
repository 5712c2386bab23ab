"""Email port — abstract interface for sending notification emails.

Core modules depend on this protocol, never on a specific email provider.
"""

from __future__ import annotations

from typing import Protocol


class EmailError(Exception):
    """Raised when the email provider rejects or fails a send."""


class EmailPort(Protocol):
    """Abstract email interface used by core modules."""

    async def send(self, to: str, subject: str, html: str) -> None: ...
