"""
GiftWise — Local SQLite store.

A self-contained implementation of StorePort for development and tests.
Mirrors the hosted schema closely enough for the notification core:
user_profiles, contacts, occasions, gifts and purchases.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any

from giftwise.data.models import (
    DEFAULT_REMINDER_DAYS_BEFORE,
    Contact,
    Gift,
    Occasion,
    Purchase,
    User,
    parse_date,
)
from giftwise.ports.store_port import StoreError

logger = logging.getLogger(__name__)

# Columns update_occasion may touch
_OCCASION_UPDATABLE = {
    "occasion_type",
    "date",
    "notes",
    "reminder_days_before",
    "reminder_sent_date",
    "nudge_sent_date",
}


class GiftDB:
    """SQLite-backed storage for users, contacts, occasions and purchases."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from giftwise.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create tables if they don't exist, and migrate schema."""
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS user_profiles (
                    id    TEXT PRIMARY KEY,
                    name  TEXT NOT NULL DEFAULT '',
                    email TEXT NOT NULL DEFAULT ''
                );
                CREATE TABLE IF NOT EXISTS contacts (
                    id           INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id      TEXT NOT NULL,
                    name         TEXT NOT NULL,
                    relationship TEXT NOT NULL DEFAULT '',
                    notes        TEXT NOT NULL DEFAULT ''
                );
                CREATE TABLE IF NOT EXISTS occasions (
                    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id              TEXT    NOT NULL,
                    contact_id           INTEGER NOT NULL,
                    occasion_type        TEXT    NOT NULL,
                    date                 TEXT,
                    notes                TEXT,
                    reminder_days_before INTEGER DEFAULT 14
                );
                CREATE TABLE IF NOT EXISTS gifts (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id     TEXT NOT NULL,
                    name        TEXT NOT NULL,
                    contact_id  INTEGER,
                    occasion_id INTEGER
                );
                CREATE TABLE IF NOT EXISTS purchases (
                    id            INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id       TEXT NOT NULL,
                    gift_id       INTEGER,
                    purchase_date TEXT,
                    amount        REAL NOT NULL DEFAULT 0
                );
            """)
            # Migrate existing DBs: sent-date markers were added later
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(occasions)").fetchall()
            }
            if "reminder_sent_date" not in existing_cols:
                conn.execute("ALTER TABLE occasions ADD COLUMN reminder_sent_date TEXT")
            if "nudge_sent_date" not in existing_cols:
                conn.execute("ALTER TABLE occasions ADD COLUMN nudge_sent_date TEXT")
        logger.debug("GiftWise tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_occasion(row: sqlite3.Row) -> Occasion:
        days_before = row["reminder_days_before"]
        return Occasion(
            id=row["id"],
            user_id=row["user_id"],
            contact_id=row["contact_id"],
            occasion_type=row["occasion_type"],
            date=parse_date(row["date"]),
            notes=row["notes"],
            reminder_days_before=(
                DEFAULT_REMINDER_DAYS_BEFORE if days_before is None else days_before
            ),
            reminder_sent_date=parse_date(row["reminder_sent_date"]),
            nudge_sent_date=parse_date(row["nudge_sent_date"]),
            contact_name=row["contact_name"] or "",
        )

    @staticmethod
    def _row_to_purchase(row: sqlite3.Row) -> Purchase:
        return Purchase(
            id=row["id"],
            user_id=row["user_id"],
            gift_id=row["gift_id"],
            purchase_date=parse_date(row["purchase_date"]),
            amount=row["amount"],
            occasion_id=row["occasion_id"],
        )

    # ------------------------------------------------------------------
    # Seeding helpers (the CRUD screens own these in production)
    # ------------------------------------------------------------------

    def add_user(self, user_id: str, email: str, name: str = "") -> User:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO user_profiles (id, name, email) VALUES (?, ?, ?)",
                (user_id, name, email),
            )
        logger.info("User added: %s <%s>", user_id, email)
        return User(id=user_id, email=email, name=name)

    def add_contact(
        self, user_id: str, name: str, relationship: str = "", notes: str = "",
    ) -> Contact:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO contacts (user_id, name, relationship, notes) VALUES (?, ?, ?, ?)",
                (user_id, name.strip(), relationship, notes),
            )
            contact_id = cursor.lastrowid
        logger.info("Contact added: #%d '%s'", contact_id, name)
        return Contact(
            id=contact_id, user_id=user_id, name=name.strip(),
            relationship=relationship, notes=notes,
        )

    def add_occasion(
        self,
        user_id: str,
        contact_id: int,
        occasion_type: str,
        occasion_date: date | None,
        notes: str | None = None,
        reminder_days_before: int | None = DEFAULT_REMINDER_DAYS_BEFORE,
    ) -> Occasion:
        """Insert an occasion. Returns it re-read with the contact's name."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO occasions
                    (user_id, contact_id, occasion_type, date, notes, reminder_days_before)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, contact_id, occasion_type,
                    occasion_date.isoformat() if occasion_date else None,
                    notes, reminder_days_before,
                ),
            )
            occasion_id = cursor.lastrowid
        logger.info("Occasion added: #%d %s on %s", occasion_id, occasion_type, occasion_date)
        occasion = self.get_occasion(occasion_id)
        if occasion is None:
            raise StoreError(f"Occasion {occasion_id} vanished right after insert")
        return occasion

    def add_gift(
        self,
        user_id: str,
        name: str,
        contact_id: int | None = None,
        occasion_id: int | None = None,
    ) -> Gift:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO gifts (user_id, name, contact_id, occasion_id) VALUES (?, ?, ?, ?)",
                (user_id, name, contact_id, occasion_id),
            )
            gift_id = cursor.lastrowid
        return Gift(
            id=gift_id, user_id=user_id, name=name,
            contact_id=contact_id, occasion_id=occasion_id,
        )

    def add_purchase(
        self,
        user_id: str,
        gift_id: int | None,
        purchase_date: date | None = None,
        amount: float = 0.0,
    ) -> Purchase:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO purchases (user_id, gift_id, purchase_date, amount) VALUES (?, ?, ?, ?)",
                (
                    user_id, gift_id,
                    purchase_date.isoformat() if purchase_date else None, amount,
                ),
            )
            purchase_id = cursor.lastrowid
            row = conn.execute(
                "SELECT occasion_id FROM gifts WHERE id = ?", (gift_id,)
            ).fetchone()
        return Purchase(
            id=purchase_id,
            user_id=user_id,
            gift_id=gift_id,
            purchase_date=purchase_date,
            amount=amount,
            occasion_id=row["occasion_id"] if row else None,
        )

    def get_occasion(self, occasion_id: int) -> Occasion | None:
        """Fetch a single occasion by ID."""
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT o.*, c.name AS contact_name
                FROM occasions o LEFT JOIN contacts c ON c.id = o.contact_id
                WHERE o.id = ?
                """,
                (occasion_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_occasion(row)

    # ------------------------------------------------------------------
    # StorePort
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT * FROM user_profiles ORDER BY id").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to list users: {exc}") from exc
        return [User(id=r["id"], email=r["email"], name=r["name"]) for r in rows]

    def get_occasions(self, user_id: str) -> list[Occasion]:
        """All of a user's occasions, ordered by date, with contact names."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT o.*, c.name AS contact_name
                    FROM occasions o LEFT JOIN contacts c ON c.id = o.contact_id
                    WHERE o.user_id = ?
                    ORDER BY o.date
                    """,
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to load occasions for {user_id}: {exc}") from exc
        return [self._row_to_occasion(r) for r in rows]

    def get_purchases(self, user_id: str) -> list[Purchase]:
        """All of a user's purchases, newest first, with the gift's occasion."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT p.*, g.occasion_id AS occasion_id
                    FROM purchases p LEFT JOIN gifts g ON g.id = p.gift_id
                    WHERE p.user_id = ?
                    ORDER BY p.purchase_date DESC
                    """,
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to load purchases for {user_id}: {exc}") from exc
        return [self._row_to_purchase(r) for r in rows]

    def update_occasion(self, occasion_id: int, fields: dict[str, Any]) -> None:
        """Partially update an occasion. Raises StoreError if nothing matched."""
        unknown = set(fields) - _OCCASION_UPDATABLE
        if unknown:
            raise StoreError(f"Cannot update occasion columns: {', '.join(sorted(unknown))}")
        if not fields:
            return

        columns = sorted(fields)
        assignments = ", ".join(f"{col} = ?" for col in columns)
        params = [fields[col] for col in columns] + [occasion_id]
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    f"UPDATE occasions SET {assignments} WHERE id = ?", params,
                )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to update occasion {occasion_id}: {exc}") from exc

        if cursor.rowcount == 0:
            raise StoreError(f"No rows updated for occasion {occasion_id}")
        logger.info("Occasion #%d updated: %s", occasion_id, ", ".join(columns))
