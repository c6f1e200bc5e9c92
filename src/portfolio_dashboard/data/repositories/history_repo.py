"""SQLite store for the daily portfolio history series."""

import json
import sqlite3
from typing import Optional

from ...core.exceptions import PersistenceError
from ...core.history import entry_to_wire, history_from_wire
from ...core.interfaces import HistoryStore
from ...core.models import PortfolioHistory
from ..database import get_db


class HistoryRepository(HistoryStore):
    """One row per day; `assets` holds the wire-format asset list as JSON."""

    async def load(self) -> Optional[PortfolioHistory]:
        try:
            rows = get_db().conn.execute(
                "SELECT date, value, assets FROM portfolio_history ORDER BY date"
            ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read portfolio history: {e}") from e
        if not rows:
            return None
        try:
            items = [
                {"date": r["date"], "value": r["value"], "assets": json.loads(r["assets"])}
                for r in rows
            ]
        except ValueError as e:
            raise PersistenceError(f"Malformed portfolio history: {e}") from e
        return history_from_wire(items)

    async def save(self, history: PortfolioHistory) -> None:
        """Replace the stored series with `history` in one transaction."""
        db = get_db()
        rows = []
        for entry in history.entries:
            wire = entry_to_wire(entry)
            rows.append((wire["date"], str(entry.value), json.dumps(wire["assets"])))
        try:
            with db.transaction():
                db.conn.execute("DELETE FROM portfolio_history")
                db.conn.executemany(
                    "INSERT INTO portfolio_history (date, value, assets) VALUES (?, ?, ?)",
                    rows,
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save portfolio history: {e}") from e
