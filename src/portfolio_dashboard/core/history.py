"""Daily portfolio value history.

The series is kept sorted ascending by day with at most one entry per day.
HistoryManager is the only writer; every change is persisted in the
background, the in-memory series is authoritative as soon as a call returns.
"""

import asyncio
import bisect
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from .exceptions import PersistenceError
from .interfaces import HistoryStore
from .models import AssetType, AssetValue, HistoryEntry, PortfolioHistory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Wire format: {"date": "YYYY-MM-DD", "value": 1.0, "assets": [{"type": 2, "value": 1.0}]}
# ---------------------------------------------------------------------------

def entry_to_wire(entry: HistoryEntry) -> dict:
    return {
        "date": entry.date.isoformat(),
        "value": float(entry.value),
        "assets": [{"type": a.asset_type.value, "value": float(a.value)} for a in entry.assets],
    }


def entry_from_wire(data: dict) -> HistoryEntry:
    """Decode one stored entry. Full ISO timestamps are truncated to the day."""
    try:
        return HistoryEntry(
            date=date.fromisoformat(str(data["date"])[:10]),
            value=Decimal(str(data["value"])),
            assets=tuple(
                AssetValue(asset_type=AssetType(int(a["type"])), value=Decimal(str(a["value"])))
                for a in data.get("assets", [])
            ),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise PersistenceError(f"Malformed history entry {data!r}: {e}") from e


def history_to_wire(history: PortfolioHistory) -> list[dict]:
    return [entry_to_wire(e) for e in history.entries]


def history_from_wire(items: list) -> PortfolioHistory:
    """Decode a stored series, restoring date order; a later duplicate day wins."""
    if not isinstance(items, list):
        raise PersistenceError(f"Expected a list of history entries, got {type(items).__name__}")
    by_day: dict[date, HistoryEntry] = {}
    for item in items:
        entry = entry_from_wire(item)
        by_day[entry.date] = entry
    return PortfolioHistory(entries=[by_day[d] for d in sorted(by_day)])


class HistoryManager:
    def __init__(self, store: HistoryStore, history: Optional[PortfolioHistory] = None):
        self._store = store
        self.history = history or PortfolioHistory()
        self._pending: set[asyncio.Task] = set()

    @property
    def entries(self) -> list[HistoryEntry]:
        return self.history.entries

    async def load(self) -> PortfolioHistory:
        """Load the stored series; unreadable data starts an empty history."""
        try:
            stored = await self._store.load()
        except PersistenceError as e:
            logger.error("Could not load portfolio history, starting empty: %s", e)
            stored = None
        self.history = stored or PortfolioHistory()
        return self.history

    def record_daily_snapshot(
        self,
        total_value: Decimal,
        asset_totals: dict[AssetType, Decimal],
        today: Optional[date] = None,
    ) -> bool:
        """Store today's value, at most once per day.

        Appends a new entry when the last stored day is before today, replaces
        the last entry when today's value has changed, and does nothing when
        it is unchanged. Returns True when the series was modified.
        """
        today = today or date.today()
        entries = self.history.entries
        entry = HistoryEntry(
            date=today,
            value=total_value,
            assets=tuple(AssetValue(asset_type=t, value=v) for t, v in asset_totals.items()),
        )

        if entries and entries[-1].date == today:
            if entries[-1].value == total_value:
                return False
            entries[-1] = entry
            logger.debug("Updated history entry for %s: %s", today, total_value)
        elif entries and entries[-1].date > today:
            # A manual entry is dated in the future; today's entry goes in date order
            index = bisect.bisect_left([e.date for e in entries], today)
            if entries[index].date == today and entries[index].value == total_value:
                return False
            self.insert_manual_entry(entry)
            return True
        else:
            entries.append(entry)
            logger.debug("Added history entry for %s: %s", today, total_value)

        self._persist()
        return True

    def insert_manual_entry(self, entry: HistoryEntry) -> None:
        """Insert a backfilled entry in date order; replaces an existing entry for that day."""
        entries = self.history.entries
        index = bisect.bisect_left([e.date for e in entries], entry.date)
        if index >= len(entries):
            entries.append(entry)
        elif entries[index].date == entry.date:
            entries[index] = entry
        else:
            entries.insert(index, entry)
        logger.info("Edited portfolio history entry for %s", entry.date)
        self._persist()

    async def flush(self) -> None:
        """Wait for background saves started so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def _persist(self) -> None:
        snapshot = PortfolioHistory(entries=list(self.history.entries))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (plain synchronous caller): save right away
            asyncio.run(self._save(snapshot))
            return
        task = loop.create_task(self._save(snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _save(self, snapshot: PortfolioHistory) -> None:
        try:
            await self._store.save(snapshot)
        except PersistenceError as e:
            logger.error("Could not save portfolio history: %s", e)
