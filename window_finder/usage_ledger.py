"""Usage ledger: selection frequency/recency and search query history."""

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .models import CatalogItem

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Recency bonus: 5 points for a selection right now, minus 0.5 per day
MAX_RECENCY_BONUS = 5.0
RECENCY_DECAY_PER_DAY = 0.5

MAX_SUGGESTIONS = 5


@dataclass
class UsageRecord:
    """Selection count and last selection time for one signature."""
    count: int
    last_used: float

    def to_dict(self) -> Dict[str, float]:
        return {"count": self.count, "last_used": self.last_used}


def signature(item: CatalogItem) -> str:
    """
    Build the restart-stable usage key for an item.

    Args:
        item: Catalog item

    Returns:
        "title|owner_name"
    """
    return f"{item.title}|{item.owner_name}"


class UsageLedger:
    """Records which items the user picks and which queries they type."""

    def __init__(
        self,
        path: Optional[str] = None,
        history_size: int = 50,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the usage ledger.

        Args:
            path: JSON file to persist to (None keeps the ledger in memory)
            history_size: Maximum number of search queries to keep
            clock: Time source returning Unix seconds
        """
        self.path = os.path.expanduser(path) if path else None
        self.history_size = history_size
        self._clock = clock
        self._lock = threading.RLock()
        self._usage: Dict[str, UsageRecord] = {}
        self._search_history: List[str] = []

        if self.path:
            self._load()

    # Item usage

    def record_selection(self, item: CatalogItem) -> None:
        """
        Record that the user chose an item.

        Args:
            item: The selected catalog item
        """
        key = signature(item)
        now = self._clock()
        with self._lock:
            record = self._usage.get(key)
            if record is None:
                self._usage[key] = UsageRecord(count=1, last_used=now)
            else:
                record.count += 1
                record.last_used = now
            self._save()
        logger.debug("Recorded usage for item: %s", item.title)

    def preference_score(self, item: CatalogItem) -> float:
        """
        Score how strongly the user prefers an item.

        Args:
            item: Catalog item

        Returns:
            Selection count plus a recency bonus decaying to zero over 10 days
        """
        with self._lock:
            record = self._usage.get(signature(item))
            if record is None:
                return 0.0
            count, last_used = record.count, record.last_used
        return count + self._recency_bonus(last_used)

    def _recency_bonus(self, last_used: float) -> float:
        days = max(0.0, (self._clock() - last_used) / SECONDS_PER_DAY)
        return max(0.0, MAX_RECENCY_BONUS - days * RECENCY_DECAY_PER_DAY)

    def usage_record(self, item: CatalogItem) -> Optional[UsageRecord]:
        with self._lock:
            record = self._usage.get(signature(item))
            return UsageRecord(record.count, record.last_used) if record else None

    # Search history

    def record_query(self, text: str) -> None:
        """
        Add a query to search history (most recent first, no duplicates).

        Args:
            text: Query text; whitespace-only queries are ignored
        """
        if not text or not text.strip():
            return

        with self._lock:
            history = self._search_history
            # Remove if already exists (move to front)
            if text in history:
                history.remove(text)
            history.insert(0, text)
            # Trim to history_size
            del history[self.history_size:]
            self._save()

    def recent_queries(self) -> List[str]:
        """
        Get search history.

        Returns:
            Previous queries (most recent first)
        """
        with self._lock:
            return list(self._search_history)

    def suggest_queries(self, prefix: str) -> List[str]:
        """
        Suggest previous queries for partially typed text.

        Queries starting with the text come first, then queries merely
        containing it; both groups keep recency order.

        Args:
            prefix: Text typed so far (case-insensitive)

        Returns:
            Up to 5 previous queries
        """
        history = self.recent_queries()
        if not prefix:
            return history[:MAX_SUGGESTIONS]

        needle = prefix.lower()
        starts = [q for q in history if q.lower().startswith(needle)]
        contains = [q for q in history if needle in q.lower() and not q.lower().startswith(needle)]
        return (starts + contains)[:MAX_SUGGESTIONS]

    def clear(self) -> None:
        """Erase selection counts and search history (testing/reset only)."""
        with self._lock:
            self._usage.clear()
            self._search_history.clear()
            self._save()

    # Persistence

    def _load(self) -> None:
        """Load persisted data from disk."""
        if not os.path.exists(self.path):
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load usage data from %s: %s", self.path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring usage data in %s: not a JSON object", self.path)
            return

        usage = data.get("usage", {})
        if isinstance(usage, dict):
            for key, value in usage.items():
                try:
                    self._usage[key] = UsageRecord(
                        count=int(value["count"]),
                        last_used=float(value["last_used"])
                    )
                except (KeyError, TypeError, ValueError):
                    logger.debug("Dropping malformed usage record %r", key)

        history = data.get("search_history", [])
        if isinstance(history, list):
            self._search_history = [q for q in history if isinstance(q, str)][:self.history_size]

    def _save(self) -> None:
        """Save data to disk (caller holds the lock)."""
        if not self.path:
            return

        payload = {
            "usage": {key: record.to_dict() for key, record in self._usage.items()},
            "search_history": self._search_history,
        }
        try:
            # Ensure directory exists
            data_dir = os.path.dirname(self.path)
            if data_dir and not os.path.exists(data_dir):
                os.makedirs(data_dir, exist_ok=True)

            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except IOError as e:
            logger.warning("Failed to save usage data to %s: %s", self.path, e)
