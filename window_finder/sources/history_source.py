"""Recently visited pages read from browser SQLite history databases."""

import logging
import os
import shutil
import sqlite3
import tempfile
import time
from typing import Callable, List, Optional, Tuple

from ..exceptions import SourcePermissionDeniedError, SourceUnavailableError
from ..models import HistoryEntry
from ..timestamps import VisitEpoch, from_unix_seconds
from .base import BrowserHistorySource

logger = logging.getLogger(__name__)

_APP_SUPPORT = "~/Library/Application Support"

# Default history database locations on macOS
CHROMIUM_HISTORY_PATHS = {
    "Google Chrome": f"{_APP_SUPPORT}/Google/Chrome/Default/History",
    "Arc": f"{_APP_SUPPORT}/Arc/User Data/Default/History",
    "Brave Browser": f"{_APP_SUPPORT}/BraveSoftware/Brave-Browser/Default/History",
    "Microsoft Edge": f"{_APP_SUPPORT}/Microsoft Edge/Default/History",
}
SAFARI_HISTORY_PATH = "~/Library/Safari/History.db"


class SQLiteHistorySource(BrowserHistorySource):
    """
    Base class for history stored in a SQLite file owned by a running browser.

    The browser keeps its database locked, so every read works on a
    temporary copy. Subclasses provide the query; rows must be
    (title, url, visit_time) with visit_time in the source's epoch.
    """

    query = ""

    def __init__(self, browser_name: str, history_path: str, window_hours: float = 24,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the history source.

        Args:
            browser_name: Browser display name (e.g., "Google Chrome")
            history_path: Path to the history database ("~" expanded)
            window_hours: Only visits newer than this many hours are returned
            clock: Time source used for the cutoff
        """
        self.browser_name = browser_name
        self.history_path = os.path.expanduser(history_path)
        self.window_hours = window_hours
        self._clock = clock

    def cutoff(self):
        """Oldest visit time to include, in this source's epoch."""
        return from_unix_seconds(self._clock() - self.window_hours * 3600, self.epoch)

    def recent_entries(self, limit: int) -> List[HistoryEntry]:
        if limit <= 0:
            return []
        if not os.path.exists(self.history_path):
            logger.debug("No %s history at %s", self.browser_name, self.history_path)
            return []

        temp_dir = tempfile.mkdtemp(prefix="window_finder_history_")
        try:
            temp_db = self._copy_database(temp_dir)
            rows = self._query(temp_db, limit)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

        entries = []
        for title, url, visit_time in rows:
            entries.append(HistoryEntry(
                title=title if isinstance(title, str) else "",
                url=url if isinstance(url, str) else "",
                visit_time=visit_time
            ))
        logger.debug("Read %d %s history entries", len(entries), self.browser_name)
        return entries

    def _copy_database(self, temp_dir: str) -> str:
        temp_db = os.path.join(temp_dir, "History")
        try:
            shutil.copy2(self.history_path, temp_db)
            # Pending writes live in the write-ahead log next to the database
            wal_path = self.history_path + "-wal"
            if os.path.exists(wal_path):
                shutil.copy2(wal_path, temp_db + "-wal")
        except PermissionError as e:
            raise SourcePermissionDeniedError(self.name, f"cannot read history file: {e}")
        except OSError as e:
            raise SourceUnavailableError(self.name, f"cannot copy history file: {e}")
        return temp_db

    def _query(self, db_path: str, limit: int) -> List[Tuple]:
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = sqlite3.connect(db_path)
            cursor = conn.execute(self.query, (self.cutoff(), limit))
            return cursor.fetchall()
        except sqlite3.DatabaseError as e:
            raise SourceUnavailableError(self.name, f"history query failed: {e}")
        finally:
            if conn is not None:
                conn.close()


class ChromiumHistorySource(SQLiteHistorySource):
    """History of Chromium-based browsers (Chrome, Arc, Brave, Edge)."""

    epoch = VisitEpoch.CHROMIUM
    query = """
        SELECT title, url, last_visit_time
        FROM urls
        WHERE hidden = 0 AND title != '' AND last_visit_time > ?
        ORDER BY last_visit_time DESC
        LIMIT ?
    """


class SafariHistorySource(SQLiteHistorySource):
    """Safari history (requires Full Disk Access)."""

    epoch = VisitEpoch.COREDATA
    query = """
        SELECT COALESCE(v.title, ''), i.url, MAX(v.visit_time) AS last_visit
        FROM history_visits v
        JOIN history_items i ON v.history_item = i.id
        WHERE v.visit_time > ?
        GROUP BY i.url
        ORDER BY last_visit DESC
        LIMIT ?
    """

    def __init__(self, history_path: str = SAFARI_HISTORY_PATH, window_hours: float = 24,
                 clock: Callable[[], float] = time.time):
        super().__init__("Safari", history_path, window_hours, clock)


def default_history_sources(window_hours: float = 24) -> List[SQLiteHistorySource]:
    """
    Build one history source per supported browser.

    Args:
        window_hours: How far back to look

    Returns:
        Safari plus the Chromium browsers
    """
    sources: List[SQLiteHistorySource] = [SafariHistorySource(window_hours=window_hours)]
    for browser_name, path in CHROMIUM_HISTORY_PATHS.items():
        sources.append(ChromiumHistorySource(browser_name, path, window_hours))
    return sources
