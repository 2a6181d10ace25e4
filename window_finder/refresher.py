"""Background catalog refresh."""

import logging
import threading
from typing import Callable, Optional

from .catalog import CatalogAggregator
from .models import Catalog

logger = logging.getLogger(__name__)

CatalogChangeCallback = Callable[[Optional[Catalog], Catalog], None]


class CatalogRefresher:
    """Periodically refreshes the catalog in a background thread."""

    def __init__(self, aggregator: CatalogAggregator, interval: float = 30.0,
                 on_change: Optional[CatalogChangeCallback] = None):
        """
        Initialize the background refresher.

        Args:
            aggregator: Aggregator to refresh
            interval: Seconds between refreshes
            on_change: Optional callback(old, new) when the set of item ids changes
        """
        if interval <= 0:
            raise ValueError(f"Refresh interval must be positive, got {interval}")
        self.aggregator = aggregator
        self.interval = interval
        self.on_change = on_change
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self.current_catalog: Optional[Catalog] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    def start(self):
        """Start the background thread."""
        if self.running:
            return

        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._refresh_loop, name="catalog-refresher", daemon=True)
        self.thread.start()

    def stop(self):
        """Stop the background thread gracefully."""
        self.running = False
        self._stop_event.set()
        if self.thread:
            self.thread.join(timeout=1.0)

    def _refresh_loop(self):
        while self.running:
            try:
                self.refresh_once()
            except Exception as e:
                logger.error("Error in background catalog refresh: %s", e)
            self._stop_event.wait(self.interval)

    def refresh_once(self) -> Catalog:
        """
        Refresh now and notify on_change if the catalog's items changed.

        Returns:
            The refreshed catalog

        Raises:
            AggregateFailureError: If every source failed
        """
        new_catalog = self.aggregator.refresh()

        with self._lock:
            old_catalog = self.current_catalog
            self.current_catalog = new_catalog

        if self._catalog_changed(old_catalog, new_catalog) and self.on_change:
            self.on_change(old_catalog, new_catalog)
        return new_catalog

    @staticmethod
    def _catalog_changed(old: Optional[Catalog], new: Catalog) -> bool:
        if old is None:
            return True
        return set(old.ids()) != set(new.ids())
