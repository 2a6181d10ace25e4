"""Core façade used by UI layers: catalog, search, usage and activation."""

import logging
from typing import List, Optional

from .catalog import CatalogAggregator
from .models import Catalog, CatalogItem
from .search import SearchEngine
from .sources.base import ItemActivator
from .usage_ledger import UsageLedger

logger = logging.getLogger(__name__)


class WindowFinder:
    """Ties the aggregator, search engine, usage ledger and activator together."""

    def __init__(self, aggregator: CatalogAggregator, ledger: UsageLedger,
                 engine: Optional[SearchEngine] = None,
                 activator: Optional[ItemActivator] = None):
        """
        Initialize the finder.

        Args:
            aggregator: Catalog source
            ledger: Usage and query history
            engine: Ranking engine (default SearchEngine if None)
            activator: Brings items to the front (activation disabled if None)
        """
        self.aggregator = aggregator
        self.ledger = ledger
        self.engine = engine or SearchEngine()
        self.activator = activator

    # Catalog

    def get_catalog(self) -> Catalog:
        """Return the cached catalog, refreshing it when stale."""
        return self.aggregator.get_catalog()

    def refresh(self) -> Catalog:
        return self.aggregator.refresh()

    def invalidate(self) -> None:
        self.aggregator.invalidate()

    def find_item(self, item_id: str) -> Optional[CatalogItem]:
        """
        Look up an item of the current catalog by id.

        Args:
            item_id: Catalog item id (e.g., "window:123:456")

        Returns:
            The item, or None if it is not in the catalog
        """
        return self.get_catalog().find(item_id)

    # Search

    def search(self, query: str) -> List[CatalogItem]:
        """
        Rank the current catalog for a query.

        Args:
            query: Text typed by the user ("" lists everything by usage)

        Returns:
            Ranked items

        Raises:
            AggregateFailureError: If the catalog could not be built at all
        """
        catalog = self.get_catalog()
        return self.engine.search(query, catalog.items, self.ledger)

    # Usage

    def record_selection(self, item: CatalogItem) -> None:
        self.ledger.record_selection(item)

    def record_query(self, text: str) -> None:
        self.ledger.record_query(text)

    def get_search_history(self) -> List[str]:
        return self.ledger.recent_queries()

    def get_search_suggestions(self, prefix: str) -> List[str]:
        return self.ledger.suggest_queries(prefix)

    def clear_usage(self) -> None:
        """Forget all selections and search history."""
        self.ledger.clear()

    # Activation

    def activate(self, item: CatalogItem) -> bool:
        """
        Activate an item and record the selection on success.

        Activation changes the window/tab layout, so the cached catalog is
        invalidated afterwards.

        Args:
            item: Item chosen by the user

        Returns:
            True if the item was activated
        """
        if self.activator is None:
            logger.warning("No activator configured; cannot activate %s", item.id)
            return False

        success = self.activator.activate(item)
        if success:
            self.ledger.record_selection(item)
            self.aggregator.invalidate()
        return success
