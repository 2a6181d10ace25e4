"""Ranking of catalog items for a query."""

from typing import Iterable, List

from .fuzzy_matcher import score
from .models import CatalogItem
from .usage_ledger import UsageLedger

# Usage preference contributes this fraction relative to text relevance
USAGE_WEIGHT = 0.3


class SearchEngine:
    """Ranks in-memory catalog items; performs no I/O."""

    def __init__(self, usage_weight: float = USAGE_WEIGHT):
        """
        Initialize the search engine.

        Args:
            usage_weight: Multiplier applied to the usage preference score
        """
        self.usage_weight = usage_weight

    def search(
        self,
        query: str,
        items: Iterable[CatalogItem],
        ledger: UsageLedger
    ) -> List[CatalogItem]:
        """
        Rank items for a query.

        An empty query returns every item ordered by usage preference.
        Otherwise items are ordered by text score plus weighted preference,
        and items with a total of zero or less are dropped. Ties keep the
        input (catalog merge) order.

        Args:
            query: Text typed by the user
            items: Catalog items in merge order
            ledger: Source of usage preference scores

        Returns:
            Ranked list of items
        """
        items = list(items)
        if not query:
            preferences = [ledger.preference_score(item) for item in items]
            order = sorted(range(len(items)), key=lambda i: -preferences[i])
            return [items[i] for i in order]

        scored = []
        for item in items:
            total = score(query, item) + ledger.preference_score(item) * self.usage_weight
            if total > 0:
                scored.append((total, item))

        # Stable sort: equal scores keep catalog order
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [item for _, item in scored]


def search(query: str, items: Iterable[CatalogItem], ledger: UsageLedger) -> List[CatalogItem]:
    """Rank items with a default SearchEngine."""
    return SearchEngine().search(query, items, ledger)
