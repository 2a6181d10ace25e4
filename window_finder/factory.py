"""Wiring of the default macOS sources into a WindowFinder."""

from typing import Optional

from .cache import FaviconCache
from .catalog import CatalogAggregator
from .config import Config
from .finder import WindowFinder
from .sources import (
    AppleScriptActivator,
    AppleScriptTabSource,
    DirectoryApplicationSource,
    QuartzWindowSource,
    RequestsFaviconSource,
    default_history_sources,
)
from .usage_ledger import UsageLedger
from .utils import AppleScriptExecutor


def build_default_finder(config: Optional[Config] = None) -> WindowFinder:
    """
    Build a WindowFinder backed by the default macOS adapters.

    Args:
        config: Configuration (read from the environment if None)

    Returns:
        Ready-to-use WindowFinder
    """
    config = config or Config()

    executor = AppleScriptExecutor(timeout=config.automation_timeout)
    window_source = QuartzWindowSource()
    tab_source = AppleScriptTabSource(executor, window_source, timeout=config.automation_timeout)

    favicon_cache = None
    if config.favicons_enabled:
        favicon_cache = FaviconCache(RequestsFaviconSource(timeout=config.favicon_timeout))

    aggregator = CatalogAggregator(
        window_source=window_source,
        application_source=DirectoryApplicationSource(),
        tab_source=tab_source,
        history_sources=default_history_sources(config.history_window_hours),
        favicon_cache=favicon_cache,
        ttl=config.cache_ttl,
        history_limit=config.history_limit,
        source_timeout=config.source_timeout,
        automation_timeout=config.automation_timeout,
    )
    ledger = UsageLedger(config.data_path, history_size=config.search_history_size)
    activator = AppleScriptActivator(executor, tab_source)

    return WindowFinder(aggregator, ledger, activator=activator)
