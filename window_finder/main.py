"""Main entry point for the window finder service."""

import logging
import sys
import time

from .api_server import start_api_server
from .config import Config
from .exceptions import AggregateFailureError, SourcePermissionDeniedError
from .factory import build_default_finder
from .refresher import CatalogRefresher

logger = logging.getLogger(__name__)


def print_help(port: int):
    """Print welcome message and API summary."""
    print("=" * 60)
    print("Window Finder")
    print("=" * 60)
    print(f"\nAPI listening on http://127.0.0.1:{port}")
    print("  GET  /search?q=<query>     ranked windows, tabs, apps and history")
    print("  GET  /suggest?prefix=<p>   search history suggestions")
    print("  GET  /history              recent queries")
    print("  POST /select {\"id\"}        record a selection")
    print("  POST /activate {\"id\"}      bring an item to the front")
    print("  POST /refresh | /invalidate")
    print("\nPress Ctrl+C to stop.")
    print("=" * 60)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    """Run the window finder API until interrupted."""
    configure_logging()

    try:
        config = Config()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)
    logging.getLogger().setLevel(config.log_level)

    finder = build_default_finder(config)

    # Warm the catalog so the first search is fast
    try:
        catalog = finder.refresh()
        for source in catalog.newly_denied:
            logger.warning("%s: %s", source, SourcePermissionDeniedError.remediation)
    except AggregateFailureError as e:
        logger.warning("Initial catalog refresh failed: %s", e)

    refresher = None
    if config.refresh_interval > 0:
        refresher = CatalogRefresher(finder.aggregator, interval=config.refresh_interval)
        refresher.start()

    print_help(config.api_port)
    start_api_server(finder, port=config.api_port)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        if refresher:
            refresher.stop()
        finder.aggregator.shutdown()
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
