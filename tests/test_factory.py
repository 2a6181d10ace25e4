"""Tests for default finder composition."""

from window_finder.config import Config
from window_finder.factory import build_default_finder
from window_finder.sources import (
    AppleScriptActivator,
    AppleScriptTabSource,
    DirectoryApplicationSource,
    QuartzWindowSource,
)


def test_build_default_finder(monkeypatch, tmp_path):
    monkeypatch.setenv("WINDOW_FINDER_DATA_PATH", str(tmp_path / "data.json"))
    monkeypatch.setenv("WINDOW_FINDER_FAVICONS_ENABLED", "false")
    monkeypatch.setenv("WINDOW_FINDER_HISTORY_LIMIT", "7")

    finder = build_default_finder(Config())
    try:
        aggregator = finder.aggregator
        assert isinstance(aggregator.window_source, QuartzWindowSource)
        assert isinstance(aggregator.application_source, DirectoryApplicationSource)
        assert isinstance(aggregator.tab_source, AppleScriptTabSource)
        assert isinstance(finder.activator, AppleScriptActivator)
        assert aggregator.favicon_cache is None
        assert aggregator.history_limit == 7
        assert len(aggregator.history_sources) == 5
        assert finder.ledger.path == str(tmp_path / "data.json")
    finally:
        finder.aggregator.shutdown()
