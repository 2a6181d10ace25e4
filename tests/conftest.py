"""
Pytest configuration and fixtures.
"""
import pytest

from fakes import (
    FakeApplicationSource,
    FakeClock,
    FakeHistorySource,
    FakeTabSource,
    FakeWindowSource,
)
from window_finder.catalog import CatalogAggregator
from window_finder.models import ApplicationInfo, HistoryEntry, TabInfo, WindowInfo
from window_finder.usage_ledger import UsageLedger


@pytest.fixture
def clock():
    """Controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def ledger(clock):
    """In-memory usage ledger."""
    return UsageLedger(clock=clock)


@pytest.fixture
def sample_windows():
    """A browser window, a titled editor window and Mail."""
    return [
        WindowInfo("Safari", 101, 500, ""),
        WindowInfo("Code", 202, 600, "main.py - project"),
        WindowInfo("Mail", 303, 700, "Inbox"),
    ]


@pytest.fixture
def sample_apps():
    """Installed applications, including one that is running (Mail)."""
    return [
        ApplicationInfo("Mail", "com.apple.mail", "/System/Applications/Mail.app"),
        ApplicationInfo("xcode", "com.apple.dt.Xcode", "/Applications/Xcode.app"),
        ApplicationInfo("Calculator", "com.apple.calculator", "/System/Applications/Calculator.app"),
    ]


@pytest.fixture
def sample_tabs():
    return {
        101: [
            TabInfo(0, "GitHub", "https://github.com/"),
            TabInfo(1, "", "https://example.com/"),
        ]
    }


@pytest.fixture
def sample_history(clock):
    return [
        HistoryEntry("Python docs", "https://docs.python.org/3/", clock.now - 60),
        HistoryEntry("Old news", "https://news.example.com/", clock.now - 3600),
    ]


@pytest.fixture
def make_aggregator(clock, sample_windows, sample_apps, sample_tabs, sample_history):
    """Factory building an aggregator over fake sources; overrides by keyword."""
    created = []

    def _make(**overrides):
        kwargs = dict(
            window_source=FakeWindowSource(sample_windows),
            application_source=FakeApplicationSource(sample_apps),
            tab_source=FakeTabSource(sample_tabs),
            history_sources=[FakeHistorySource("Google Chrome", sample_history)],
            ttl=300,
            history_limit=20,
            source_timeout=2.0,
            automation_timeout=2.0,
            clock=clock,
        )
        kwargs.update(overrides)
        aggregator = CatalogAggregator(**kwargs)
        created.append(aggregator)
        return aggregator

    yield _make

    for aggregator in created:
        aggregator.shutdown()
