"""Tests for AppleScript item activation."""

import pytest

from fakes import FakeExecutor, FakeWindowSource
from window_finder.exceptions import AppleScriptTimeoutError
from window_finder.models import ApplicationItem, HistoryTabItem, TabItem, WindowInfo, WindowItem
from window_finder.sources.activation import AppleScriptActivator
from window_finder.sources.tab_source import AppleScriptTabSource


class TestAppleScriptActivator:
    def test_application_opens_path(self):
        executor = FakeExecutor()
        activator = AppleScriptActivator(executor)

        assert activator.activate(ApplicationItem(title="Mail", path="/System/Applications/Mail.app"))
        assert '"/System/Applications/Mail.app"' in executor.scripts[0]

    def test_application_by_bundle_id(self):
        executor = FakeExecutor()
        AppleScriptActivator(executor).activate(ApplicationItem(title="Mail", bundle_id="com.apple.mail"))

        assert 'tell application id "com.apple.mail" to activate' in executor.scripts[0]

    def test_window_brings_process_to_front(self):
        executor = FakeExecutor()
        window = WindowItem(title="Code", subtitle="main.py", owner_name="Code", handle=3, process_id=77)

        AppleScriptActivator(executor).activate(window)

        assert "unix id is 77" in executor.scripts[0]

    def test_safari_tab_selection(self):
        executor = FakeExecutor()
        windows = FakeWindowSource([WindowInfo("Safari", 5, 1), WindowInfo("Safari", 9, 1)])
        tab_source = AppleScriptTabSource(FakeExecutor(), windows)
        tab = TabItem(title="GitHub", subtitle="", owner_name="Safari", handle=9, process_id=1, index=2)

        AppleScriptActivator(executor, tab_source).activate(tab)

        assert "set current tab of window 2 to tab 3 of window 2" in executor.scripts[0]

    def test_chromium_tab_selection(self):
        executor = FakeExecutor()
        tab = TabItem(title="Docs", subtitle="", owner_name="Google Chrome", handle=9, process_id=1, index=0)

        AppleScriptActivator(executor).activate(tab)

        assert "set active tab index of window 1 to 1" in executor.scripts[0]

    def test_history_opens_url_in_browser(self):
        executor = FakeExecutor()
        item = HistoryTabItem(title="Docs", subtitle="", page_url="https://docs.python.org/", browser_name="Arc")

        AppleScriptActivator(executor).activate(item)

        assert 'tell application "Arc"' in executor.scripts[0]
        assert 'open location "https://docs.python.org/"' in executor.scripts[0]

    def test_failure_and_timeout_return_false(self):
        app = ApplicationItem(title="Mail")

        assert not AppleScriptActivator(FakeExecutor(success=False, stderr="boom")).activate(app)
        assert not AppleScriptActivator(FakeExecutor(error=AppleScriptTimeoutError("slow"))).activate(app)

    def test_unknown_kind_raises(self):
        with pytest.raises(TypeError):
            AppleScriptActivator(FakeExecutor()).activate(object())
