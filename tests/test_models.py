"""Tests for catalog item models."""

import time

import pytest

from window_finder.exceptions import (
    SourcePermissionDeniedError,
    SourceTimeoutError,
    SourceUnavailableError,
    TargetNotRunningError,
    TargetNotScriptableError,
)
from window_finder.models import (
    NO_WINDOW,
    ApplicationItem,
    Catalog,
    FailureKind,
    HistoryTabItem,
    ItemKind,
    SourceFailure,
    TabItem,
    WindowItem,
)


class TestApplicationItem:
    def test_defaults(self):
        app = ApplicationItem(title="Mail", bundle_id="com.apple.mail")

        assert app.kind is ItemKind.APPLICATION
        assert app.subtitle == "Application"
        assert app.owner_name == "Mail"
        assert app.window_handle == NO_WINDOW
        assert app.process_id == 0
        assert app.tab_index is None
        assert app.url is None
        assert app.id == "app:com.apple.mail"

    def test_id_falls_back_to_path_then_name(self):
        assert ApplicationItem(title="X", path="/Applications/X.app").id == "app:/Applications/X.app"
        assert ApplicationItem(title="X").id == "app:X"

    def test_empty_title_rejected(self):
        with pytest.raises(ValueError):
            ApplicationItem(title="  ")


class TestWindowAndTab:
    def test_window_ids_and_invariants(self):
        window = WindowItem(title="Code", subtitle="main.py", owner_name="Code", handle=7, process_id=99)

        assert window.id == "window:99:7"
        assert window.window_handle == 7

    @pytest.mark.parametrize("handle, pid", [(-1, 5), (1, 0), (1, -3)])
    def test_window_rejects_bad_handle_or_pid(self, handle, pid):
        with pytest.raises(ValueError):
            WindowItem(title="Code", subtitle="", owner_name="Code", handle=handle, process_id=pid)

    def test_window_requires_owner(self):
        with pytest.raises(ValueError):
            WindowItem(title="Code", subtitle="", owner_name="", handle=1, process_id=1)

    def test_tab(self):
        tab = TabItem(title="GitHub", subtitle="Safari - https://github.com/", owner_name="Safari",
                      handle=3, process_id=4, index=0, tab_url="https://github.com/")

        assert tab.id == "tab:4:3:0"
        assert tab.tab_index == 0
        assert tab.url == "https://github.com/"

    def test_tab_rejects_negative_index(self):
        with pytest.raises(ValueError):
            TabItem(title="t", subtitle="", owner_name="Safari", handle=3, process_id=4, index=-1)


class TestHistoryTabItem:
    def test_fields(self):
        item = HistoryTabItem(title="Docs", subtitle="Safari • https://a/", page_url="https://a/",
                              browser_name="Safari", last_access_time=1000.0)

        assert item.id == "history:Safari:https://a/"
        assert item.owner_name == ""
        assert item.url == "https://a/"
        assert item.window_handle == NO_WINDOW
        assert item.last_access_time == 1000.0

    def test_requires_url(self):
        with pytest.raises(ValueError):
            HistoryTabItem(title="Docs", subtitle="", page_url="", browser_name="Safari")

    def test_future_access_time_is_clamped(self):
        item = HistoryTabItem(title="Docs", subtitle="", page_url="https://a/",
                              browser_name="Safari", last_access_time=time.time() + 10_000)

        assert item.last_access_time <= time.time()


class TestEquality:
    def test_equal_by_kind_and_id(self):
        one = WindowItem(title="Code", subtitle="a", owner_name="Code", handle=1, process_id=2)
        two = WindowItem(title="Code", subtitle="b", owner_name="Code", handle=1, process_id=2)

        assert one == two
        assert len({one, two}) == 1

    def test_items_are_frozen(self):
        app = ApplicationItem(title="Mail")
        with pytest.raises(AttributeError):
            app.title = "Other"


class TestSourceFailure:
    @pytest.mark.parametrize("error, kind", [
        (SourcePermissionDeniedError("s"), FailureKind.PERMISSION_DENIED),
        (SourceTimeoutError("s", 2.5), FailureKind.TIMEOUT),
        (TargetNotRunningError("s"), FailureKind.NOT_RUNNING),
        (TargetNotScriptableError("s"), FailureKind.NOT_SCRIPTABLE),
        (SourceUnavailableError("s"), FailureKind.UNAVAILABLE),
        (RuntimeError("boom"), FailureKind.UNAVAILABLE),
    ])
    def test_classification(self, error, kind):
        assert SourceFailure.from_error("s", error).kind is kind

    def test_timeout_message(self):
        failure = SourceFailure.from_error("tabs:Safari", SourceTimeoutError("tabs:Safari", 2.5))
        assert failure.message == "timed out after 2.5s"


class TestCatalog:
    def test_find_and_len(self):
        app = ApplicationItem(title="Mail")
        catalog = Catalog(items=(app,), fetched_at=1.0)

        assert catalog.find("app:Mail") is app
        assert catalog.find("app:Nope") is None
        assert len(catalog) == 1
        assert list(catalog) == [app]
        assert not catalog.partial

    def test_permission_denied(self):
        catalog = Catalog(failures=(
            SourceFailure("history:Safari", FailureKind.PERMISSION_DENIED),
            SourceFailure("windows", FailureKind.TIMEOUT),
        ))

        assert catalog.partial
        assert catalog.permission_denied == ("history:Safari",)
