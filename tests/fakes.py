"""In-memory source adapters and helpers shared by the tests."""

import threading
from typing import Dict, List, Optional

from window_finder.exceptions import FaviconError
from window_finder.models import ApplicationInfo, HistoryEntry, TabInfo, WindowInfo
from window_finder.sources.base import (
    BrowserHistorySource,
    BrowserTabAutomationSource,
    FaviconSource,
    InstalledApplicationSource,
    ItemActivator,
    RunningWindowSource,
)
from window_finder.timestamps import VisitEpoch


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWindowSource(RunningWindowSource):
    def __init__(self, windows: Optional[List[WindowInfo]] = None, error: Optional[Exception] = None):
        self.windows = list(windows or [])
        self.error = error
        self.calls = 0

    def list_windows(self) -> List[WindowInfo]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.windows)


class FakeApplicationSource(InstalledApplicationSource):
    def __init__(self, apps: Optional[List[ApplicationInfo]] = None, error: Optional[Exception] = None):
        self.apps = list(apps or [])
        self.error = error

    def list_applications(self) -> List[ApplicationInfo]:
        if self.error:
            raise self.error
        return list(self.apps)


class FakeTabSource(BrowserTabAutomationSource):
    """Tabs keyed by window handle; handles in `blocking` hang until released."""

    def __init__(self, tabs: Optional[Dict[int, List[TabInfo]]] = None,
                 errors: Optional[Dict[int, Exception]] = None,
                 blocking: Optional[List[int]] = None):
        self.tabs = tabs or {}
        self.errors = errors or {}
        self.blocking = set(blocking or [])
        self.release = threading.Event()
        self.calls: List[int] = []

    def list_tabs(self, owner_name: str, window_handle: int) -> List[TabInfo]:
        self.calls.append(window_handle)
        if window_handle in self.blocking:
            self.release.wait(5.0)
        if window_handle in self.errors:
            raise self.errors[window_handle]
        return list(self.tabs.get(window_handle, []))


class FakeHistorySource(BrowserHistorySource):
    def __init__(self, browser_name: str, entries: Optional[List[HistoryEntry]] = None,
                 epoch: VisitEpoch = VisitEpoch.UNIX_SECONDS, error: Optional[Exception] = None):
        self.browser_name = browser_name
        self.entries = list(entries or [])
        self.epoch = epoch
        self.error = error
        self.limits: List[int] = []

    def recent_entries(self, limit: int) -> List[HistoryEntry]:
        self.limits.append(limit)
        if self.error:
            raise self.error
        return self.entries[:limit]


class FakeFaviconSource(FaviconSource):
    """Returns b"icon:<url>"; can be gated to keep fetches in flight."""

    def __init__(self, fail: bool = False, gated: bool = False):
        self.fail = fail
        self.gate = threading.Event()
        if not gated:
            self.gate.set()
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> bytes:
        with self._lock:
            self.calls.append(url)
        self.gate.wait(5.0)
        if self.fail:
            raise FaviconError(f"no icon for {url}")
        return f"icon:{url}".encode()


class FakeActivator(ItemActivator):
    def __init__(self, result: bool = True):
        self.result = result
        self.activated = []

    def activate(self, item) -> bool:
        self.activated.append(item)
        return self.result


class FakeExecutor:
    """Stands in for AppleScriptExecutor; records scripts and replays a canned result."""

    def __init__(self, success: bool = True, stdout: Optional[str] = None,
                 stderr: Optional[str] = None, error: Optional[Exception] = None):
        self.success = success
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.scripts: List[str] = []

    def execute(self, script: str, timeout: Optional[float] = None):
        self.scripts.append(script)
        if self.error:
            raise self.error
        return self.success, self.stdout, self.stderr
