"""Browser tab enumeration using AppleScript automation."""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from ..cache import TTLCache
from ..exceptions import (
    AppleScriptTimeoutError,
    SourcePermissionDeniedError,
    SourceTimeoutError,
    SourceUnavailableError,
    TargetNotRunningError,
    TargetNotScriptableError,
)
from ..models import TabInfo
from ..utils import AppleScriptExecutor, escape_applescript_string, parse_error_code
from ..utils.applescript import (
    ERR_APP_NOT_FOUND,
    ERR_APP_NOT_RUNNING,
    ERR_CANT_GET_OBJECT,
    ERR_NOT_UNDERSTOOD,
    ERR_PERMISSION_DENIED,
)
from .base import BrowserTabAutomationSource, RunningWindowSource

logger = logging.getLogger(__name__)

SAFARI = "Safari"
CHROMIUM_BROWSERS = ("Google Chrome", "Brave Browser", "Microsoft Edge")

# Browsers whose windows may expand into tabs
TAB_CAPABLE_BROWSERS = frozenset([
    "Safari", "Google Chrome", "Firefox", "Arc", "Brave Browser", "Microsoft Edge"
])

_DELIMITER = "|||"


def build_tab_script(app_name: str, window_index: int) -> str:
    """
    Build the AppleScript listing the tabs of one browser window.

    Safari names the tab title property "name", Chromium browsers "title".
    Output is one tab per line: "index|||title|||url".

    Args:
        app_name: Browser application name
        window_index: 1-based AppleScript window index

    Returns:
        AppleScript source
    """
    title_property = "name" if app_name == SAFARI else "title"
    return f'''
    tell application "{escape_applescript_string(app_name)}"
        set tabData to ""
        if (count of windows) >= {window_index} then
            set w to window {window_index}
            set tabIndex to 1
            repeat with t in tabs of w
                set tabTitle to {title_property} of t
                if tabTitle is missing value then set tabTitle to ""
                set tabURL to URL of t
                if tabURL is missing value then set tabURL to ""
                if tabData is not "" then
                    set tabData to tabData & linefeed
                end if
                set tabData to tabData & (tabIndex as text) & "{_DELIMITER}" & tabTitle & "{_DELIMITER}" & tabURL
                set tabIndex to tabIndex + 1
            end repeat
        end if
        return tabData
    end tell
    '''


def parse_tab_output(output: Optional[str]) -> List[TabInfo]:
    """
    Parse "index|||title|||url" lines into TabInfo records.

    Malformed lines are skipped.

    Args:
        output: Raw osascript output

    Returns:
        Tabs with 0-based indices
    """
    tabs = []
    if not output:
        return tabs

    for line_num, line in enumerate(output.strip().split("\n"), 1):
        line = line.strip()
        if not line:
            continue

        parts = line.split(_DELIMITER)
        if len(parts) != 3:
            logger.debug("Skipping malformed tab line %d: %r", line_num, line)
            continue

        try:
            index = int(parts[0]) - 1
        except ValueError:
            logger.debug("Skipping tab line %d with bad index: %r", line_num, parts[0])
            continue
        if index < 0:
            continue

        tabs.append(TabInfo(tab_index=index, title=parts[1].strip(), url=parts[2].strip()))
    return tabs


class AppleScriptTabSource(BrowserTabAutomationSource):
    """Lists Safari and Chromium-browser tabs through osascript."""

    def __init__(self, executor: Optional[AppleScriptExecutor] = None,
                 window_source: Optional[RunningWindowSource] = None,
                 timeout: float = 10.0,
                 rank_ttl: float = 2.0, clock: Callable[[], float] = time.time):
        """
        Initialize the tab source.

        Args:
            executor: AppleScript executor (created if None)
            window_source: Used to map window handles to AppleScript window indices
            timeout: Seconds allowed per automation call
            rank_ttl: Seconds one window enumeration serves index lookups
            clock: Time source for rank_ttl
        """
        self.executor = executor or AppleScriptExecutor(timeout=timeout)
        self.window_source = window_source
        self.timeout = timeout
        self.rank_ttl = rank_ttl
        self._ranks = TTLCache(clock=clock)
        self._ranks_lock = threading.Lock()

    def window_index(self, owner_name: str, window_handle: int) -> int:
        """
        Resolve the 1-based AppleScript index of a window.

        Windows of the owner are ranked by ascending handle, which matches
        the order AppleScript enumerates them in.

        Args:
            owner_name: Browser application name
            window_handle: Window handle from the window source

        Returns:
            1-based window index (1 when it cannot be resolved)
        """
        if self.window_source is None:
            return 1
        try:
            handles = self._handles_by_owner().get(owner_name, [])
            if window_handle not in handles:
                # Window opened since the last enumeration
                handles = self._handles_by_owner(fresh=True).get(owner_name, [])
        except Exception as e:
            logger.debug("Could not resolve window index for %s: %s", owner_name, e)
            return 1
        if window_handle in handles:
            return handles.index(window_handle) + 1
        return 1

    def _handles_by_owner(self, fresh: bool = False) -> Dict[str, List[int]]:
        """Sorted window handles per owner, enumerated at most once per rank_ttl."""
        with self._ranks_lock:
            ranks = None if fresh else self._ranks.get("windows", "handles")
            if ranks is None:
                ranks = {}
                for w in self.window_source.list_windows():
                    ranks.setdefault(w.owner_name, []).append(w.window_handle)
                for handles in ranks.values():
                    handles.sort()
                self._ranks.set("windows", "handles", ranks, ttl=self.rank_ttl)
            return ranks

    def list_tabs(self, owner_name: str, window_handle: int) -> List[TabInfo]:
        source = f"tabs:{owner_name}"
        if owner_name != SAFARI and owner_name not in CHROMIUM_BROWSERS:
            # Firefox and Arc expose no tab automation; their windows stay plain
            logger.debug("App %s not supported for tab retrieval", owner_name)
            return []

        index = self.window_index(owner_name, window_handle)
        script = build_tab_script(owner_name, index)

        try:
            success, stdout, stderr = self.executor.execute(script, timeout=self.timeout)
        except AppleScriptTimeoutError:
            raise SourceTimeoutError(source, self.timeout)

        if not success:
            raise self._classify_error(source, stderr)

        tabs = parse_tab_output(stdout)
        logger.debug("Got %d tabs from %s window %d", len(tabs), owner_name, index)
        return tabs

    @staticmethod
    def _classify_error(source: str, stderr: Optional[str]) -> Exception:
        code = parse_error_code(stderr)
        message = stderr or "AppleScript failed"
        if code == ERR_PERMISSION_DENIED:
            return SourcePermissionDeniedError(source, message)
        if code in (ERR_APP_NOT_RUNNING, ERR_APP_NOT_FOUND):
            return TargetNotRunningError(source, message)
        if code in (ERR_CANT_GET_OBJECT, ERR_NOT_UNDERSTOOD):
            return TargetNotScriptableError(source, message)
        return SourceUnavailableError(source, message)
