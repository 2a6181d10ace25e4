"""Bring catalog items to the front using AppleScript."""

import logging
from typing import Optional

from ..exceptions import AppleScriptTimeoutError
from ..models import ApplicationItem, CatalogItem, HistoryTabItem, TabItem, WindowItem
from ..utils import AppleScriptExecutor, escape_applescript_string
from .base import ItemActivator
from .tab_source import SAFARI, AppleScriptTabSource

logger = logging.getLogger(__name__)


class AppleScriptActivator(ItemActivator):
    """Launches apps, focuses windows, selects tabs and opens history URLs."""

    def __init__(self, executor: Optional[AppleScriptExecutor] = None,
                 tab_source: Optional[AppleScriptTabSource] = None):
        """
        Initialize the activator.

        Args:
            executor: AppleScript executor (created if None)
            tab_source: Used to resolve the AppleScript window index of tabs
        """
        self.executor = executor or AppleScriptExecutor()
        self.tab_source = tab_source

    def activate(self, item: CatalogItem) -> bool:
        if isinstance(item, ApplicationItem):
            script = self._application_script(item)
        elif isinstance(item, WindowItem):
            script = self._window_script(item)
        elif isinstance(item, TabItem):
            script = self._tab_script(item)
        elif isinstance(item, HistoryTabItem):
            script = self._history_script(item)
        else:
            raise TypeError(f"Unknown catalog item kind: {type(item).__name__}")

        try:
            success, _, stderr = self.executor.execute(script)
        except AppleScriptTimeoutError as e:
            logger.warning("Activating %s timed out: %s", item.id, e)
            return False

        if not success:
            logger.error("Error activating %s: %s", item.id, stderr)
        return success

    def _application_script(self, item: ApplicationItem) -> str:
        if item.path:
            return f'do shell script "open " & quoted form of "{escape_applescript_string(item.path)}"'
        if item.bundle_id:
            return f'tell application id "{escape_applescript_string(item.bundle_id)}" to activate'
        return f'tell application "{escape_applescript_string(item.title)}" to activate'

    def _window_script(self, item: WindowItem) -> str:
        title = escape_applescript_string(item.title)
        return f'''
        tell application "System Events"
            set targetProcess to first process whose unix id is {item.process_id}
            set frontmost of targetProcess to true
            try
                perform action "AXRaise" of (first window of targetProcess whose name is "{title}")
            end try
        end tell
        return true
        '''

    def _tab_script(self, item: TabItem) -> str:
        app_name = escape_applescript_string(item.owner_name)
        window_index = 1
        if self.tab_source is not None:
            window_index = self.tab_source.window_index(item.owner_name, item.handle)
        tab_number = item.index + 1

        if item.owner_name == SAFARI:
            select = f"set current tab of window {window_index} to tab {tab_number} of window {window_index}"
        else:
            select = f"set active tab index of window {window_index} to {tab_number}"
        return f'''
        tell application "{app_name}"
            activate
            {select}
            set index of window {window_index} to 1
        end tell
        return true
        '''

    def _history_script(self, item: HistoryTabItem) -> str:
        url = escape_applescript_string(item.page_url)
        if item.browser_name:
            return f'''
            tell application "{escape_applescript_string(item.browser_name)}"
                activate
                open location "{url}"
            end tell
            '''
        return f'open location "{url}"'
