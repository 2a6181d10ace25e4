"""Source adapter interfaces and the default macOS adapters."""

from .activation import AppleScriptActivator
from .app_source import DirectoryApplicationSource
from .base import (
    BrowserHistorySource,
    BrowserTabAutomationSource,
    FaviconSource,
    InstalledApplicationSource,
    ItemActivator,
    RunningWindowSource,
)
from .favicon_source import RequestsFaviconSource
from .history_source import ChromiumHistorySource, SafariHistorySource, default_history_sources
from .tab_source import TAB_CAPABLE_BROWSERS, AppleScriptTabSource
from .window_source import QuartzWindowSource

__all__ = [
    "AppleScriptActivator",
    "AppleScriptTabSource",
    "BrowserHistorySource",
    "BrowserTabAutomationSource",
    "ChromiumHistorySource",
    "DirectoryApplicationSource",
    "FaviconSource",
    "InstalledApplicationSource",
    "ItemActivator",
    "QuartzWindowSource",
    "RequestsFaviconSource",
    "RunningWindowSource",
    "SafariHistorySource",
    "TAB_CAPABLE_BROWSERS",
    "default_history_sources",
]
