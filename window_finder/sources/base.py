"""Interfaces for the source adapters the catalog is built from."""

from abc import ABC, abstractmethod
from typing import List

from ..models import ApplicationInfo, CatalogItem, HistoryEntry, TabInfo, WindowInfo
from ..timestamps import VisitEpoch


class RunningWindowSource(ABC):
    """Enumerates visible top-level windows system-wide."""

    name = "windows"

    @abstractmethod
    def list_windows(self) -> List[WindowInfo]:
        """
        List visible top-level windows.

        Returns:
            Windows in system order (may be empty)

        Raises:
            SourceError: If the windows cannot be enumerated
        """
        pass


class InstalledApplicationSource(ABC):
    """Enumerates launchable applications."""

    name = "applications"

    @abstractmethod
    def list_applications(self) -> List[ApplicationInfo]:
        """
        List installed applications.

        Returns:
            Applications in any order

        Raises:
            SourceError: If the applications cannot be enumerated
        """
        pass


class BrowserTabAutomationSource(ABC):
    """Lists the open tabs of one browser window through automation."""

    name = "tabs"

    @abstractmethod
    def list_tabs(self, owner_name: str, window_handle: int) -> List[TabInfo]:
        """
        List the tabs of a browser window.

        Args:
            owner_name: Browser application name (e.g., "Safari")
            window_handle: Handle of the window as reported by the window source

        Returns:
            Tabs in tab-strip order (0-based indices)

        Raises:
            SourcePermissionDeniedError: The user denied automation access
            TargetNotRunningError: The browser is not running
            TargetNotScriptableError: The browser does not support the request
            SourceTimeoutError: The automation call did not finish in time
        """
        pass


class BrowserHistorySource(ABC):
    """Reads recently visited pages from one browser."""

    browser_name = ""
    epoch = VisitEpoch.UNIX_SECONDS

    @property
    def name(self) -> str:
        return f"history:{self.browser_name}"

    @abstractmethod
    def recent_entries(self, limit: int) -> List[HistoryEntry]:
        """
        Read the most recent visits.

        Args:
            limit: Maximum number of entries

        Returns:
            Entries with visit times in this source's native epoch

        Raises:
            SourceError: If the history cannot be read
        """
        pass


class FaviconSource(ABC):
    """Downloads favicons (network bound)."""

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """
        Download the favicon for a page.

        Args:
            url: Page URL

        Returns:
            Image bytes

        Raises:
            FaviconError: If no favicon could be downloaded
        """
        pass


class ItemActivator(ABC):
    """Brings a catalog item to the front (launch, focus, select tab, open URL)."""

    @abstractmethod
    def activate(self, item: CatalogItem) -> bool:
        """
        Activate an item.

        Args:
            item: Item chosen by the user

        Returns:
            True if activation succeeded, False otherwise
        """
        pass
