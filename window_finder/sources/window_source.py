"""Running-window enumeration using the macOS Quartz window list."""

import logging
from typing import Any, Dict, List

from ..exceptions import SourceUnavailableError
from ..models import WindowInfo
from .base import RunningWindowSource

logger = logging.getLogger(__name__)

# Only normal application windows live on layer 0 (menus, docks and overlays do not)
NORMAL_WINDOW_LAYER = 0


def parse_window_list(window_list: List[Dict[str, Any]]) -> List[WindowInfo]:
    """
    Convert CGWindowListCopyWindowInfo dictionaries into WindowInfo records.

    Windows missing an owner, number or pid, or on a non-normal layer, are skipped.

    Args:
        window_list: Raw window dictionaries

    Returns:
        Parsed windows in input order
    """
    windows = []
    for window in window_list:
        if window.get("kCGWindowLayer", 0) != NORMAL_WINDOW_LAYER:
            continue

        owner = window.get("kCGWindowOwnerName")
        number = window.get("kCGWindowNumber")
        pid = window.get("kCGWindowOwnerPID")
        if not owner or number is None or pid is None:
            continue

        try:
            windows.append(WindowInfo(
                owner_name=str(owner),
                window_handle=int(number),
                process_id=int(pid),
                window_title=str(window.get("kCGWindowName") or "")
            ))
        except (TypeError, ValueError):
            logger.debug("Skipping malformed window entry from %s", owner)
            continue
    return windows


class QuartzWindowSource(RunningWindowSource):
    """Lists on-screen windows via CGWindowListCopyWindowInfo (requires pyobjc Quartz)."""

    def list_windows(self) -> List[WindowInfo]:
        try:
            from Quartz import (
                CGWindowListCopyWindowInfo,
                kCGNullWindowID,
                kCGWindowListExcludeDesktopElements,
                kCGWindowListOptionOnScreenOnly,
            )
        except ImportError as e:
            raise SourceUnavailableError(self.name, f"Quartz is not available: {e}")

        options = kCGWindowListOptionOnScreenOnly | kCGWindowListExcludeDesktopElements
        window_list = CGWindowListCopyWindowInfo(options, kCGNullWindowID)
        if window_list is None:
            raise SourceUnavailableError(self.name, "window list is unavailable")

        return parse_window_list([dict(window) for window in window_list])
