"""Installed application discovery from common macOS locations."""

import logging
import os
import plistlib
from typing import List, Optional, Sequence

from ..models import ApplicationInfo
from .base import InstalledApplicationSource

logger = logging.getLogger(__name__)

DEFAULT_APPLICATION_DIRS = (
    "/Applications",
    "/Applications/Utilities",
    "/System/Applications",
    "/System/Applications/Utilities",
    "~/Applications",
)


def read_bundle_info(app_path: str) -> Optional[ApplicationInfo]:
    """
    Read an application bundle's name, identifier and icon from Info.plist.

    Falls back to the bundle's file name when Info.plist is missing or
    unreadable.

    Args:
        app_path: Path to a ".app" bundle

    Returns:
        ApplicationInfo, or None if no usable name could be determined
    """
    fallback_name = os.path.basename(app_path.rstrip("/"))[:-4]
    info = {}
    plist_path = os.path.join(app_path, "Contents", "Info.plist")
    try:
        with open(plist_path, "rb") as f:
            info = plistlib.load(f)
    except FileNotFoundError:
        pass
    except (plistlib.InvalidFileException, OSError, ValueError) as e:
        logger.debug("Unreadable Info.plist in %s: %s", app_path, e)

    if not isinstance(info, dict):
        info = {}

    name = info.get("CFBundleName") or info.get("CFBundleDisplayName") or fallback_name
    if not isinstance(name, str) or not name.strip():
        return None

    icon = None
    icon_file = info.get("CFBundleIconFile")
    if isinstance(icon_file, str) and icon_file:
        if not icon_file.endswith(".icns"):
            icon_file += ".icns"
        icon = os.path.join(app_path, "Contents", "Resources", icon_file)

    bundle_id = info.get("CFBundleIdentifier")
    return ApplicationInfo(
        name=name.strip(),
        bundle_id=bundle_id if isinstance(bundle_id, str) else None,
        path=app_path,
        icon=icon
    )


class DirectoryApplicationSource(InstalledApplicationSource):
    """Scans application directories for ".app" bundles."""

    def __init__(self, directories: Sequence[str] = DEFAULT_APPLICATION_DIRS):
        """
        Initialize the application source.

        Args:
            directories: Directories to scan (non-recursive, "~" expanded)
        """
        self.directories = [os.path.expanduser(d) for d in directories]

    def list_applications(self) -> List[ApplicationInfo]:
        apps = []
        seen_paths = set()
        for base in self.directories:
            if not os.path.isdir(base):
                continue
            try:
                entries = sorted(os.listdir(base))
            except OSError as e:
                # Skip directories that can't be read
                logger.debug("Cannot list %s: %s", base, e)
                continue

            for entry in entries:
                if not entry.endswith(".app") or entry.startswith("."):
                    continue
                app_path = os.path.join(base, entry)
                if app_path in seen_paths:
                    continue
                seen_paths.add(app_path)
                app = read_bundle_info(app_path)
                if app is not None:
                    apps.append(app)
        return apps
