"""Custom exception classes for the window finder."""

from typing import List, Optional


class WindowFinderError(Exception):
    """Base exception for window finder errors."""
    pass


class SourceError(WindowFinderError):
    """Exception raised when a source adapter fails."""

    def __init__(self, source: str, message: str = ""):
        """
        Initialize the source error.

        Args:
            source: Identity of the failing source (e.g., "tabs:Safari")
            message: Human-readable failure description
        """
        self.source = source
        self.message = message or self.__class__.__name__
        super().__init__(f"{source}: {self.message}")


class SourceUnavailableError(SourceError):
    """Exception raised when a source could not run at all."""
    pass


class TargetNotRunningError(SourceUnavailableError):
    """Exception raised when the automation target application is not running."""
    pass


class TargetNotScriptableError(SourceUnavailableError):
    """Exception raised when the automation target does not support the request."""
    pass


class SourcePermissionDeniedError(SourceError):
    """Exception raised when the user denied access to a source."""

    remediation = (
        "Grant access in System Settings > Privacy & Security > Automation "
        "(or Full Disk Access for browser history)."
    )


class SourceTimeoutError(SourceError):
    """Exception raised when a source did not answer within its timeout."""

    def __init__(self, source: str, timeout: Optional[float] = None, message: str = ""):
        self.timeout = timeout
        if not message and timeout is not None:
            message = f"timed out after {timeout:g}s"
        super().__init__(source, message)


class DataCorruptionError(WindowFinderError):
    """Exception raised for a single malformed record (bad timestamp, truncated row)."""
    pass


class AggregateFailureError(WindowFinderError):
    """Exception raised when every source failed and no item was produced."""

    def __init__(self, failures: List):
        self.failures = list(failures)
        sources = ", ".join(f.source for f in self.failures)
        super().__init__(f"All sources failed to produce items ({sources})")


class AppleScriptError(WindowFinderError):
    """Exception raised for AppleScript execution errors."""
    pass


class AppleScriptTimeoutError(AppleScriptError):
    """Exception raised when an AppleScript did not finish in time."""
    pass


class FaviconError(WindowFinderError):
    """Exception raised when no favicon could be downloaded for a URL."""
    pass
