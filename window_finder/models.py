"""Data models for catalog items and raw source records."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional, Tuple, Union

from .exceptions import (
    SourceError,
    SourcePermissionDeniedError,
    SourceTimeoutError,
    TargetNotRunningError,
    TargetNotScriptableError,
)
from .timestamps import clamp_to_now

# Window handle sentinel for kinds that are not bound to a window
NO_WINDOW = -1

UNTITLED_TAB = "Untitled Tab"


class ItemKind(Enum):
    """Closed set of catalog item kinds."""
    APPLICATION = "application"
    WINDOW = "window"
    TAB = "tab"
    HISTORY_TAB = "history_tab"


def _clamp_creation_time(value: Optional[float]) -> float:
    now = time.time()
    if value is None:
        return now
    return clamp_to_now(float(value), now)


class CatalogItem:
    """
    Base class for the catalog item variants.

    Concrete items are frozen dataclasses: ApplicationItem, WindowItem,
    TabItem and HistoryTabItem. Equality and hashing use (kind, id).
    """

    kind: ClassVar[ItemKind]

    title: str
    subtitle: str
    owner_name: str
    icon: Any
    last_access_time: float

    @property
    def id(self) -> str:
        raise NotImplementedError

    @property
    def window_handle(self) -> int:
        return NO_WINDOW

    @property
    def tab_index(self) -> Optional[int]:
        return None

    @property
    def url(self) -> Optional[str]:
        return None

    def _validate_common(self, owner_required: bool = True) -> None:
        if not self.title or not self.title.strip():
            raise ValueError(f"{self.kind.value} item requires a non-empty title")
        if owner_required and not self.owner_name:
            raise ValueError(f"{self.kind.value} item requires an owner name")
        object.__setattr__(self, "last_access_time", _clamp_creation_time(self.last_access_time))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CatalogItem):
            return NotImplemented
        return self.kind == other.kind and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.kind, self.id))


@dataclass(frozen=True, eq=False)
class ApplicationItem(CatalogItem):
    """An installed application that is not currently running."""

    kind: ClassVar[ItemKind] = ItemKind.APPLICATION

    title: str
    subtitle: str = "Application"
    owner_name: str = ""
    bundle_id: Optional[str] = None
    path: Optional[str] = None
    icon: Any = None
    last_access_time: Optional[float] = None

    def __post_init__(self):
        if not self.owner_name:
            object.__setattr__(self, "owner_name", self.title)
        self._validate_common()

    @property
    def process_id(self) -> int:
        return 0

    @property
    def id(self) -> str:
        return f"app:{self.bundle_id or self.path or self.title}"


@dataclass(frozen=True, eq=False)
class WindowItem(CatalogItem):
    """A visible top-level window of a running application."""

    kind: ClassVar[ItemKind] = ItemKind.WINDOW

    title: str
    subtitle: str
    owner_name: str
    handle: int
    process_id: int
    icon: Any = None
    last_access_time: Optional[float] = None

    def __post_init__(self):
        if self.handle < 0:
            raise ValueError(f"Window handle must be non-negative, got {self.handle}")
        if self.process_id <= 0:
            raise ValueError(f"Window process id must be positive, got {self.process_id}")
        self._validate_common()

    @property
    def window_handle(self) -> int:
        return self.handle

    @property
    def id(self) -> str:
        return f"window:{self.process_id}:{self.handle}"


@dataclass(frozen=True, eq=False)
class TabItem(CatalogItem):
    """An open browser tab retrieved through automation."""

    kind: ClassVar[ItemKind] = ItemKind.TAB

    title: str
    subtitle: str
    owner_name: str
    handle: int
    process_id: int
    index: int
    tab_url: Optional[str] = None
    icon: Any = None
    last_access_time: Optional[float] = None

    def __post_init__(self):
        if self.handle < 0:
            raise ValueError(f"Tab window handle must be non-negative, got {self.handle}")
        if self.process_id <= 0:
            raise ValueError(f"Tab process id must be positive, got {self.process_id}")
        if self.index < 0:
            raise ValueError(f"Tab index must be non-negative, got {self.index}")
        self._validate_common()

    @property
    def window_handle(self) -> int:
        return self.handle

    @property
    def tab_index(self) -> Optional[int]:
        return self.index

    @property
    def url(self) -> Optional[str]:
        return self.tab_url

    @property
    def id(self) -> str:
        return f"tab:{self.process_id}:{self.handle}:{self.index}"


@dataclass(frozen=True, eq=False)
class HistoryTabItem(CatalogItem):
    """A recently visited page read from a browser's history."""

    kind: ClassVar[ItemKind] = ItemKind.HISTORY_TAB

    title: str
    subtitle: str
    page_url: str
    browser_name: str
    process_id: Optional[int] = None
    icon: Any = None
    last_access_time: Optional[float] = None

    def __post_init__(self):
        if not self.page_url:
            raise ValueError("History item requires a URL")
        self._validate_common(owner_required=False)

    @property
    def owner_name(self) -> str:
        return ""

    @property
    def url(self) -> Optional[str]:
        return self.page_url

    @property
    def id(self) -> str:
        return f"history:{self.browser_name}:{self.page_url}"


AnyItem = Union[ApplicationItem, WindowItem, TabItem, HistoryTabItem]


# Raw records returned by source adapters

@dataclass(frozen=True)
class WindowInfo:
    """A window reported by a RunningWindowSource."""
    owner_name: str
    window_handle: int
    process_id: int
    window_title: str = ""


@dataclass(frozen=True)
class ApplicationInfo:
    """An application reported by an InstalledApplicationSource."""
    name: str
    bundle_id: Optional[str] = None
    path: Optional[str] = None
    icon: Any = None


@dataclass(frozen=True)
class TabInfo:
    """A tab reported by a BrowserTabAutomationSource (0-based index)."""
    tab_index: int
    title: str
    url: str = ""


@dataclass(frozen=True)
class HistoryEntry:
    """A visit reported by a BrowserHistorySource, in the source's native epoch."""
    title: str
    url: str
    visit_time: Any


class FailureKind(Enum):
    """Why a source contributed nothing to a refresh."""
    UNAVAILABLE = "unavailable"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    NOT_RUNNING = "not_running"
    NOT_SCRIPTABLE = "not_scriptable"


@dataclass(frozen=True)
class SourceFailure:
    """A recorded source failure, surfaced to callers as a soft signal."""
    source: str
    kind: FailureKind
    message: str = ""

    @classmethod
    def from_error(cls, source: str, error: BaseException) -> "SourceFailure":
        """
        Classify an adapter exception.

        Args:
            source: Identity of the source the error came from
            error: Exception raised by the adapter

        Returns:
            SourceFailure with the matching kind (unknown errors are UNAVAILABLE)
        """
        if isinstance(error, SourcePermissionDeniedError):
            kind = FailureKind.PERMISSION_DENIED
        elif isinstance(error, SourceTimeoutError):
            kind = FailureKind.TIMEOUT
        elif isinstance(error, TargetNotRunningError):
            kind = FailureKind.NOT_RUNNING
        elif isinstance(error, TargetNotScriptableError):
            kind = FailureKind.NOT_SCRIPTABLE
        else:
            kind = FailureKind.UNAVAILABLE
        message = error.message if isinstance(error, SourceError) else str(error)
        return cls(source=source, kind=kind, message=message or type(error).__name__)


@dataclass(frozen=True)
class Catalog:
    """The merged, immutable result of one aggregator refresh."""
    items: Tuple[CatalogItem, ...] = ()
    fetched_at: float = 0.0
    failures: Tuple[SourceFailure, ...] = ()
    # Sources denied for the first time (prompt the user once)
    newly_denied: Tuple[str, ...] = field(default=())

    @property
    def partial(self) -> bool:
        """True if at least one source failed during the refresh."""
        return bool(self.failures)

    @property
    def permission_denied(self) -> Tuple[str, ...]:
        return tuple(f.source for f in self.failures if f.kind is FailureKind.PERMISSION_DENIED)

    def find(self, item_id: str) -> Optional[CatalogItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def ids(self) -> Tuple[str, ...]:
        return tuple(item.id for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self.items)
