"""Catalog aggregation: merges every source into one cached, deduplicated catalog."""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import replace
from typing import Any, Callable, List, Optional, Sequence, Set, Tuple

from .cache import FaviconCache, TTLCache
from .exceptions import AggregateFailureError, DataCorruptionError, SourceTimeoutError
from .models import (
    UNTITLED_TAB,
    ApplicationItem,
    Catalog,
    CatalogItem,
    FailureKind,
    HistoryTabItem,
    SourceFailure,
    TabItem,
    WindowItem,
)
from .sources.base import (
    BrowserHistorySource,
    BrowserTabAutomationSource,
    InstalledApplicationSource,
    RunningWindowSource,
)
from .sources.tab_source import TAB_CAPABLE_BROWSERS
from .timestamps import to_unix_seconds

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 10000

# Window titles treated as "no title"
UNTITLED_WINDOW_TITLES = ("", "Untitled Window")


def clamp_history_limit(limit: int) -> int:
    """Clamp a requested history limit into [0, MAX_HISTORY_LIMIT]."""
    return max(0, min(int(limit), MAX_HISTORY_LIMIT))


class CatalogAggregator:
    """
    Builds the catalog from the window, application, tab and history sources.

    Source calls run concurrently on a thread pool, each wait bounded by a
    timeout. A failing source never fails the refresh: it is recorded as a
    SourceFailure on the Catalog. The merged Catalog is cached for `ttl`
    seconds, and concurrent callers share a single in-flight refresh.
    """

    NAMESPACE = "catalog"
    KEY = "merged"

    def __init__(
        self,
        window_source: RunningWindowSource,
        application_source: InstalledApplicationSource,
        tab_source: Optional[BrowserTabAutomationSource] = None,
        history_sources: Sequence[BrowserHistorySource] = (),
        favicon_cache: Optional[FaviconCache] = None,
        ttl: float = 300,
        history_limit: int = 20,
        source_timeout: float = 10,
        automation_timeout: float = 10,
        clock: Callable[[], float] = time.time,
        cache: Optional[TTLCache] = None,
        max_workers: int = 16,
    ):
        """
        Initialize the aggregator.

        Args:
            window_source: Visible window enumeration
            application_source: Installed application enumeration
            tab_source: Browser tab automation (None disables tab expansion)
            history_sources: One history source per browser
            favicon_cache: Icons for tab and history items (None disables favicons)
            ttl: Seconds a catalog stays fresh (0 = refresh on every request)
            history_limit: Max history items across all browsers, clamped to [0, 10000]
            source_timeout: Seconds allowed for window, application and history calls
            automation_timeout: Seconds allowed for each tab automation call
            clock: Time source for fetch timestamps and freshness
            cache: Backing TTLCache (created if None)
            max_workers: Thread pool size for the source calls of one refresh
        """
        self.window_source = window_source
        self.application_source = application_source
        self.tab_source = tab_source
        self.history_sources = list(history_sources)
        self.favicon_cache = favicon_cache
        self.ttl = ttl
        self.history_limit = clamp_history_limit(history_limit)
        self.source_timeout = source_timeout
        self.automation_timeout = automation_timeout
        self._clock = clock
        self._cache = cache or TTLCache(clock=clock)
        self.max_workers = max_workers

        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None
        self._last_failures: Tuple[SourceFailure, ...] = ()
        # Sources whose denial was already surfaced once
        self._denial_reported: Set[str] = set()
        self._pending_prompts: Set[str] = set()

    # Public API

    def get_catalog(self) -> Catalog:
        """
        Return the cached catalog while fresh, otherwise refresh.

        Returns:
            Catalog

        Raises:
            AggregateFailureError: If a refresh produced no items and some source failed
        """
        if self.ttl > 0:
            entry = self._cache.get_entry(self.NAMESPACE, self.KEY)
            if entry is not None:
                return entry[0]
        return self.refresh()

    def refresh(self) -> Catalog:
        """
        Rebuild the catalog from all sources and cache it.

        If a refresh is already running, waits for it and returns its result.
        Only the caller whose refresh produced the catalog sees its
        `newly_denied`; the cached copy and waiting callers get an empty tuple.

        Returns:
            The new Catalog

        Raises:
            AggregateFailureError: If no items were produced and some source failed
        """
        with self._lock:
            future = self._inflight
            leader = future is None
            if leader:
                future = Future()
                self._inflight = future

        if not leader:
            return future.result()

        try:
            catalog = self._build()
        except BaseException as e:
            with self._lock:
                self._inflight = None
            future.set_exception(e)
            raise

        shared = replace(catalog, newly_denied=())
        with self._lock:
            self._cache.set(self.NAMESPACE, self.KEY, shared, ttl=self.ttl, timestamp=catalog.fetched_at)
            self._inflight = None
        future.set_result(shared)
        return catalog

    def invalidate(self) -> None:
        """Drop the cached catalog so the next request refreshes."""
        self._cache.invalidate(self.NAMESPACE)
        logger.debug("Catalog invalidated")

    @property
    def last_failures(self) -> Tuple[SourceFailure, ...]:
        """Failures recorded by the most recent refresh."""
        with self._lock:
            return self._last_failures

    def pending_permission_prompts(self) -> List[str]:
        """Sources denied access whose remediation prompt was not acknowledged yet."""
        with self._lock:
            return sorted(self._pending_prompts)

    def acknowledge_permission_prompt(self, source: str) -> None:
        with self._lock:
            self._pending_prompts.discard(source)

    def shutdown(self) -> None:
        """Stop the favicon download pool."""
        if self.favicon_cache is not None:
            self.favicon_cache.shutdown()

    # Refresh pipeline

    def _build(self) -> Catalog:
        # One pool per refresh; stuck workers never delay the next one
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="catalog")
        try:
            return self._build_with(executor)
        finally:
            executor.shutdown(wait=False)

    def _build_with(self, executor: ThreadPoolExecutor) -> Catalog:
        started = time.monotonic()
        failures: List[SourceFailure] = []
        succeeded: List[str] = []

        source_deadline = started + self.source_timeout
        window_future = executor.submit(self.window_source.list_windows)
        app_future = executor.submit(self.application_source.list_applications)
        history_futures = [
            (source, executor.submit(source.recent_entries, self.history_limit))
            for source in self.history_sources
        ]

        raw_windows = self._collect(
            self.window_source.name, window_future, source_deadline, self.source_timeout, failures, succeeded
        )
        window_items, running = self._window_items(raw_windows or [], executor, failures, succeeded)

        raw_apps = self._collect(
            self.application_source.name, app_future, source_deadline, self.source_timeout, failures, succeeded
        )
        app_items = self._application_items(raw_apps or [], running)

        history_items: List[HistoryTabItem] = []
        now = self._clock()
        for source, future in history_futures:
            entries = self._collect(source.name, future, source_deadline, self.source_timeout, failures, succeeded)
            history_items.extend(self._history_items(source, entries or [], now))
        # Stable sort: equal visit times keep source order
        history_items.sort(key=lambda item: item.last_access_time, reverse=True)
        history_items = history_items[:self.history_limit]

        items: List[CatalogItem] = []
        seen_ids: Set[str] = set()
        for item in [*window_items, *app_items, *history_items]:
            if item.id in seen_ids:
                logger.debug("Dropping duplicate catalog item %s", item.id)
                continue
            seen_ids.add(item.id)
            items.append(item)

        newly_denied = self._update_permission_state(failures, succeeded)
        catalog = Catalog(
            items=tuple(items),
            fetched_at=self._clock(),
            failures=tuple(failures),
            newly_denied=newly_denied,
        )
        with self._lock:
            self._last_failures = catalog.failures

        if not items and failures:
            logger.error("Catalog refresh produced no items; %d sources failed", len(failures))
            raise AggregateFailureError(failures)

        logger.info(
            "Catalog refreshed in %.2fs: %d items (%d windows/tabs, %d apps, %d history), %d failures",
            time.monotonic() - started, len(items), len(window_items), len(app_items),
            len(history_items), len(failures)
        )
        return catalog

    def _collect(self, source: str, future: Future, deadline: float, timeout: float,
                 failures: List[SourceFailure], succeeded: List[str]) -> Any:
        """Wait for a source call until the deadline, recording any failure."""
        try:
            result = future.result(timeout=max(0.0, deadline - time.monotonic()))
        except FuturesTimeoutError:
            # The worker thread is abandoned; its late result is ignored
            future.cancel()
            self._record_failure(failures, source, SourceTimeoutError(source, timeout))
            return None
        except Exception as e:
            self._record_failure(failures, source, e)
            return None
        succeeded.append(source)
        return result

    def _record_failure(self, failures: List[SourceFailure], source: str, error: BaseException) -> None:
        failure = SourceFailure.from_error(source, error)
        failures.append(failure)
        if failure.kind is FailureKind.PERMISSION_DENIED:
            logger.warning("Permission denied for %s: %s", source, failure.message)
        elif failure.kind is FailureKind.TIMEOUT:
            logger.warning("Source %s %s", source, failure.message)
        else:
            logger.error("Source %s unavailable (%s): %s", source, failure.kind.value, failure.message)

    def _window_items(self, raw_windows: List[Any], executor: ThreadPoolExecutor,
                      failures: List[SourceFailure], succeeded: List[str]) -> Tuple[List[CatalogItem], Set[str]]:
        windows: List[WindowItem] = []
        running: Set[str] = set()
        for info in raw_windows:
            try:
                owner = info.owner_name
                if not owner:
                    raise ValueError("window without owner")
                window_title = (info.window_title or "").strip()
                if window_title in UNTITLED_WINDOW_TITLES:
                    subtitle = "Browser Window" if owner in TAB_CAPABLE_BROWSERS else "Window"
                else:
                    subtitle = window_title
                windows.append(WindowItem(
                    title=owner,
                    subtitle=subtitle,
                    owner_name=owner,
                    handle=info.window_handle,
                    process_id=info.process_id,
                ))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Dropping corrupt window record %r: %s", info, e)
                continue
            running.add(owner)

        tab_futures = {}
        deadline = time.monotonic() + self.automation_timeout
        if self.tab_source is not None:
            for window in windows:
                if window.owner_name in TAB_CAPABLE_BROWSERS:
                    tab_futures[window.id] = executor.submit(
                        self.tab_source.list_tabs, window.owner_name, window.handle
                    )

        items: List[CatalogItem] = []
        for window in windows:
            future = tab_futures.get(window.id)
            tabs = None
            if future is not None:
                tabs = self._collect(
                    f"tabs:{window.owner_name}", future, deadline, self.automation_timeout, failures, succeeded
                )
            tab_items = self._tab_items(window, tabs or [])
            if tab_items:
                items.extend(tab_items)
            else:
                # No tabs: keep the plain window
                items.append(window)
        return items, running

    def _tab_items(self, window: WindowItem, tabs: List[Any]) -> List[TabItem]:
        items = []
        for tab in tabs:
            try:
                url = tab.url or None
                items.append(TabItem(
                    title=(tab.title or "").strip() or UNTITLED_TAB,
                    subtitle=f"{window.owner_name} - {url or ''}",
                    owner_name=window.owner_name,
                    handle=window.handle,
                    process_id=window.process_id,
                    index=tab.tab_index,
                    tab_url=url,
                    icon=self._favicon(url),
                ))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Dropping corrupt tab record %r: %s", tab, e)
        return items

    def _application_items(self, raw_apps: List[Any], running: Set[str]) -> List[ApplicationItem]:
        items = []
        for app in raw_apps:
            try:
                if app.name in running:
                    continue
                items.append(ApplicationItem(
                    title=app.name,
                    bundle_id=app.bundle_id,
                    path=app.path,
                    icon=app.icon,
                ))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Dropping corrupt application record %r: %s", app, e)
        items.sort(key=lambda item: item.title.lower())
        return items

    def _history_items(self, source: BrowserHistorySource, entries: List[Any], now: float) -> List[HistoryTabItem]:
        items = []
        for entry in entries:
            try:
                visited = to_unix_seconds(entry.visit_time, source.epoch, now=now)
                url = entry.url
                items.append(HistoryTabItem(
                    title=(entry.title or "").strip() or url,
                    subtitle=f"{source.browser_name} • {url}",
                    page_url=url,
                    browser_name=source.browser_name,
                    icon=self._favicon(url),
                    last_access_time=visited,
                ))
            except (AttributeError, TypeError, ValueError, DataCorruptionError) as e:
                logger.debug("Dropping corrupt %s history record %r: %s", source.browser_name, entry, e)
        return items

    def _favicon(self, url: Optional[str]) -> Any:
        """Return a cached favicon or start fetching it in the background."""
        if self.favicon_cache is None or not url:
            return None
        icon = self.favicon_cache.peek(url)
        if icon is None:
            try:
                self.favicon_cache.fetch(url)
            except RuntimeError as e:
                # Executor already shut down
                logger.debug("Favicon prefetch for %s not started: %s", url, e)
        return icon

    def _update_permission_state(self, failures: List[SourceFailure], succeeded: List[str]) -> Tuple[str, ...]:
        newly_denied = []
        with self._lock:
            # A source that works again prompts again if later denied
            for source in succeeded:
                self._denial_reported.discard(source)
            for failure in failures:
                if failure.kind is not FailureKind.PERMISSION_DENIED:
                    continue
                if failure.source in self._denial_reported:
                    continue
                self._denial_reported.add(failure.source)
                self._pending_prompts.add(failure.source)
                newly_denied.append(failure.source)
        return tuple(newly_denied)
