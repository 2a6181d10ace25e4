"""Favicon cache keyed by page URL, sharing one fetch per URL while in flight."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from .cache import TTLCache

logger = logging.getLogger(__name__)

FaviconCallback = Callable[[str, Any], None]


class FaviconCache:
    """Caches favicons until cleared; concurrent requests for a URL share one fetch."""

    NAMESPACE = "favicons"

    def __init__(self, source, executor: Optional[ThreadPoolExecutor] = None,
                 cache: Optional[TTLCache] = None, max_workers: int = 4):
        """
        Initialize the favicon cache.

        Args:
            source: FaviconSource used to download images
            executor: Executor for background fetches (created if None)
            cache: Backing TTLCache (created if None)
            max_workers: Worker count when creating the executor
        """
        self._source = source
        self._cache = cache or TTLCache()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="favicon"
        )
        self._inflight: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def peek(self, url: str) -> Any:
        """Return the cached favicon for url, or None without fetching."""
        return self._cache.get(self.NAMESPACE, url)

    def fetch(self, url: str) -> Future:
        """
        Get a future resolving to the favicon for url (None on failure).

        Returns an already-completed future when cached, and the same
        future to every caller while a fetch for url is in flight.

        Args:
            url: Page URL

        Returns:
            Future with the image or None
        """
        with self._lock:
            cached = self._cache.get(self.NAMESPACE, url)
            if cached is not None:
                done: Future = Future()
                done.set_result(cached)
                return done

            future = self._inflight.get(url)
            if future is None:
                future = self._executor.submit(self._download, url)
                self._inflight[url] = future
            return future

    def get(self, url: str, callback: Optional[FaviconCallback] = None) -> Any:
        """
        Non-blocking lookup: return the cached favicon or start loading it.

        Args:
            url: Page URL
            callback: Called with (url, image) once a background fetch succeeds

        Returns:
            Cached image, or None if a fetch was started
        """
        cached = self.peek(url)
        if cached is not None:
            return cached

        future = self.fetch(url)
        if callback is not None:
            def _deliver(done: Future) -> None:
                if done.cancelled():
                    return
                image = done.result()
                if image is not None:
                    callback(url, image)
            future.add_done_callback(_deliver)
        return None

    def _download(self, url: str) -> Any:
        image = None
        try:
            image = self._source.fetch(url)
        except Exception as e:
            logger.debug("Favicon fetch failed for %s: %s", url, e)

        with self._lock:
            if image is not None:
                self._cache.set(self.NAMESPACE, url, image, ttl=0)
            self._inflight.pop(url, None)
        return image

    def clear(self) -> None:
        """Drop every cached favicon and forget pending fetches."""
        with self._lock:
            self._cache.invalidate(self.NAMESPACE)
            for future in self._inflight.values():
                future.cancel()
            self._inflight.clear()

    def in_flight(self) -> int:
        with self._lock:
            return len(self._inflight)

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)
