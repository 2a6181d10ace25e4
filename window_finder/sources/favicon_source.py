"""Favicon downloads over HTTP."""

import logging
from typing import List, Optional
from urllib.parse import urlparse

import requests

from ..exceptions import FaviconError
from .base import FaviconSource

logger = logging.getLogger(__name__)

# Tried in order until one returns an image
FAVICON_URL_TEMPLATES = (
    "https://www.google.com/s2/favicons?domain={host}&sz=32",
    "https://icons.duckduckgo.com/ip3/{host}.ico",
    "https://{host}/favicon.ico",
)


def favicon_candidates(page_url: str) -> List[str]:
    """
    Build the favicon URLs to try for a page.

    Args:
        page_url: Page URL (e.g., "https://github.com/foo")

    Returns:
        Candidate icon URLs, empty when the URL has no host
    """
    host = urlparse(page_url).hostname
    if not host:
        return []
    return [template.format(host=host) for template in FAVICON_URL_TEMPLATES]


class RequestsFaviconSource(FaviconSource):
    """Downloads favicons from public icon services, then the site itself."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 5.0):
        """
        Initialize the favicon source.

        Args:
            session: HTTP session (created if None)
            timeout: Seconds allowed per HTTP request
        """
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "window-finder/0.1"})
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        candidates = favicon_candidates(url)
        if not candidates:
            raise FaviconError(f"No host in URL: {url}")

        for candidate in candidates:
            try:
                response = self.session.get(candidate, timeout=self.timeout)
            except requests.RequestException as e:
                logger.debug("Favicon request to %s failed: %s", candidate, e)
                continue

            content_type = response.headers.get("Content-Type", "")
            if response.status_code == 200 and response.content and content_type.startswith("image"):
                return response.content

        raise FaviconError(f"No favicon found for {url}")
