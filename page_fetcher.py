"""Cache-first page retrieval that degrades to an UNAVAILABLE result instead of raising."""

from __future__ import annotations

import logging
import os

import requests

from models import FetchResult, FetchStatus
from page_cache import CacheError, CacheStore

_DEFAULT_TIMEOUT_SECONDS = 30

DEFAULT_HEADERS = {
    "User-Agent": "svg-attribute-extractor/1.0",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

LOGGER = logging.getLogger(__name__)


class PageFetcher:
    def __init__(self, cache: CacheStore) -> None:
        self.cache = cache

    def fetch(self, url: str) -> FetchResult:
        """Return the page at ``url``, from the cache when fresh, else from the network.

        Transport and HTTP errors are logged and reported as
        ``FetchStatus.UNAVAILABLE``; cache read/write errors are logged and
        bypassed.
        """
        cached = self._cache_get(url)
        if cached is not None:
            return FetchResult(url=url, status=FetchStatus.OK, text=cached, from_cache=True)

        LOGGER.info("Fetching %s", url)
        try:
            response = requests.get(url, headers=DEFAULT_HEADERS, timeout=_request_timeout())
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.warning("Error loading %s: %s", url, exc)
            return FetchResult(url=url, status=FetchStatus.UNAVAILABLE)

        page = response.text
        try:
            self.cache.set(url, page)
        except CacheError as exc:
            LOGGER.warning("Could not cache %s: %s", url, exc)

        return FetchResult(url=url, status=FetchStatus.OK, text=page)

    def _cache_get(self, url: str) -> str | None:
        try:
            return self.cache.get(url)
        except CacheError as exc:
            LOGGER.warning("Cache lookup failed for %s, treating as miss: %s", url, exc)
            return None


def _request_timeout() -> float:
    return float(os.environ.get("FETCH_TIMEOUT_SECONDS", _DEFAULT_TIMEOUT_SECONDS))
