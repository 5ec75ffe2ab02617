"""Resolve each attribute candidate to a one-sentence description and its supported elements."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from models import Candidate, Resolution, ResolutionStatus
from page_fetcher import PageFetcher

_DEFAULT_MDN_BASE_URL = "https://developer.mozilla.org"
PLACEHOLDER_DESCRIPTION = "?????"

# A period followed by whitespace or end of text ends a sentence; "1.5" and
# "e.g.x" do not.
_SENTENCE_END_RE = re.compile(r"\.(?=\s|$)")
_ELEMENT_PATH_RE = re.compile(r"/SVG/(?:Reference/)?Element/([A-Za-z][\w-]*)/?$")

LOGGER = logging.getLogger(__name__)


class DescriptionResolver:
    def __init__(self, fetcher: PageFetcher, base_url: str | None = None) -> None:
        self.fetcher = fetcher
        self.base_url = base_url or os.environ.get("MDN_BASE_URL", _DEFAULT_MDN_BASE_URL)

    def resolve(self, candidate: Candidate) -> Resolution:
        """Fetch the candidate's detail page and extract its description and elements.

        Never raises for page-level problems: an unreachable page or one with no
        body text yields the placeholder description and a status saying why.
        """
        url = urljoin(self.base_url, candidate.detail_url)
        result = self.fetcher.fetch(url)
        if not result.ok:
            LOGGER.warning("No detail page for %s (%s), using placeholder", candidate.name, url)
            return Resolution(PLACEHOLDER_DESCRIPTION, (), ResolutionStatus.PAGE_UNAVAILABLE)

        region = _content_region(BeautifulSoup(result.text, "html.parser"))
        elements = extract_elements(region)
        description = extract_description(region)
        if not description:
            LOGGER.warning("No description text in %s for %s, using placeholder", url, candidate.name)
            return Resolution(PLACEHOLDER_DESCRIPTION, elements, ResolutionStatus.NO_DESCRIPTION)

        return Resolution(description, elements, ResolutionStatus.RESOLVED)

    def resolve_all(self, candidates: Iterable[Candidate]) -> list[tuple[Candidate, Resolution]]:
        """Resolve candidates one at a time, in order.

        Requests are never issued concurrently, which keeps load on the remote
        site at one request at a time and makes the log trace reproducible.
        """
        resolved: list[tuple[Candidate, Resolution]] = []
        for candidate in candidates:
            resolution = self.resolve(candidate)
            LOGGER.info("[%s] %s", candidate.name, resolution.description)
            resolved.append((candidate, resolution))
        return resolved


def extract_description(region: Tag) -> str:
    """Return the first sentence of the first non-empty paragraph in ``region``."""
    for paragraph in region.find_all("p"):
        text = " ".join(paragraph.get_text().split())
        if not text:
            continue
        return _SENTENCE_END_RE.split(text, maxsplit=1)[0].strip()
    return ""


def extract_elements(region: Tag) -> tuple[str, ...]:
    """Return SVG element names linked from ``region``, deduplicated, in document order."""
    seen: dict[str, None] = {}
    for link in region.find_all("a", href=True):
        match = _ELEMENT_PATH_RE.search(urlparse(link["href"]).path)
        if match:
            seen.setdefault(match.group(1), None)
    return tuple(seen)


def _content_region(soup: BeautifulSoup) -> Tag:
    return soup.find("article") or soup.find("main") or soup
