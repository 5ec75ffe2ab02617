"""Parse the SVG attribute reference page into ordered attribute candidates."""

from __future__ import annotations

import logging
import string

from bs4 import BeautifulSoup, Tag

from attribute_names import normalize
from models import Candidate

SECTION_LETTERS = string.ascii_lowercase
_HEADING_TAGS = ["h2", "h3"]

LOGGER = logging.getLogger(__name__)


def parse_reference(html: str) -> list[Candidate]:
    """Extract supported attribute candidates from the reference page.

    Sections are visited ``a`` to ``z``; within a section, links are taken in
    document order from the element that immediately follows the heading.
    Links whose text does not normalize to a supported attribute are skipped.

    A name seen again later keeps its first position but takes the later
    link's URL.
    """
    soup = BeautifulSoup(html, "html.parser")
    candidates: dict[str, Candidate] = {}
    skipped = 0

    for letter in SECTION_LETTERS:
        for link in _section_links(soup, letter):
            name = normalize(link.get_text())
            if name is None:
                skipped += 1
                continue

            href = link.get("href", "")
            if name in candidates and candidates[name].detail_url != href:
                LOGGER.info(
                    "Duplicate attribute %s: replacing link %s with %s",
                    name,
                    candidates[name].detail_url,
                    href,
                )
            candidates[name] = Candidate(name=name, detail_url=href)

    LOGGER.info(
        "Reference parse: candidates=%s skipped_unsupported=%s", len(candidates), skipped
    )
    return list(candidates.values())


def _section_links(soup: BeautifulSoup, letter: str) -> list[Tag]:
    heading = soup.find(_HEADING_TAGS, id=letter)
    if heading is None:
        return []

    section = heading.find_next_sibling()
    if section is None:
        return []

    return section.find_all("a", href=True)
