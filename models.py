"""Shared typed models for the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FetchStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    PAGE_UNAVAILABLE = "page_unavailable"
    NO_DESCRIPTION = "no_description"


@dataclass(frozen=True, slots=True)
class Candidate:
    """An attribute name paired with the detail link found in the reference page."""

    name: str
    detail_url: str


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a page fetch.

    ``text`` is only meaningful when ``status`` is OK; an OK result with empty
    text means the page was retrieved but had no body.
    """

    url: str
    status: FetchStatus
    text: str = ""
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


@dataclass(frozen=True, slots=True)
class Resolution:
    """Description and supported elements extracted from one detail page."""

    description: str
    elements: tuple[str, ...]
    status: ResolutionStatus


@dataclass(frozen=True, slots=True)
class AttributeRecord:
    """Final dataset entry for one attribute."""

    name: str
    description: str
    elements: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "elements": list(self.elements)}


@dataclass(frozen=True, slots=True)
class Dataset:
    attributes: dict[str, AttributeRecord] = field(default_factory=dict)
    elements: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable form written to the dataset file."""
        return {
            "attributes": {name: record.to_dict() for name, record in self.attributes.items()},
            "elements": {name: list(attrs) for name, attrs in self.elements.items()},
        }
