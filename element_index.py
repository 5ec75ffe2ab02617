"""Assemble the attribute dataset and its element -> attributes index."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from models import AttributeRecord, Candidate, Dataset, Resolution


def invert(attributes: Mapping[str, AttributeRecord]) -> dict[str, list[str]]:
    """Map each element to the attributes it supports, e.g. ``{"circle": ["cx", "cy", "r"]}``.

    Attribute names are appended in the order attributes are iterated, each at
    most once per element.
    """
    elements: dict[str, list[str]] = {}
    for name, record in attributes.items():
        for element in record.elements:
            names = elements.setdefault(element, [])
            if name not in names:
                names.append(name)
    return elements


def build_dataset(resolved: Iterable[tuple[Candidate, Resolution]]) -> Dataset:
    attributes: dict[str, AttributeRecord] = {}
    for candidate, resolution in resolved:
        attributes[candidate.name] = AttributeRecord(
            name=candidate.name,
            description=resolution.description,
            elements=resolution.elements,
        )
    return Dataset(attributes=attributes, elements=invert(attributes))
