"""File sinks for the extraction pipeline: reference snapshot and dataset JSON."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path

from models import Dataset

_DEFAULT_DATASET_OUTPUT_PATH = "data/attributes.json"
_DEFAULT_SNAPSHOT_OUTPUT_PATH = "data/attributes.html"
JSON_INDENT = 4

LOGGER = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\n\r|\r\n|\r|\n")


def normalize_line_endings(text: str) -> str:
    """Split on any line-break style, strip trailing whitespace per line, rejoin with ``\\n``."""
    return "\n".join(line.rstrip() for line in _LINE_BREAK_RE.split(text))


def serialize_dataset(dataset: Dataset) -> str:
    return json.dumps(dataset.to_dict(), indent=JSON_INDENT, ensure_ascii=False)


def write_snapshot(html: str, path: str | Path | None = None) -> Path:
    """Write the line-ending-normalized reference page so regenerations can be diffed."""
    target = Path(path or os.environ.get("SNAPSHOT_OUTPUT_PATH", _DEFAULT_SNAPSHOT_OUTPUT_PATH))
    atomic_write_text(target, normalize_line_endings(html))
    LOGGER.info("Wrote reference snapshot to %s", target)
    return target


def write_dataset(dataset: Dataset, path: str | Path | None = None) -> Path:
    """Serialize the dataset with 4-space indentation and replace the output file."""
    target = Path(path or os.environ.get("DATASET_OUTPUT_PATH", _DEFAULT_DATASET_OUTPUT_PATH))
    atomic_write_text(target, serialize_dataset(dataset))
    LOGGER.info(
        "Wrote dataset to %s: attributes=%s elements=%s",
        target,
        len(dataset.attributes),
        len(dataset.elements),
    )
    return target


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to a sibling temp file, then move it over ``path``.

    Readers see either the previous file or the complete new one. Raises
    OSError on failure; the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
