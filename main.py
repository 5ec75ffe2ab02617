"""CLI entrypoint for the SVG attribute dataset extractor."""

from __future__ import annotations

import argparse
import logging
import os
from collections import Counter
from pathlib import Path

from dotenv import load_dotenv

from description_resolver import DescriptionResolver
from element_index import build_dataset
from json_sink import write_dataset, write_snapshot
from models import Dataset, ResolutionStatus
from page_cache import CacheStore
from page_fetcher import PageFetcher
from reference_parser import parse_reference

_DEFAULT_SVG_REFERENCE_URL = "https://developer.mozilla.org/en-US/docs/Web/SVG/Attribute"


class PipelineError(RuntimeError):
    """The run cannot produce a dataset at all."""


def parse_args() -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(
        description="Build the SVG attribute dataset from the MDN attribute reference"
    )
    parser.add_argument("--output", default=None, help="Dataset JSON path (default: DATASET_OUTPUT_PATH)")
    parser.add_argument(
        "--snapshot",
        default=None,
        help="Normalized copy of the reference page (default: SNAPSHOT_OUTPUT_PATH)",
    )
    parser.add_argument("--cache-dir", default=None, help="Page cache directory (default: PAGE_CACHE_DIR)")
    return parser.parse_args()


def run(
    output_path: str | Path | None = None,
    snapshot_path: str | Path | None = None,
    cache_dir: str | Path | None = None,
    fetcher: PageFetcher | None = None,
) -> Dataset:
    """Run one full extraction and write the snapshot and dataset files.

    Per-page failures become placeholder descriptions. An unreachable
    reference page, a page with no usable candidates, or a failed write
    aborts the run.
    """
    if fetcher is None:
        fetcher = PageFetcher(CacheStore(cache_dir))

    reference_url = os.environ.get("SVG_REFERENCE_URL", _DEFAULT_SVG_REFERENCE_URL)
    reference = fetcher.fetch(reference_url)
    if not reference.ok:
        raise PipelineError(f"Reference page unavailable: {reference_url}")

    write_snapshot(reference.text, snapshot_path)

    candidates = parse_reference(reference.text)
    if not candidates:
        raise PipelineError(f"No supported attributes found in {reference_url}")

    resolver = DescriptionResolver(fetcher)
    resolved = resolver.resolve_all(candidates)

    dataset = build_dataset(resolved)
    write_dataset(dataset, output_path)

    statuses = Counter(resolution.status for _, resolution in resolved)
    logging.info(
        "Run complete. candidates=%s resolved=%s no_description=%s page_unavailable=%s elements=%s",
        len(candidates),
        statuses[ResolutionStatus.RESOLVED],
        statuses[ResolutionStatus.NO_DESCRIPTION],
        statuses[ResolutionStatus.PAGE_UNAVAILABLE],
        len(dataset.elements),
    )
    return dataset


def main() -> None:
    """Initialize config and execute the pipeline."""
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    args = parse_args()

    try:
        run(output_path=args.output, snapshot_path=args.snapshot, cache_dir=args.cache_dir)
    except Exception as exc:  # top-level: log and fail the process
        logging.exception("Extraction failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
