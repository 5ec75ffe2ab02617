"""End-to-end tests for main.run against a patched network."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests
from dotenv import load_dotenv

import main
from description_resolver import PLACEHOLDER_DESCRIPTION
from page_cache import CacheStore
from page_fetcher import PageFetcher

FIXTURE = Path(__file__).parent / "fixtures" / "reference.html"
REFERENCE_URL = "https://developer.mozilla.org/en-US/docs/Web/SVG/Attribute"
DETAIL_BASE = "https://developer.mozilla.org/en-US/docs/Web/SVG/Attribute/"


def _detail_page(name: str, *elements: str) -> str:
    links = "".join(
        f'<li><a href="/en-US/docs/Web/SVG/Element/{el}">{el}</a></li>' for el in elements
    )
    return (
        f"<html><body><article><p>The {name} attribute is used in tests. Details follow.</p>"
        f"<ul>{links}</ul></article></body></html>"
    )


PAGES = {
    REFERENCE_URL: FIXTURE.read_text(encoding="utf-8").replace("\n", "\r\n"),
    DETAIL_BASE + "accent-height": _detail_page("accent-height", "font-face"),
    DETAIL_BASE + "alignment-baseline": _detail_page("alignment-baseline", "tspan", "text"),
    DETAIL_BASE + "cx": _detail_page("cx", "circle", "ellipse"),
    DETAIL_BASE + "cy": _detail_page("cy", "circle", "ellipse"),
    DETAIL_BASE + "r": _detail_page("r", "circle"),
}


def _fake_get(failing: set[str] | None = None):
    failing = failing or set()

    def fake_get(url: str, **kwargs) -> MagicMock:
        if url in failing or url not in PAGES:
            raise requests.ConnectionError(f"unreachable: {url}")
        response = MagicMock()
        response.text = PAGES[url]
        return response

    return fake_get


@pytest.fixture
def paths(tmp_path: Path) -> dict[str, Path]:
    return {
        "output_path": tmp_path / "data" / "attributes.json",
        "snapshot_path": tmp_path / "data" / "attributes.html",
        "cache_dir": tmp_path / "cache",
    }


def test_run_writes_dataset_and_snapshot(paths: dict[str, Path]) -> None:
    with patch("page_fetcher.requests.get", side_effect=_fake_get()):
        dataset = main.run(**paths)

    assert list(dataset.attributes) == ["accentHeight", "alignmentBaseline", "cx", "cy", "r"]
    assert dataset.attributes["cx"].description == "The cx attribute is used in tests"
    assert dataset.elements == {
        "font-face": ["accentHeight"],
        "tspan": ["alignmentBaseline"],
        "text": ["alignmentBaseline"],
        "circle": ["cx", "cy", "r"],
        "ellipse": ["cx", "cy"],
    }
    assert "acceptCharset" not in dataset.attributes
    assert paths["output_path"].exists()
    assert b"\r" not in paths["snapshot_path"].read_bytes()


def test_second_run_with_warm_cache_is_byte_identical_and_offline(paths: dict[str, Path]) -> None:
    with patch("page_fetcher.requests.get", side_effect=_fake_get()) as mock_get:
        main.run(**paths)
    first = paths["output_path"].read_bytes()
    assert mock_get.call_count == 6

    with patch("page_fetcher.requests.get", side_effect=_fake_get()) as mock_get:
        main.run(**paths)

    mock_get.assert_not_called()
    assert paths["output_path"].read_bytes() == first


def test_one_failed_detail_page_is_contained(paths: dict[str, Path]) -> None:
    with patch("page_fetcher.requests.get", side_effect=_fake_get({DETAIL_BASE + "cy"})):
        dataset = main.run(**paths)

    assert len(dataset.attributes) == 5
    assert dataset.attributes["cy"].description == PLACEHOLDER_DESCRIPTION
    assert dataset.attributes["cy"].elements == ()
    assert dataset.attributes["cx"].description == "The cx attribute is used in tests"
    assert dataset.attributes["r"].description == "The r attribute is used in tests"
    assert dataset.elements["circle"] == ["cx", "r"]


def test_unreachable_reference_page_is_fatal(paths: dict[str, Path]) -> None:
    with patch("page_fetcher.requests.get", side_effect=_fake_get({REFERENCE_URL})):
        with pytest.raises(main.PipelineError, match="Reference page unavailable"):
            main.run(**paths)

    assert not paths["output_path"].exists()


def test_reference_page_without_candidates_is_fatal(tmp_path: Path) -> None:
    fetcher = PageFetcher(CacheStore(tmp_path / "cache"))
    with patch("page_fetcher.requests.get", return_value=MagicMock(text="<html></html>")):
        with pytest.raises(main.PipelineError, match="No supported attributes"):
            main.run(
                output_path=tmp_path / "attributes.json",
                snapshot_path=tmp_path / "attributes.html",
                fetcher=fetcher,
            )

    assert not (tmp_path / "attributes.json").exists()


def test_main_exits_nonzero_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.argv", ["main.py"])
    with patch("main.load_dotenv"), \
         patch("main.run", side_effect=main.PipelineError("nope")):
        with pytest.raises(SystemExit) as excinfo:
            main.main()

    assert excinfo.value.code == 1


def test_main_passes_cli_paths_to_run(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "sys.argv",
        ["main.py", "--output", "out.json", "--snapshot", "ref.html", "--cache-dir", "c"],
    )
    with patch("main.load_dotenv"), patch("main.run") as mock_run:
        main.main()

    mock_run.assert_called_once_with(output_path="out.json", snapshot_path="ref.html", cache_dir="c")


def test_dotenv_settings_take_effect(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"DATASET_OUTPUT_PATH={tmp_path / 'from_env.json'}\n"
        f"SNAPSHOT_OUTPUT_PATH={tmp_path / 'from_env.html'}\n"
        f"PAGE_CACHE_DIR={tmp_path / 'envcache'}\n",
        encoding="utf-8",
    )
    monkeypatch.setattr("sys.argv", ["main.py"])

    with patch.dict("os.environ"):
        for name in ("DATASET_OUTPUT_PATH", "SNAPSHOT_OUTPUT_PATH", "PAGE_CACHE_DIR"):
            os.environ.pop(name, None)
        with patch("main.load_dotenv", lambda: load_dotenv(env_file)), \
             patch("page_fetcher.requests.get", side_effect=_fake_get()):
            main.main()

    assert (tmp_path / "from_env.json").exists()
    assert (tmp_path / "from_env.html").exists()
    assert (tmp_path / "envcache" / "pages.json").exists()
