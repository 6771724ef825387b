from __future__ import annotations

from pathlib import Path

from weblingo.utils import slugify_url, unique_output_dir


def test_slugify_url_uses_host_and_path() -> None:
    assert slugify_url("https://Example.com/docs/intro?x=1") == "example.com-docs-intro"
    assert slugify_url("https://example.com/") == "example.com-index"


def test_slugify_url_truncates_with_hash_suffix() -> None:
    url = "https://example.com/" + "segment/" * 30
    slug = slugify_url(url)
    assert len(slug) <= 80
    assert slug != slugify_url(url + "other")


def test_unique_output_dir_uses_counter_when_slug_exists(tmp_path: Path) -> None:
    first = unique_output_dir(tmp_path, "example")
    assert first == tmp_path / "example"
    first.mkdir()
    second = unique_output_dir(tmp_path, "example")
    assert second == tmp_path / "example-2"
