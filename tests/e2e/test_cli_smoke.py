from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import pytest
from typer.testing import CliRunner

from weblingo.cli import app
from weblingo.config import RunConfig
from weblingo.errors import FetchError
from weblingo.models import PageCapture
from weblingo.pipeline.orchestrator import PageTranslator

runner = CliRunner()

PAGE_HTML = "<html><head><style>p{}</style></head><body><main><p>Hello there</p></main></body></html>"


class _UpperProvider:
    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> str:
        return text.upper()

    def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> list[str]:
        return [text.upper() for text in texts]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr("weblingo.cli.load_env_chain", lambda repo_root: None)
    for key in ("WEBLINGO_PROVIDER", "WEBLINGO_MODEL", "WEBLINGO_GLOSSARIES", "WEBLINGO_GROUP_WORKERS"):
        monkeypatch.delenv(key, raising=False)


def test_cli_smoke_without_network(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    captured = {}

    def fake_fetch(config: RunConfig, url: str) -> PageCapture:
        return PageCapture(html=PAGE_HTML, css="p{}", final_url=url)

    def fake_build(config: RunConfig) -> PageTranslator:
        captured["config"] = config
        return PageTranslator(config=config, provider=_UpperProvider(), fetcher=fake_fetch)

    monkeypatch.setattr("weblingo.cli.build_page_translator", fake_build)

    result = runner.invoke(
        app,
        [
            "run",
            "https://example.com/page",
            "--target-lang",
            "DE",
            "--group-pause-ms",
            "0",
            "--output-root",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Output:" in result.stdout
    out = tmp_path / "example.com-page"
    assert "HELLO THERE" in (out / "index.html").read_text(encoding="utf-8")
    assert "Hello there" in (out / "original.html").read_text(encoding="utf-8")
    assert (out / "styles.css").read_text(encoding="utf-8") == "p{}"
    report = json.loads((out / "report.json").read_text(encoding="utf-8"))
    assert report["success"] is True
    assert report["params"]["provider"] == "deepl"
    cfg = captured["config"]
    assert cfg.target_lang == "DE"
    assert cfg.group_pause_ms == 0
    assert cfg.challenge_attempts == 6


def test_cli_exits_non_zero_when_fetch_fails(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    def broken_fetch(config: RunConfig, url: str) -> PageCapture:
        raise FetchError("Browser engine could not be started")

    monkeypatch.setattr(
        "weblingo.cli.build_page_translator",
        lambda config: PageTranslator(config=config, fetcher=broken_fetch),
    )

    result = runner.invoke(
        app,
        ["run", "https://example.com/page", "--target-lang", "NONE", "--output-root", str(tmp_path)],
    )

    assert result.exit_code == 1
    report = json.loads((tmp_path / "example.com-page" / "report.json").read_text(encoding="utf-8"))
    assert report["success"] is False


def test_cli_html_command_without_translation(tmp_path: Path) -> None:
    source = tmp_path / "landing.html"
    source.write_text(PAGE_HTML, encoding="utf-8")
    out_root = tmp_path / "out"

    result = runner.invoke(
        app,
        ["html", str(source), "--target-lang", "NONE", "--output-root", str(out_root)],
    )

    assert result.exit_code == 0, result.output
    [out] = list(out_root.iterdir())
    assert (out / "index.html").read_text(encoding="utf-8") == PAGE_HTML
    assert not (out / "styles.css").exists()


def test_cli_rejects_unknown_provider(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "run",
            "https://example.com/page",
            "--target-lang",
            "DE",
            "--provider",
            "babelfish",
            "--output-root",
            str(tmp_path),
        ],
    )
    assert result.exit_code != 0
    assert not any(tmp_path.iterdir())
