from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer

from weblingo.config import RunConfig
from weblingo.env import env_or, int_env_or, load_env_chain, optional_env
from weblingo.errors import ConfigurationError
from weblingo.models import TranslationResult
from weblingo.pipeline.factory import PROVIDERS, build_page_translator
from weblingo.report.builder import build_report, write_report
from weblingo.utils import slugify_url, unique_output_dir

app = typer.Typer(
    add_completion=False,
    help="Weblingo: translate web pages while keeping their markup and styles.",
    pretty_exceptions_show_locals=False,
)


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.strip().upper(), None)
    if not isinstance(level, int):
        raise typer.BadParameter("`--log-level` must be one of debug, info, warning, error.")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_config(**overrides: Any) -> RunConfig:
    provider = (overrides.pop("provider", None) or env_or("deepl", "WEBLINGO_PROVIDER")).lower()
    if provider not in PROVIDERS:
        raise typer.BadParameter(f"`--provider` must be one of: {', '.join(PROVIDERS)}.")
    return RunConfig(
        provider=provider,
        model=overrides.pop("model", None) or env_or("gpt-5.1", "WEBLINGO_MODEL"),
        deepl_api_url=env_or("https://api-free.deepl.com", "WEBLINGO_DEEPL_API_URL", "DEEPL_API_URL"),
        deepl_api_key=optional_env("DEEPL_AUTH_KEY", "DEEPL_API_KEY"),
        openai_api_key=optional_env("OPENAI_API_KEY"),
        glossaries=env_or("", "WEBLINGO_GLOSSARIES"),
        group_workers=overrides.pop("group_workers", None) or int_env_or(1, "WEBLINGO_GROUP_WORKERS"),
        **overrides,
    )


def _write_outputs(result: TranslationResult, *, slug_source: str, config: RunConfig) -> Path:
    output_dir = unique_output_dir(config.output_root, slugify_url(slug_source))
    output_dir.mkdir(parents=True, exist_ok=True)
    page_html = result.translated_html or result.original_html
    if page_html is not None:
        (output_dir / "index.html").write_text(page_html, encoding="utf-8")
    if result.original_html is not None:
        (output_dir / "original.html").write_text(result.original_html, encoding="utf-8")
    if result.css:
        (output_dir / "styles.css").write_text(result.css, encoding="utf-8")
    report = build_report(result, run_params=_run_params_for_report(config))
    write_report(report, output_dir / "report.json")
    return output_dir


def _finish(result: TranslationResult, output_dir: Path) -> None:
    typer.echo(f"Output: {output_dir}")
    if result.challenge_detected:
        typer.echo("Warning: bot challenge was not resolved; the page may be incomplete.")
    if not result.success:
        typer.echo(f"Failed: {result.error_message}", err=True)
        raise typer.Exit(code=1)


@app.command()
def run(
    url: str = typer.Argument(..., help="Source page URL"),
    source_lang: str = typer.Option(None, "--source-lang", help="Source language, auto-detect if empty"),
    target_lang: str = typer.Option(..., "--target-lang", help="Target language, NONE to skip translation"),
    glossary_id: str = typer.Option(None, "--glossary-id"),
    provider: str = typer.Option(None, "--provider", help="deepl or openai"),
    model: str = typer.Option(None, "--model"),
    headful: bool = typer.Option(False, "--headful", help="Run the browser in visible mode"),
    nav_timeout_ms: int = typer.Option(60000, "--nav-timeout-ms"),
    challenge_attempts: int = typer.Option(6, "--challenge-attempts"),
    challenge_poll_ms: int = typer.Option(5000, "--challenge-poll-ms"),
    group_workers: int = typer.Option(None, "--group-workers"),
    group_pause_ms: int = typer.Option(50, "--group-pause-ms"),
    output_root: Path = typer.Option(Path("output"), "--output-root"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Fetch URL, translate its text and write the snapshot."""
    load_env_chain(_repo_root())
    _configure_logging(log_level)
    cfg = _build_config(
        url=url,
        source_lang=source_lang,
        target_lang=target_lang,
        glossary_id=glossary_id,
        provider=provider,
        model=model,
        headful=headful,
        nav_timeout_ms=nav_timeout_ms,
        challenge_attempts=challenge_attempts,
        challenge_poll_ms=challenge_poll_ms,
        group_workers=group_workers,
        group_pause_ms=group_pause_ms,
        output_root=output_root,
        log_level=log_level,
    )
    try:
        translator = build_page_translator(cfg)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo("Weblingo: fetching and translating...")
    with translator:
        result = translator.translate_page(cfg.url, cfg.source_lang, cfg.target_lang, cfg.glossary_id)
    _finish(result, _write_outputs(result, slug_source=cfg.url, config=cfg))


@app.command("html")
def html_file(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Local HTML file"),
    source_lang: str = typer.Option(None, "--source-lang"),
    target_lang: str = typer.Option(..., "--target-lang"),
    glossary_id: str = typer.Option(None, "--glossary-id"),
    provider: str = typer.Option(None, "--provider", help="deepl or openai"),
    model: str = typer.Option(None, "--model"),
    group_workers: int = typer.Option(None, "--group-workers"),
    group_pause_ms: int = typer.Option(50, "--group-pause-ms"),
    output_root: Path = typer.Option(Path("output"), "--output-root"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Translate a local HTML file without fetching anything."""
    load_env_chain(_repo_root())
    _configure_logging(log_level)
    cfg = _build_config(
        source_lang=source_lang,
        target_lang=target_lang,
        glossary_id=glossary_id,
        provider=provider,
        model=model,
        group_workers=group_workers,
        group_pause_ms=group_pause_ms,
        output_root=output_root,
        log_level=log_level,
    )
    try:
        translator = build_page_translator(cfg)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    html_text = path.read_text(encoding="utf-8", errors="replace")
    with translator:
        result = translator.translate_html_directly(
            html_text, cfg.source_lang, cfg.target_lang, cfg.glossary_id
        )
    _finish(result, _write_outputs(result, slug_source=f"file:///{path.stem}", config=cfg))


def _run_params_for_report(config: RunConfig) -> dict[str, Any]:
    return {
        "url": config.url,
        "provider": config.provider,
        "model": config.model if config.provider == "openai" else None,
        "glossary_id": config.glossary_id,
        "nav_timeout_ms": config.nav_timeout_ms,
        "challenge_attempts": config.challenge_attempts,
        "challenge_poll_ms": config.challenge_poll_ms,
        "group_workers": config.group_workers,
        "group_pause_ms": config.group_pause_ms,
    }


def main() -> None:
    app()


if __name__ == "__main__":
    main()
