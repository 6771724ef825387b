from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
NO_TRANSLATION = "NONE"


@dataclass(slots=True)
class RunConfig:
    url: str = ""
    source_lang: str | None = None
    target_lang: str | None = None
    glossary_id: str | None = None
    # fetch
    nav_timeout_ms: int = 60000
    page_default_timeout_ms: int = 300000
    challenge_attempts: int = 6
    challenge_poll_ms: int = 5000
    settle_ms: int = 2000
    css_timeout_s: float = 10.0
    css_max_workers: int = 4
    headful: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1920
    viewport_height: int = 1080
    locale: str = "en-US"
    timezone_id: str = "America/New_York"
    # translate
    provider: str = "deepl"  # deepl|openai
    model: str = "gpt-5.1"
    deepl_api_url: str = "https://api-free.deepl.com"
    deepl_api_key: str | None = None
    openai_api_key: str | None = None
    provider_timeout_s: float = 30.0
    group_pause_ms: int = 50
    group_workers: int = 1
    glossaries: str = ""  # EN:KO=id,EN:DE=id2
    # output
    log_level: str = "info"
    output_root: Path = Path("output")

    @property
    def translation_requested(self) -> bool:
        return is_translation_requested(self.target_lang)


def is_translation_requested(target_lang: str | None) -> bool:
    if target_lang is None or not target_lang.strip():
        return False
    return target_lang.strip().upper() != NO_TRANSLATION
