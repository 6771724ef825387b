from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

_CHALLENGE_PHRASES = (
    "verify you are human",
    "enable javascript and cookies",
    "just a moment",
    "checking your browser",
    "ray id:",
)
_CHALLENGE_ASSETS = (
    "/cdn-cgi/challenge-platform/",
    "challenges.cloudflare.com/turnstile",
    "cf-challenge",
)
_TITLE_ATTENTION_REQUIRED_RE = re.compile(r"<title>\s*attention required", re.IGNORECASE)


class ContentSource(Protocol):
    def content(self) -> str: ...

    def wait_for_timeout(self, timeout: float) -> None: ...


def looks_like_bot_challenge(html_text: str) -> bool:
    lowered = html_text.lower()
    if any(marker in lowered for marker in _CHALLENGE_PHRASES):
        return True
    if any(marker in lowered for marker in _CHALLENGE_ASSETS):
        return True
    return bool(_TITLE_ATTENTION_REQUIRED_RE.search(html_text) and "cloudflare" in lowered)


def wait_out_challenge(
    page: ContentSource,
    *,
    attempts: int = 6,
    poll_ms: int = 5000,
    settle_ms: int = 2000,
    sleep_fn: Callable[[float], None] | None = None,
) -> tuple[str, bool]:
    """Poll the page until no bot-challenge marker is left.

    Returns the last html read and whether a challenge was still present.
    The schedule is fixed: `attempts` polls spaced `poll_ms` apart, then a
    single `settle_ms` wait and a re-read once the page is clear.
    Waits go through `page.wait_for_timeout` unless `sleep_fn` is given.
    """
    if sleep_fn is None:
        sleep_fn = _page_sleeper(page)
    html_text = ""
    challenged = False
    for attempt in range(1, attempts + 1):
        sleep_fn(poll_ms / 1000)
        try:
            html_text = page.content()
        except Exception as exc:  # noqa: BLE001 - page may be mid-navigation
            logger.warning("Reading page content failed (attempt %d/%d): %s", attempt, attempts, exc)
            continue

        challenged = looks_like_bot_challenge(html_text)
        if not challenged:
            sleep_fn(settle_ms / 1000)
            try:
                html_text = page.content()
            except Exception as exc:  # noqa: BLE001
                logger.debug("Settled re-read failed, keeping previous content: %s", exc)
            logger.info("No bot challenge on page (attempt %d/%d)", attempt, attempts)
            return html_text, False
        logger.info("Bot challenge detected, waiting (attempt %d/%d)", attempt, attempts)

    if not html_text:
        try:
            html_text = page.content()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Page content unreadable after %d attempts: %s", attempts, exc)
            return "", False
        challenged = looks_like_bot_challenge(html_text)
    if challenged:
        logger.warning("Bot challenge unresolved after %d attempts; returning challenge page", attempts)
    return html_text, challenged


def _page_sleeper(page: ContentSource) -> Callable[[float], None]:
    def sleep(seconds: float) -> None:
        page.wait_for_timeout(seconds * 1000)

    return sleep
