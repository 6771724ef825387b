from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import ExitStack
from typing import Any

from playwright.sync_api import Browser, BrowserContext, Page, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from weblingo.config import RunConfig
from weblingo.errors import FetchError
from weblingo.fetch.challenge import wait_out_challenge
from weblingo.fetch.stylesheets import collect_css
from weblingo.models import PageCapture

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]
EXTRA_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}
FINGERPRINT_SCRIPTS = (
    "Object.defineProperty(navigator, 'webdriver', {get: () => undefined});",
    "window.chrome = {runtime: {}};",
    "Object.defineProperty(navigator, 'plugins', {get: () => [1, 2, 3, 4, 5]});",
    "Object.defineProperty(navigator, 'languages', {get: () => ['en-US', 'en']});",
)
_LAUNCH_TIMEOUT_MS = 30000


def fetch_page(
    config: RunConfig,
    url: str | None = None,
    *,
    playwright_factory: Callable[[], Any] = sync_playwright,
    sleep_fn: Callable[[float], None] | None = None,
) -> PageCapture:
    """Load `url` in a fresh headless browser and capture its html plus all css.

    A new browser is launched per call and is closed before this function
    returns, whichever way it returns.
    """
    target = url or config.url
    logger.info("Fetching page: %s", target)

    with ExitStack() as stack:
        try:
            playwright = stack.enter_context(playwright_factory())
            browser = playwright.chromium.launch(
                headless=not config.headful,
                args=LAUNCH_ARGS,
                timeout=_LAUNCH_TIMEOUT_MS,
            )
        except Exception as exc:  # noqa: BLE001 - any start-up failure is fatal
            raise FetchError(f"Browser engine could not be started: {exc}") from exc
        stack.callback(_close_browser, browser)

        try:
            html_text, final_url, challenged = _capture(browser, config, target, sleep_fn)
        except PlaywrightError as exc:
            raise FetchError(f"Page capture failed for {target}: {exc}") from exc

    css = collect_css(
        html_text,
        final_url or target,
        user_agent=config.user_agent,
        timeout_seconds=config.css_timeout_s,
        max_workers=config.css_max_workers,
    )
    logger.info(
        "Fetch finished: html=%d chars, css=%d chars, challenge=%s",
        len(html_text),
        len(css),
        challenged,
    )
    return PageCapture(
        html=html_text,
        css=css,
        final_url=final_url or target,
        challenge_detected=challenged,
    )


def _capture(
    browser: Browser,
    config: RunConfig,
    url: str,
    sleep_fn: Callable[[float], None] | None,
) -> tuple[str, str, bool]:
    context = _new_stealth_context(browser, config)
    page = _new_stealth_page(context, config)

    try:
        page.goto(url, wait_until="domcontentloaded", timeout=config.nav_timeout_ms)
    except PlaywrightError as exc:
        # Timeouts and partial loads still leave a usable DOM behind.
        logger.warning("Navigation did not complete cleanly, using current DOM: %s", exc)

    html_text, challenged = wait_out_challenge(
        page,
        attempts=config.challenge_attempts,
        poll_ms=config.challenge_poll_ms,
        settle_ms=config.settle_ms,
        sleep_fn=sleep_fn,
    )
    return html_text, page.url, challenged


def _new_stealth_context(browser: Browser, config: RunConfig) -> BrowserContext:
    return browser.new_context(
        user_agent=config.user_agent,
        viewport={"width": config.viewport_width, "height": config.viewport_height},
        locale=config.locale,
        timezone_id=config.timezone_id,
        extra_http_headers=EXTRA_HEADERS,
    )


def _new_stealth_page(context: BrowserContext, config: RunConfig) -> Page:
    page = context.new_page()
    page.set_default_timeout(config.page_default_timeout_ms)
    for script in FINGERPRINT_SCRIPTS:
        page.add_init_script(script)
    return page


def _close_browser(browser: Browser) -> None:
    try:
        browser.close()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Closing browser failed: %s", exc)
