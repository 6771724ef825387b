from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from urllib.parse import urldefrag, urljoin, urlparse

import httpx
from lxml import etree

from weblingo.dom import parse_document

logger = logging.getLogger(__name__)

_IGNORED_PREFIXES = ("data:", "blob:", "javascript:", "about:", "#")


@dataclass(slots=True)
class StylesheetOutcome:
    url: str
    css: str | None
    reason: str | None = None


def resolve_stylesheet_url(base_url: str, href: str) -> str | None:
    raw = href.strip()
    if not raw or raw.lower().startswith(_IGNORED_PREFIXES):
        return None
    if raw.startswith("//"):
        scheme = urlparse(base_url).scheme or "https"
        raw = f"{scheme}:{raw}"
    resolved, _ = urldefrag(urljoin(base_url, raw))
    if urlparse(resolved).scheme not in {"http", "https"}:
        return None
    return resolved


def _stylesheet_hrefs(root: etree._Element) -> list[str]:
    hrefs: list[str] = []
    for link in root.xpath("//link[@rel and @href]"):
        if not isinstance(link, etree._Element):
            continue
        rel_values = {part.strip().lower() for part in (link.get("rel") or "").split()}
        if "stylesheet" in rel_values:
            hrefs.append(link.get("href") or "")
    return hrefs


def _inline_styles(root: etree._Element) -> list[str]:
    return [style.text or "" for style in root.iter("style")]


def collect_css(
    html_text: str,
    base_url: str,
    *,
    user_agent: str,
    timeout_seconds: float = 10.0,
    max_workers: int = 4,
) -> str:
    """Join every inline <style> block and every linked stylesheet into one string.

    Stylesheets that fail to download are logged and left out.
    """
    if not html_text.strip():
        return ""
    try:
        root = parse_document(html_text)
    except (etree.ParserError, ValueError) as exc:
        logger.warning("CSS extraction skipped, html did not parse: %s", exc)
        return ""

    chunks = [f"{css}\n" for css in _inline_styles(root)]

    urls: list[str] = []
    for href in _stylesheet_hrefs(root):
        url = resolve_stylesheet_url(base_url, href)
        if url is None:
            logger.debug("Skipping stylesheet href %r", href)
            continue
        if url not in urls:
            urls.append(url)

    for outcome in fetch_stylesheets(
        urls,
        user_agent=user_agent,
        referer=base_url,
        timeout_seconds=timeout_seconds,
        max_workers=max_workers,
    ):
        if outcome.css is None:
            logger.warning("Stylesheet download failed: %s (%s)", outcome.url, outcome.reason)
            continue
        if outcome.css:
            chunks.append(f"\n/* External CSS from: {outcome.url} */\n{outcome.css}\n")
    return "".join(chunks)


def fetch_stylesheets(
    urls: list[str],
    *,
    user_agent: str,
    referer: str,
    timeout_seconds: float,
    max_workers: int,
) -> list[StylesheetOutcome]:
    if not urls:
        return []
    with httpx.Client(
        follow_redirects=True,
        timeout=timeout_seconds,
        headers={"User-Agent": user_agent, "Referer": referer},
    ) as client:
        if len(urls) == 1:
            return [_fetch_one(client, urls[0])]
        worker_count = max(1, min(max_workers, len(urls)))
        with ThreadPoolExecutor(max_workers=worker_count) as executor:
            # map keeps document order regardless of completion order
            return list(executor.map(lambda url: _fetch_one(client, url), urls))


def _fetch_one(client: httpx.Client, url: str) -> StylesheetOutcome:
    try:
        response = client.get(url)
    except Exception as exc:  # noqa: BLE001 - keep fetch resilient
        return StylesheetOutcome(url=url, css=None, reason=f"error:{type(exc).__name__}")
    if response.status_code >= 400:
        return StylesheetOutcome(url=url, css=None, reason=f"http_{response.status_code}")
    return StylesheetOutcome(url=url, css=response.text)
