from __future__ import annotations

from weblingo.fetch.challenge import looks_like_bot_challenge, wait_out_challenge
from weblingo.fetch.page_fetcher import fetch_page
from weblingo.fetch.stylesheets import collect_css, resolve_stylesheet_url

__all__ = [
    "collect_css",
    "fetch_page",
    "looks_like_bot_challenge",
    "resolve_stylesheet_url",
    "wait_out_challenge",
]
