from __future__ import annotations

import re
import string
import unicodedata

SKIP_TAGS = frozenset({"script", "style", "noscript", "code", "pre"})
MIN_TEXT_LENGTH = 2

_LEAD_RE = re.compile(r"^\s*")
_TRAIL_RE = re.compile(r"\s*$")
_URL_RE = re.compile(r"^https?://.*", re.DOTALL)
_EMAIL_RE = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")
_DIGITS_RE = re.compile(r"^\d+$")


def split_whitespace(raw: str) -> tuple[str, str, str]:
    lead = _LEAD_RE.match(raw).group(0)  # type: ignore[union-attr]
    if len(lead) == len(raw):
        return raw, "", ""
    trail = _TRAIL_RE.search(raw).group(0)  # type: ignore[union-attr]
    core = raw[len(lead) : len(raw) - len(trail)]
    return lead, core, trail


def is_punctuation_or_ws(value: str) -> bool:
    return all(_is_punctuation_or_ws_char(ch) for ch in value)


def _is_punctuation_or_ws_char(ch: str) -> bool:
    return ch.isspace() or ch in string.punctuation or unicodedata.category(ch).startswith("P")


def should_skip_text(text: str) -> bool:
    """True for trimmed text that must never reach the provider."""
    if len(text) < MIN_TEXT_LENGTH:
        return True
    if _URL_RE.match(text) or _EMAIL_RE.match(text) or _DIGITS_RE.match(text):
        return True
    return is_punctuation_or_ws(text)


def is_skip_tag(element: object) -> bool:
    tag = getattr(element, "tag", None)
    return isinstance(tag, str) and tag.lower() in SKIP_TAGS
