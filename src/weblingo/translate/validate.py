from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from jsonschema import ValidationError, validate

from weblingo.translate.schema import DEEPL_RESPONSE_SCHEMA, TRANSLATIONS_SCHEMA

_HTML_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(slots=True)
class ValidationOutcome:
    ok: bool
    error: str = ""
    texts: list[str] | None = None


def validate_item_translations(
    raw_text: str,
    *,
    expected_ids: list[str],
    sources: list[str],
) -> ValidationOutcome:
    """Check a `{translations: [{id, text}]}` model answer against the request."""
    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError:
        return ValidationOutcome(ok=False, error="json_parse_error")
    try:
        validate(payload, TRANSLATIONS_SCHEMA)
    except ValidationError:
        return ValidationOutcome(ok=False, error="schema_error")

    entries = payload["translations"]
    returned_ids = [entry["id"] for entry in entries]
    if sorted(returned_ids) != sorted(expected_ids):
        return ValidationOutcome(ok=False, error="id_coverage_error")
    if returned_ids != expected_ids:
        return ValidationOutcome(ok=False, error="id_order_error")

    texts = [entry["text"] for entry in entries]
    for source, translated in zip(sources, texts):
        if _HTML_TAG_RE.search(translated) and not _HTML_TAG_RE.search(source):
            return ValidationOutcome(ok=False, error="html_detected")
    return ValidationOutcome(ok=True, texts=texts)


def validate_deepl_translations(payload: Any, *, expected_count: int) -> ValidationOutcome:
    try:
        validate(payload, DEEPL_RESPONSE_SCHEMA)
    except ValidationError:
        return ValidationOutcome(ok=False, error="schema_error")
    texts = [entry["text"] for entry in payload["translations"]]
    if len(texts) != expected_count:
        return ValidationOutcome(ok=False, error="count_mismatch")
    return ValidationOutcome(ok=True, texts=texts)
