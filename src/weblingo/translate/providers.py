from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx
from openai import OpenAI

from weblingo.errors import ProviderError
from weblingo.models import ProviderOutcome, TranslationUnit
from weblingo.translate.schema import TRANSLATIONS_SCHEMA
from weblingo.translate.validate import validate_deepl_translations, validate_item_translations

logger = logging.getLogger(__name__)


class TranslationProvider(Protocol):
    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> str: ...

    def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> list[str]: ...


def try_translate(provider: TranslationProvider, unit: TranslationUnit) -> ProviderOutcome:
    """Run one provider call and fold any failure into the returned outcome."""
    try:
        if len(unit.texts) == 1:
            translated = [
                provider.translate(unit.text, unit.target_lang, unit.source_lang, unit.glossary_id)
            ]
        else:
            translated = provider.translate_batch(
                list(unit.texts), unit.target_lang, unit.source_lang, unit.glossary_id
            )
    except Exception as exc:  # noqa: BLE001
        return ProviderOutcome(ok=False, error=f"{type(exc).__name__}: {exc}")

    if len(translated) != len(unit.texts):
        return ProviderOutcome(
            ok=False,
            error=f"expected {len(unit.texts)} translations, got {len(translated)}",
        )
    return ProviderOutcome(ok=True, texts=tuple(translated))


class DeepLProvider:
    """DeepL REST client (`/v2/translate`) with optional glossary support."""

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = "https://api-free.deepl.com",
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=deepl_base_url(api_url),
            timeout=timeout_seconds,
            headers={"Authorization": f"DeepL-Auth-Key {api_key}"},
        )

    def close(self) -> None:
        self._client.close()

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> str:
        return self.translate_batch([text], target_lang, source_lang, glossary_id)[0]

    def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> list[str]:
        if not texts:
            return []
        body: dict[str, Any] = {"text": list(texts), "target_lang": target_lang.upper()}
        if source_lang:
            body["source_lang"] = source_lang.upper()
        if glossary_id and source_lang:
            body["glossary_id"] = glossary_id
        elif glossary_id:
            # DeepL rejects a glossary without an explicit source language
            logger.debug("Dropping glossary %s: no source language given", glossary_id)

        try:
            response = self._client.post("/v2/translate", json=body)
        except httpx.HTTPError as exc:
            raise ProviderError(f"DeepL request failed: {exc}") from exc
        if response.status_code >= 400:
            raise ProviderError(f"DeepL returned HTTP {response.status_code}: {response.text[:200]}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("DeepL response is not JSON") from exc

        outcome = validate_deepl_translations(payload, expected_count=len(texts))
        if not outcome.ok or outcome.texts is None:
            raise ProviderError(f"DeepL response rejected: {outcome.error}")
        return outcome.texts


SYSTEM_PROMPT = (
    "You are a translation engine for web page text. "
    "Return JSON strictly matching schema. "
    "Do not output HTML or Markdown. "
    "Keep IDs exactly as provided and in the same order."
)


class OpenAIProvider:
    """Responses-API translator returning schema-checked JSON."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        max_output_tokens: int = 8192,
        timeout_seconds: float = 90.0,
        client: Any = None,
    ) -> None:
        self._client = client or OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=2)
        self._model = model
        self._max_output_tokens = max_output_tokens

    def close(self) -> None:
        self._client.close()

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> str:
        return self.translate_batch([text], target_lang, source_lang, glossary_id)[0]

    def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> list[str]:
        if not texts:
            return []
        if glossary_id:
            logger.debug("OpenAI provider ignores glossary id %s", glossary_id)
        ids = [f"t_{index:06d}" for index in range(1, len(texts) + 1)]
        payload = {
            "task": "translate_items",
            "source_language": source_lang or "auto",
            "target_language": target_lang,
            "items": [{"id": item_id, "text": text} for item_id, text in zip(ids, texts)],
        }
        raw_text = self._request(payload)
        outcome = validate_item_translations(raw_text, expected_ids=ids, sources=list(texts))
        if not outcome.ok or outcome.texts is None:
            raise ProviderError(f"OpenAI response rejected: {outcome.error}")
        return outcome.texts

    def _request(self, payload: dict[str, Any]) -> str:
        request: dict[str, Any] = {
            "model": self._model,
            "max_output_tokens": self._max_output_tokens,
            "input": [
                {
                    "role": "system",
                    "content": [{"type": "input_text", "text": SYSTEM_PROMPT}],
                },
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_text",
                            "text": json.dumps(payload, ensure_ascii=False),
                        }
                    ],
                },
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "weblingo_translations",
                    "strict": True,
                    "schema": TRANSLATIONS_SCHEMA,
                }
            },
        }
        try:
            response = self._client.responses.create(**request)
        except Exception as exc:  # noqa: BLE001 - SDK raises a wide family of errors
            raise ProviderError(f"OpenAI request failed: {type(exc).__name__}: {exc}") from exc
        if getattr(response, "status", None) == "incomplete":
            raise ProviderError("OpenAI response is incomplete")
        return _extract_text_from_response(response)


def _extract_text_from_response(response: Any) -> str:
    output_text = getattr(response, "output_text", None)
    if isinstance(output_text, str) and output_text:
        return output_text

    output = getattr(response, "output", None)
    if isinstance(output, list):
        for item in output:
            content = getattr(item, "content", None)
            if not isinstance(content, list):
                continue
            for part in content:
                text = getattr(part, "text", None)
                if isinstance(text, str) and text:
                    return text
    raise ProviderError("OpenAI response does not contain output text")


def deepl_base_url(api_url: str) -> str:
    base = api_url.rstrip("/")
    for suffix in ("/v2/translate", "/v2"):
        if base.endswith(suffix):
            return base[: -len(suffix)]
    return base
