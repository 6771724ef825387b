from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from weblingo.errors import GlossaryLookupError
from weblingo.translate.providers import deepl_base_url

logger = logging.getLogger(__name__)


class GlossaryLookup(Protocol):
    def get_glossary_id(self, source_lang: str | None, target_lang: str | None) -> str | None: ...


def _pair_key(source_lang: str | None, target_lang: str | None) -> tuple[str, str] | None:
    if not source_lang or not target_lang:
        return None
    return source_lang.strip().upper(), target_lang.strip().upper()


class StaticGlossaryLookup:
    """Glossary ids from a fixed language-pair table."""

    def __init__(self, mapping: Mapping[tuple[str, str], str] | None = None) -> None:
        self._mapping: dict[tuple[str, str], str] = {}
        for (source, target), glossary_id in (mapping or {}).items():
            key = _pair_key(source, target)
            if key is not None and glossary_id:
                self._mapping[key] = glossary_id

    @classmethod
    def from_string(cls, value: str) -> StaticGlossaryLookup:
        """Build from `EN:KO=id1,EN:DE=id2`; malformed entries are skipped."""
        mapping: dict[tuple[str, str], str] = {}
        for entry in value.split(","):
            pair, sep, glossary_id = entry.strip().partition("=")
            source, colon, target = pair.partition(":")
            if not sep or not colon or not glossary_id.strip():
                if entry.strip():
                    logger.warning("Ignoring malformed glossary entry %r", entry)
                continue
            mapping[(source, target)] = glossary_id.strip()
        return cls(mapping)

    def get_glossary_id(self, source_lang: str | None, target_lang: str | None) -> str | None:
        key = _pair_key(source_lang, target_lang)
        if key is None:
            return None
        return self._mapping.get(key)


class DeepLGlossaryLookup:
    """Read-only lookup against the DeepL v3 glossary listing."""

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

    def get_glossary_id(self, source_lang: str | None, target_lang: str | None) -> str | None:
        if not source_lang or not target_lang:
            return None
        wanted = (source_lang.strip().lower(), target_lang.strip().lower())
        for glossary in self._list_glossaries():
            glossary_id = glossary.get("glossary_id")
            if not glossary_id:
                continue
            for dictionary in glossary.get("dictionaries") or []:
                pair = (
                    str(dictionary.get("source_lang", "")).lower(),
                    str(dictionary.get("target_lang", "")).lower(),
                )
                if pair == wanted:
                    return str(glossary_id)
        return None

    def _list_glossaries(self) -> list[dict[str, Any]]:
        try:
            response = self._client.get("/v3/glossaries")
        except httpx.HTTPError as exc:
            raise GlossaryLookupError(f"DeepL glossary listing failed: {exc}") from exc
        if response.status_code >= 400:
            raise GlossaryLookupError(f"DeepL glossary listing returned HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise GlossaryLookupError("DeepL glossary listing is not JSON") from exc
        glossaries = payload.get("glossaries") if isinstance(payload, dict) else None
        if not isinstance(glossaries, list):
            return []
        return [item for item in glossaries if isinstance(item, dict)]
