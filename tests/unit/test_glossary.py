from __future__ import annotations

import httpx
import pytest

from weblingo.errors import GlossaryLookupError
from weblingo.translate.glossary import DeepLGlossaryLookup, StaticGlossaryLookup


def test_static_lookup_parses_pairs_case_insensitively() -> None:
    lookup = StaticGlossaryLookup.from_string("EN:KO=gloss-ko, en:de=gloss-de,broken,=x")

    assert lookup.get_glossary_id("en", "ko") == "gloss-ko"
    assert lookup.get_glossary_id("EN", "DE") == "gloss-de"
    assert lookup.get_glossary_id("EN", "FR") is None
    assert lookup.get_glossary_id(None, "KO") is None


def _deepl_lookup(handler) -> DeepLGlossaryLookup:  # type: ignore[no-untyped-def]
    client = httpx.Client(
        base_url="https://api-free.deepl.com",
        transport=httpx.MockTransport(handler),
    )
    return DeepLGlossaryLookup(api_key="test-key", client=client)


def test_deepl_lookup_matches_dictionary_language_pair() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v3/glossaries"
        return httpx.Response(
            200,
            json={
                "glossaries": [
                    {
                        "glossary_id": "g-de",
                        "dictionaries": [{"source_lang": "en", "target_lang": "de"}],
                    },
                    {
                        "glossary_id": "g-ko",
                        "dictionaries": [
                            {"source_lang": "en", "target_lang": "ja"},
                            {"source_lang": "en", "target_lang": "ko"},
                        ],
                    },
                ]
            },
        )

    lookup = _deepl_lookup(handler)

    assert lookup.get_glossary_id("EN", "KO") == "g-ko"
    assert lookup.get_glossary_id("en", "fr") is None
    assert lookup.get_glossary_id(None, "KO") is None


def test_deepl_lookup_http_error_raises() -> None:
    lookup = _deepl_lookup(lambda request: httpx.Response(403, text="Forbidden"))
    with pytest.raises(GlossaryLookupError):
        lookup.get_glossary_id("EN", "KO")
