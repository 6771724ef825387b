from __future__ import annotations

import json
from collections.abc import Sequence
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from weblingo.errors import ProviderError
from weblingo.models import TranslationUnit
from weblingo.translate.providers import (
    DeepLProvider,
    OpenAIProvider,
    deepl_base_url,
    try_translate,
)


def _deepl(handler: Any) -> DeepLProvider:
    client = httpx.Client(
        base_url="https://api-free.deepl.com",
        transport=httpx.MockTransport(handler),
    )
    return DeepLProvider(api_key="test-key", client=client)


def test_deepl_sends_upper_cased_languages_and_glossary() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"translations": [{"detected_source_language": "EN", "text": "안녕하세요"}]},
        )

    translated = _deepl(handler).translate("Hello", "ko", "en", "gloss-1")

    assert translated == "안녕하세요"
    assert seen["path"] == "/v2/translate"
    assert seen["body"] == {
        "text": ["Hello"],
        "target_lang": "KO",
        "source_lang": "EN",
        "glossary_id": "gloss-1",
    }


def test_deepl_omits_source_lang_for_auto_detect() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"translations": [{"text": "Hallo"}, {"text": "Welt"}]})

    assert _deepl(handler).translate_batch(["Hello", "World"], "de") == ["Hallo", "Welt"]
    assert "source_lang" not in seen["body"]
    assert "glossary_id" not in seen["body"]


def test_deepl_http_error_raises_provider_error() -> None:
    provider = _deepl(lambda request: httpx.Response(456, text="Quota exceeded"))
    with pytest.raises(ProviderError):
        provider.translate("Hello", "DE")


def test_deepl_count_mismatch_raises_provider_error() -> None:
    provider = _deepl(lambda request: httpx.Response(200, json={"translations": [{"text": "Hallo"}]}))
    with pytest.raises(ProviderError):
        provider.translate_batch(["Hello", "World"], "DE")


def test_deepl_base_url_strips_endpoint_paths() -> None:
    assert deepl_base_url("https://api.deepl.com/v2/translate") == "https://api.deepl.com"
    assert deepl_base_url("https://api.deepl.com/v2/") == "https://api.deepl.com"
    assert deepl_base_url("https://api-free.deepl.com") == "https://api-free.deepl.com"


class _FakeResponses:
    def __init__(self, *, status: str = "completed", transform: Any = str.upper) -> None:
        self.status = status
        self.transform = transform
        self.requests: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        payload = json.loads(kwargs["input"][1]["content"][0]["text"])
        translations = [
            {"id": item["id"], "text": self.transform(item["text"])} for item in payload["items"]
        ]
        return SimpleNamespace(
            status=self.status,
            output_text=json.dumps({"translations": translations}, ensure_ascii=False),
        )


def _openai(responses: _FakeResponses) -> OpenAIProvider:
    return OpenAIProvider(
        api_key="test-key",
        model="gpt-5.1",
        client=SimpleNamespace(responses=responses),
    )


def test_openai_translates_items_with_json_schema() -> None:
    responses = _FakeResponses()

    translated = _openai(responses).translate_batch(["one", "two"], "DE", "EN")

    assert translated == ["ONE", "TWO"]
    request = responses.requests[0]
    assert request["model"] == "gpt-5.1"
    assert request["text"]["format"]["type"] == "json_schema"
    payload = json.loads(request["input"][1]["content"][0]["text"])
    assert [item["id"] for item in payload["items"]] == ["t_000001", "t_000002"]
    assert payload["source_language"] == "EN"


def test_openai_incomplete_response_raises() -> None:
    with pytest.raises(ProviderError):
        _openai(_FakeResponses(status="incomplete")).translate("one", "DE")


def test_openai_rejects_injected_html() -> None:
    provider = _openai(_FakeResponses(transform=lambda text: f"<b>{text}</b>"))
    with pytest.raises(ProviderError):
        provider.translate("one", "DE")


class _ListProvider:
    def __init__(self, result: list[str] | Exception) -> None:
        self.result = result

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> str:
        if isinstance(self.result, Exception):
            raise self.result
        return self.result[0]

    def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> list[str]:
        if isinstance(self.result, Exception):
            raise self.result
        return list(self.result)


def test_try_translate_folds_errors_into_outcome() -> None:
    unit = TranslationUnit(source_lang="EN", target_lang="DE", texts=("Hello",))

    outcome = try_translate(_ListProvider(ProviderError("boom")), unit)

    assert outcome.ok is False
    assert "boom" in outcome.error


def test_try_translate_rejects_wrong_number_of_results() -> None:
    unit = TranslationUnit(source_lang="EN", target_lang="DE", texts=("a b", "c d"))
    outcome = try_translate(_ListProvider(["x"]), unit)
    assert outcome.ok is False


def test_try_translate_success_exposes_text() -> None:
    unit = TranslationUnit(source_lang=None, target_lang="DE", texts=("Hello",))
    outcome = try_translate(_ListProvider(["Hallo"]), unit)
    assert outcome.ok is True
    assert outcome.text == "Hallo"


def test_deepl_drops_glossary_without_source_language() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"translations": [{"text": "Hallo"}]})

    assert _deepl(handler).translate("Hello", "DE", None, "gloss-1") == "Hallo"
    assert seen["body"] == {"text": ["Hello"], "target_lang": "DE"}
