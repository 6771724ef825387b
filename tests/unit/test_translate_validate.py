from __future__ import annotations

from weblingo.translate.validate import validate_deepl_translations, validate_item_translations


def test_validate_accepts_matching_ids() -> None:
    outcome = validate_item_translations(
        '{"translations":[{"id":"t_000001","text":"Hallo"},{"id":"t_000002","text":"Welt"}]}',
        expected_ids=["t_000001", "t_000002"],
        sources=["Hello", "World"],
    )
    assert outcome.ok
    assert outcome.texts == ["Hallo", "Welt"]


def test_validate_reports_order_and_coverage_errors() -> None:
    swapped = validate_item_translations(
        '{"translations":[{"id":"t_000002","text":"Welt"},{"id":"t_000001","text":"Hallo"}]}',
        expected_ids=["t_000001", "t_000002"],
        sources=["Hello", "World"],
    )
    missing = validate_item_translations(
        '{"translations":[{"id":"t_000001","text":"Hallo"}]}',
        expected_ids=["t_000001", "t_000002"],
        sources=["Hello", "World"],
    )
    assert swapped.error == "id_order_error"
    assert missing.error == "id_coverage_error"


def test_validate_rejects_bad_json_and_schema() -> None:
    assert validate_item_translations("{", expected_ids=[], sources=[]).error == "json_parse_error"
    assert (
        validate_item_translations('{"items": []}', expected_ids=[], sources=[]).error
        == "schema_error"
    )


def test_validate_allows_markup_already_in_source() -> None:
    outcome = validate_item_translations(
        '{"translations":[{"id":"t_000001","text":"Nutze <b>fett</b>"}]}',
        expected_ids=["t_000001"],
        sources=["Use <b>bold</b>"],
    )
    assert outcome.ok


def test_validate_deepl_payload() -> None:
    ok = validate_deepl_translations({"translations": [{"text": "Hallo"}]}, expected_count=1)
    mismatch = validate_deepl_translations({"translations": []}, expected_count=1)
    broken = validate_deepl_translations({"result": "Hallo"}, expected_count=1)

    assert ok.texts == ["Hallo"]
    assert mismatch.error == "count_mismatch"
    assert broken.error == "schema_error"
