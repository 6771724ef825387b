from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from weblingo.models import TranslationResult


def build_report(result: TranslationResult, *, run_params: dict[str, Any]) -> dict[str, Any]:
    report: dict[str, Any] = {
        **result.as_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "params": run_params,
        "sizes": {
            "original_html_chars": len(result.original_html or ""),
            "translated_html_chars": len(result.translated_html or ""),
            "css_chars": len(result.css or ""),
            "original_text_chars": len(result.original_text or ""),
            "translated_text_chars": len(result.translated_text or ""),
        },
        "sanitization": dict(result.sanitization),
        "stats": {},
        "warnings": [],
        "errors": [],
    }
    if result.stats is not None:
        stats = asdict(result.stats)
        report["errors"].extend(stats.pop("failures"))
        report["stats"] = stats
    if result.challenge_detected:
        report["warnings"].append("Bot challenge was not resolved; output holds the challenge page.")
    if not result.success and result.error_message:
        report["errors"].append({"reason": result.error_message})
    return report


def write_report(report: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
