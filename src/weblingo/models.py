from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lxml import etree


@dataclass(frozen=True, slots=True)
class PageCapture:
    html: str
    css: str
    final_url: str = ""
    challenge_detected: bool = False


@dataclass(slots=True)
class TextNode:
    element: etree._Element
    slot: str  # text|tail
    raw: str
    original: str

    @property
    def container(self) -> etree._Element | None:
        """Nearest element enclosing the text."""
        if self.slot == "text":
            return self.element
        return self.element.getparent()

    def current_text(self) -> str:
        value = self.element.text if self.slot == "text" else self.element.tail
        return value or ""

    def set_text(self, value: str) -> None:
        if self.slot == "text":
            self.element.text = value
        else:
            self.element.tail = value


@dataclass(slots=True)
class ContextGroup:
    anchor: etree._Element
    nodes: list[TextNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TranslationUnit:
    source_lang: str | None
    target_lang: str
    texts: tuple[str, ...]
    glossary_id: str | None = None

    @property
    def text(self) -> str:
        return self.texts[0] if self.texts else ""


@dataclass(frozen=True, slots=True)
class ProviderOutcome:
    ok: bool
    texts: tuple[str, ...] = ()
    error: str = ""

    @property
    def text(self) -> str:
        return self.texts[0] if self.texts else ""


@dataclass(slots=True)
class GroupStats:
    groups: int = 0
    nodes: int = 0
    grouped_ok: int = 0
    fallback_groups: int = 0
    fallback_nodes_ok: int = 0
    failed_nodes: int = 0
    failures: list[dict[str, str]] = field(default_factory=list)


@dataclass(slots=True)
class TranslationResult:
    original_url: str
    success: bool
    original_html: str | None = None
    translated_html: str | None = None
    css: str | None = None
    original_text: str | None = None
    translated_text: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    error_message: str | None = None
    challenge_detected: bool = False
    sanitization: dict[str, int] = field(default_factory=dict)
    stats: GroupStats | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "original_url": self.original_url,
            "success": self.success,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "error_message": self.error_message,
            "challenge_detected": self.challenge_detected,
        }
