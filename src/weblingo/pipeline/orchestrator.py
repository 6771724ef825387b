from __future__ import annotations

import logging
from collections.abc import Callable

from weblingo.config import RunConfig, is_translation_requested
from weblingo.dom import find_body, parse_document, serialize_document
from weblingo.errors import ConfigurationError
from weblingo.extract.grouper import group_by_context
from weblingo.extract.node_selector import collect_text_nodes
from weblingo.fetch.page_fetcher import fetch_page
from weblingo.models import GroupStats, PageCapture, TextNode, TranslationResult
from weblingo.sanitize.sanitizer import drop_element, sanitize_document
from weblingo.translate.glossary import GlossaryLookup
from weblingo.translate.group_translator import GroupTranslator
from weblingo.translate.providers import TranslationProvider

logger = logging.getLogger(__name__)

DIRECT_HTML_URL = "direct-html"
_TEXT_BREAK_TAGS = tuple(
    "p div section article blockquote header footer main nav "
    "h1 h2 h3 h4 h5 h6 ul ol li table tr td th br hr".split()
)


def extract_plain_text(html_text: str) -> str:
    """Whitespace-normalised body text with scripts and styles removed."""
    root = parse_document(html_text)
    for element in list(root.iter("script", "style")):
        drop_element(element)
    # block boundaries separate words even without whitespace in the markup
    for element in root.iter(*_TEXT_BREAK_TAGS):
        element.text = f" {element.text or ''}"
        element.tail = f" {element.tail or ''}"
    return " ".join(find_body(root).text_content().split())


class PageTranslator:
    def __init__(
        self,
        *,
        config: RunConfig,
        provider: TranslationProvider | None = None,
        glossary_lookup: GlossaryLookup | None = None,
        fetcher: Callable[[RunConfig, str], PageCapture] = fetch_page,
    ) -> None:
        self._config = config
        self._provider = provider
        self._glossary_lookup = glossary_lookup
        self._fetcher = fetcher

    def __enter__(self) -> PageTranslator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the provider and glossary HTTP clients, where they hold one."""
        for collaborator in (self._provider, self._glossary_lookup):
            close = getattr(collaborator, "close", None)
            if callable(close):
                close()

    def translate_page(
        self,
        url: str,
        source_lang: str | None,
        target_lang: str | None,
        glossary_id: str | None = None,
    ) -> TranslationResult:
        try:
            logger.info("Page translation started: %s", url)
            capture = self._fetcher(self._config, url)
            result = TranslationResult(
                original_url=url,
                success=True,
                original_html=capture.html,
                css=capture.css,
                source_lang=source_lang,
                target_lang=target_lang,
                challenge_detected=capture.challenge_detected,
            )
            if capture.challenge_detected:
                logger.warning("Returning content of an unresolved bot challenge for %s", url)

            if target_lang is not None and is_translation_requested(target_lang):
                self._fill_translation(result, capture.html, source_lang, target_lang, glossary_id)
            else:
                logger.info("No translation requested; returning original page")
            result.original_text = extract_plain_text(capture.html)
            return result
        except Exception as exc:  # noqa: BLE001
            logger.exception("Page translation failed: %s", url)
            return TranslationResult(
                original_url=url,
                success=False,
                source_lang=source_lang,
                target_lang=target_lang,
                error_message=str(exc) or type(exc).__name__,
            )

    def translate_html_directly(
        self,
        html_text: str,
        source_lang: str | None,
        target_lang: str | None,
        glossary_id: str | None = None,
    ) -> TranslationResult:
        try:
            logger.info("Direct html translation started (%d chars)", len(html_text))
            result = TranslationResult(
                original_url=DIRECT_HTML_URL,
                success=True,
                original_html=html_text,
                source_lang=source_lang,
                target_lang=target_lang,
            )
            if target_lang is not None and is_translation_requested(target_lang):
                self._fill_translation(result, html_text, source_lang, target_lang, glossary_id)
            result.original_text = extract_plain_text(html_text)
            return result
        except Exception as exc:  # noqa: BLE001
            logger.exception("Direct html translation failed")
            return TranslationResult(
                original_url=DIRECT_HTML_URL,
                success=False,
                source_lang=source_lang,
                target_lang=target_lang,
                error_message=f"HTML translation failed: {exc}",
            )

    def translate_html(
        self,
        html_text: str,
        source_lang: str | None,
        target_lang: str,
        glossary_id: str | None = None,
    ) -> tuple[str, GroupStats, dict[str, int]]:
        """Sanitize, translate text nodes in place and serialize again."""
        if self._provider is None:
            raise ConfigurationError("No translation provider is configured.")
        root = parse_document(html_text)
        sanitization = sanitize_document(root)

        nodes = collect_text_nodes(root)
        groups = group_by_context(nodes, find_body(root))
        logger.info("Collected %d translatable nodes in %d groups", len(nodes), len(groups))

        translator = GroupTranslator(
            self._provider,
            pause_ms=self._config.group_pause_ms,
            workers=self._config.group_workers,
        )
        stats = translator.translate_groups(
            groups,
            source_lang=source_lang,
            target_lang=target_lang,
            glossary_id=glossary_id,
        )

        # provider output is text only, but sanitize once more before it leaves
        for key, value in sanitize_document(root).items():
            sanitization[key] = sanitization.get(key, 0) + value
        _log_untouched(nodes)
        return serialize_document(root), stats, sanitization

    def resolve_glossary_id(
        self, source_lang: str | None, target_lang: str, explicit: str | None
    ) -> str | None:
        if explicit:
            return explicit
        if self._glossary_lookup is None:
            return None
        try:
            glossary_id = self._glossary_lookup.get_glossary_id(source_lang, target_lang)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Glossary lookup failed: %s", exc)
            return None
        if glossary_id:
            logger.info("Using glossary %s (%s -> %s)", glossary_id, source_lang, target_lang)
        return glossary_id

    def _fill_translation(
        self,
        result: TranslationResult,
        html_text: str,
        source_lang: str | None,
        target_lang: str,
        glossary_id: str | None,
    ) -> None:
        glossary = self.resolve_glossary_id(source_lang, target_lang, glossary_id)
        translated_html, stats, sanitization = self.translate_html(
            html_text, source_lang, target_lang, glossary
        )
        result.translated_html = translated_html
        result.translated_text = extract_plain_text(translated_html)
        result.stats = stats
        result.sanitization = sanitization


def _log_untouched(nodes: list[TextNode]) -> None:
    untouched = sum(1 for node in nodes if node.current_text().strip() == node.original)
    if untouched:
        logger.warning("%d text nodes still carry their original text", untouched)
    else:
        logger.debug("All %d text nodes were rewritten", len(nodes))
