from __future__ import annotations

from weblingo.translate.glossary import DeepLGlossaryLookup, GlossaryLookup, StaticGlossaryLookup
from weblingo.translate.group_translator import GroupTranslator, join_group_text
from weblingo.translate.providers import (
    DeepLProvider,
    OpenAIProvider,
    TranslationProvider,
    try_translate,
)

__all__ = [
    "DeepLGlossaryLookup",
    "DeepLProvider",
    "GlossaryLookup",
    "GroupTranslator",
    "OpenAIProvider",
    "StaticGlossaryLookup",
    "TranslationProvider",
    "join_group_text",
    "try_translate",
]
