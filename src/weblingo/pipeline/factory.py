from __future__ import annotations

from weblingo.config import RunConfig
from weblingo.errors import ConfigurationError
from weblingo.pipeline.orchestrator import PageTranslator
from weblingo.translate.glossary import DeepLGlossaryLookup, GlossaryLookup, StaticGlossaryLookup
from weblingo.translate.providers import DeepLProvider, OpenAIProvider, TranslationProvider

PROVIDERS = ("deepl", "openai")


def build_provider(config: RunConfig) -> TranslationProvider:
    name = config.provider.strip().lower()
    if name == "deepl":
        if not config.deepl_api_key:
            raise ConfigurationError("DEEPL_AUTH_KEY is missing; cannot use the DeepL provider.")
        return DeepLProvider(
            api_key=config.deepl_api_key,
            api_url=config.deepl_api_url,
            timeout_seconds=config.provider_timeout_s,
        )
    if name == "openai":
        if not config.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is missing; cannot use the OpenAI provider.")
        return OpenAIProvider(
            api_key=config.openai_api_key,
            model=config.model,
            timeout_seconds=config.provider_timeout_s,
        )
    raise ConfigurationError(f"Unknown provider {config.provider!r}; expected one of {PROVIDERS}.")


def build_glossary_lookup(config: RunConfig) -> GlossaryLookup | None:
    if config.glossaries.strip():
        return StaticGlossaryLookup.from_string(config.glossaries)
    if config.provider.strip().lower() == "deepl" and config.deepl_api_key:
        return DeepLGlossaryLookup(
            api_key=config.deepl_api_key,
            api_url=config.deepl_api_url,
            timeout_seconds=config.provider_timeout_s,
        )
    return None


def build_page_translator(config: RunConfig) -> PageTranslator:
    """Wire a translator from config; no provider is built when no translation is asked for."""
    if not config.translation_requested:
        return PageTranslator(config=config)
    return PageTranslator(
        config=config,
        provider=build_provider(config),
        glossary_lookup=build_glossary_lookup(config),
    )
