"""Exception hierarchy for weblingo.

Only engine start-up failures abort a request. Everything else below the
orchestrator is recovered in place and reported through logs and stats.
"""

from __future__ import annotations


class WeblingoError(Exception):
    """Base exception for all weblingo errors."""


class FetchError(WeblingoError):
    """Browser engine could not be started or the page could not be read at all."""


class ProviderError(WeblingoError):
    """Translation provider call failed or returned an unusable response."""


class GlossaryLookupError(WeblingoError):
    """Glossary id could not be resolved from the lookup backend."""


class ConfigurationError(WeblingoError):
    """Run configuration is incomplete, e.g. a provider without credentials."""
