from __future__ import annotations

from weblingo.sanitize.sanitizer import drop_element, sanitize_document

__all__ = ["drop_element", "sanitize_document"]
