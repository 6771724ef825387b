from __future__ import annotations

import re
from collections.abc import Sequence

from weblingo.extract.text_rules import split_whitespace
from weblingo.models import ContextGroup, TextNode

# XML 1.0 disallows these control/surrogate ranges; lxml refuses them as text.
_INVALID_XML_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\uD800-\uDFFF\uFFFE\uFFFF]")
EMPTY_SEGMENT = " "


def split_proportionally(originals: Sequence[str], unit: str, translated: str) -> list[str]:
    """Cut `translated` into one contiguous piece per original text.

    Each piece gets `len(original) / len(unit)` of the translated length,
    walking left to right; the last piece takes whatever is left. Pieces
    are trimmed and an empty piece becomes a single space.
    """
    if not originals:
        return []
    if len(originals) == 1:
        return [translated.strip()]

    total_length = len(unit)
    if total_length == 0:
        return [EMPTY_SEGMENT] * (len(originals) - 1) + [translated.strip() or EMPTY_SEGMENT]

    translated_length = len(translated)
    cursor = 0
    segments: list[str] = []
    last_index = len(originals) - 1
    for index, original in enumerate(originals):
        if index == last_index:
            segment = translated[cursor:]
        else:
            ratio = len(original) / total_length
            end = min(cursor + int(translated_length * ratio), translated_length)
            segment = translated[cursor:end]
            cursor = end
        segments.append(segment.strip() or EMPTY_SEGMENT)
    return segments


def apply_text(node: TextNode, translated: str) -> None:
    """Write a translated core into the node, keeping its own outer whitespace."""
    lead, _, trail = split_whitespace(node.raw)
    node.set_text(_INVALID_XML_RE.sub("", f"{lead}{translated}{trail}"))


def distribute(group: ContextGroup, unit: str, translated: str) -> list[str]:
    segments = split_proportionally([node.original for node in group.nodes], unit, translated)
    for node, segment in zip(group.nodes, segments):
        apply_text(node, segment)
    return segments
