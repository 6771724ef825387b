from __future__ import annotations

from weblingo.extract.grouper import DISCOURSE_TAGS, discourse_ancestor, group_by_context
from weblingo.extract.node_selector import collect_text_nodes, iter_text_nodes
from weblingo.extract.text_rules import SKIP_TAGS, should_skip_text, split_whitespace

__all__ = [
    "DISCOURSE_TAGS",
    "SKIP_TAGS",
    "collect_text_nodes",
    "discourse_ancestor",
    "group_by_context",
    "iter_text_nodes",
    "should_skip_text",
    "split_whitespace",
]
