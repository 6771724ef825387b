from __future__ import annotations

from collections.abc import Iterator

from lxml import etree

from weblingo.extract.text_rules import is_skip_tag, should_skip_text, split_whitespace
from weblingo.models import TextNode


def iter_text_nodes(root: etree._Element) -> Iterator[TextNode]:
    """Yield translatable text slots in document order.

    lxml keeps text as `element.text` (before the first child) and
    `child.tail` (after a child), so each yielded node is one of those two
    slots. Subtrees rooted at a skip tag are not entered. The generator
    holds no state of its own; calling it again walks the tree afresh.
    """
    stack: list[tuple[etree._Element, bool]] = [(root, False)]
    while stack:
        element, entered = stack.pop()
        if entered:
            # element's subtree is done; its tail belongs to the parent
            if element is not root:
                node = _make_node(element, "tail", element.tail)
                if node is not None:
                    yield node
            continue

        stack.append((element, True))
        if not isinstance(element.tag, str) or is_skip_tag(element):
            continue
        node = _make_node(element, "text", element.text)
        if node is not None:
            yield node
        for child in reversed(list(element)):
            stack.append((child, False))


def collect_text_nodes(root: etree._Element) -> list[TextNode]:
    return list(iter_text_nodes(root))


def _make_node(element: etree._Element, slot: str, raw: str | None) -> TextNode | None:
    if not raw:
        return None
    _, core, _ = split_whitespace(raw)
    if should_skip_text(core):
        return None
    return TextNode(element=element, slot=slot, raw=raw, original=core)
