from __future__ import annotations

from collections.abc import Iterable

from lxml import etree

from weblingo.dom import find_body
from weblingo.models import ContextGroup, TextNode

DISCOURSE_TAGS = frozenset(
    {
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "li",
        "td",
        "th",
        "blockquote",
        "article",
        "section",
        "div",
        "span",
    }
)


def discourse_ancestor(node: TextNode, body: etree._Element) -> etree._Element:
    current = node.container
    while current is not None:
        if current is body:
            return body
        tag = current.tag
        if isinstance(tag, str) and tag.lower() in DISCOURSE_TAGS:
            return current
        current = current.getparent()
    return body


def group_by_context(
    nodes: Iterable[TextNode], body: etree._Element | None = None
) -> list[ContextGroup]:
    """Split nodes into runs that share one discourse ancestor.

    Only neighbours are merged, so a block interrupted by another block
    yields two groups and document order is kept.
    """
    groups: list[ContextGroup] = []
    for node in nodes:
        if body is None:
            body = find_body(node.element.getroottree().getroot())
        anchor = discourse_ancestor(node, body)
        if groups and groups[-1].anchor is anchor:
            groups[-1].nodes.append(node)
            continue
        groups.append(ContextGroup(anchor=anchor, nodes=[node]))
    return groups
