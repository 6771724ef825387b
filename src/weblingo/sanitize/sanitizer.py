from __future__ import annotations

import logging

from lxml import etree

logger = logging.getLogger(__name__)

SPA_MOUNT_ATTRS = (
    "data-reactroot",
    "data-react-helmet",
    "data-reactid",
    "data-server-rendered",
)
DISABLED_MARKER = "data-disabled"


def sanitize_document(root: etree._Element) -> dict[str, int]:
    """Make a parsed document inert, in place.

    Safe to run any number of times; a second pass finds nothing to do.
    """
    counters = {
        "scripts_removed": 0,
        "script_links_removed": 0,
        "handlers_stripped": 0,
        "mount_markers_stripped": 0,
        "iframes_disabled": 0,
    }
    _remove_scripts(root, counters)
    _remove_script_links(root, counters)
    _strip_inline_handlers(root, counters)
    _strip_mount_markers(root, counters)
    _disable_iframes(root, counters)
    if any(counters.values()):
        logger.debug("Sanitized document: %s", counters)
    return counters


def drop_element(element: etree._Element) -> None:
    """Remove an element but keep the text that follows it."""
    parent = element.getparent()
    if parent is None:
        return
    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)


def _remove_scripts(root: etree._Element, counters: dict[str, int]) -> None:
    # script[type=module] and friends are all plain <script> elements
    for element in list(root.iter("script", "noscript")):
        drop_element(element)
        counters["scripts_removed"] += 1


def _link_rels(link: etree._Element) -> set[str]:
    return {part.strip().lower() for part in (link.get("rel") or "").split()}


def _remove_script_links(root: etree._Element, counters: dict[str, int]) -> None:
    for link in list(root.iter("link")):
        rel_values = _link_rels(link)
        as_value = (link.get("as") or "").strip().lower()
        if (
            "modulepreload" in rel_values
            or "manifest" in rel_values
            or ("preload" in rel_values and as_value == "script")
        ):
            drop_element(link)
            counters["script_links_removed"] += 1


def _strip_inline_handlers(root: etree._Element, counters: dict[str, int]) -> None:
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        for attr in list(element.attrib.keys()):
            if attr.lower().startswith("on"):
                element.attrib.pop(attr, None)
                counters["handlers_stripped"] += 1


def _strip_mount_markers(root: etree._Element, counters: dict[str, int]) -> None:
    selector = " | ".join(f"//*[@{name}]" for name in SPA_MOUNT_ATTRS)
    for element in root.xpath(selector):
        if not isinstance(element, etree._Element):
            continue
        for name in SPA_MOUNT_ATTRS:
            if element.attrib.pop(name, None) is not None:
                counters["mount_markers_stripped"] += 1


def _disable_iframes(root: etree._Element, counters: dict[str, int]) -> None:
    for iframe in root.xpath("//iframe[@src]"):
        if not isinstance(iframe, etree._Element):
            continue
        iframe.attrib.pop("src", None)
        iframe.set(DISABLED_MARKER, "true")
        counters["iframes_disabled"] += 1
