from __future__ import annotations

from lxml import etree, html

_EMPTY_DOCUMENT = b"<html><head></head><body></body></html>"


def parse_document(html_text: str) -> html.HtmlElement:
    """Parse markup into a full document tree, always with <html> and <body>."""
    data = html_text.encode("utf-8") if html_text.strip() else _EMPTY_DOCUMENT
    # default_doctype=False: only a doctype present in the source is kept
    parser = html.HTMLParser(encoding="utf-8", default_doctype=False)
    return html.document_fromstring(data, parser=parser)


def serialize_document(root: etree._Element) -> str:
    """Serialize the whole tree, including its doctype when the source had one."""
    return html.tostring(root.getroottree(), encoding="unicode", method="html")


def find_body(root: etree._Element) -> etree._Element:
    bodies = root.xpath("//body")
    if bodies and isinstance(bodies[0], etree._Element):
        return bodies[0]
    return root
