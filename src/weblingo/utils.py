from __future__ import annotations

import hashlib
import re
from pathlib import Path
from urllib.parse import urlparse

_SAFE_SEGMENT_RE = re.compile(r"[^a-zA-Z0-9._-]+")


def slugify_url(url: str, max_length: int = 80) -> str:
    parsed = urlparse(url)
    host = (parsed.hostname or "page").lower()
    path = parsed.path.strip("/") or "index"
    slug = _SAFE_SEGMENT_RE.sub("-", f"{host}-{path}").strip("-") or "snapshot"
    if len(slug) <= max_length:
        return slug
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:10]
    return f"{slug[: max_length - 11]}-{digest}".strip("-")


def unique_output_dir(output_root: Path, slug: str) -> Path:
    candidate = output_root / slug
    index = 2
    while candidate.exists():
        candidate = output_root / f"{slug}-{index}"
        index += 1
    return candidate
