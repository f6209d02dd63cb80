# === FILE: resource_scout/parser/html_parser.py ===
"""Resource discovery for ResourceScout.

Walks the markup of the root document and collects every externally
referenced asset the browser would download:

* images: ``src`` with lazy-loading fallbacks (``data-src``, ``srcset``);
* scripts, stylesheets and icons;
* media (``video``/``audio``/``source``), frames, embeds and objects;
* ``url(...)`` references in ``<style>`` blocks and inline ``style`` attributes.

Every reference goes through :func:`resource_scout.utils.resolve_url`; anything
that does not resolve to an absolute http(s) URL is dropped without error, so
discovery always returns a (possibly empty) list.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from resource_scout.logger import logger
from resource_scout.utils import resolve_url

__all__: Sequence[str] = ("discover_resources", "extract_css_urls", "is_placeholder")

_CSS_URL_RE = re.compile(r"""url\s*\(\s*['"]?([^'")\s]+)['"]?\s*\)""", re.IGNORECASE)
_PLACEHOLDER_MARKERS = ("placeholder", "blank", "space")


class _UrlSet:
    """Insertion-ordered set of resolved URLs."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self._urls: Dict[str, None] = {}

    def add(self, reference: Optional[str]) -> None:
        resolved = resolve_url(self.base_url, reference)
        if resolved:
            self._urls[resolved] = None

    def as_list(self) -> List[str]:
        return list(self._urls)


def is_placeholder(src: Optional[str]) -> bool:
    """True for empty sources, ``data:`` URIs and typical lazy-loading stand-ins."""
    if not src:
        return True
    lower = src.lower()
    return lower.startswith("data:") or any(marker in lower for marker in _PLACEHOLDER_MARKERS)


def _attr(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def extract_css_urls(css: str, base_url: str) -> List[str]:
    """Return resolved ``url(...)`` references found in a CSS fragment."""
    found = _UrlSet(base_url)
    _collect_css(css, found)
    return found.as_list()


def _collect_css(css: Optional[str], urls: _UrlSet) -> None:
    if not css:
        return
    for match in _CSS_URL_RE.finditer(css):
        urls.add(match.group(1))


def _collect_images(soup: BeautifulSoup, urls: _UrlSet) -> None:
    for img in soup.find_all("img"):
        src = _attr(img, "src") or _attr(img, "data-src")
        if is_placeholder(src):
            src = _attr(img, "data-src")

        if is_placeholder(src):
            srcset = _attr(img, "srcset") or _attr(img, "data-srcset")
            if srcset:
                for candidate in srcset.split(","):
                    parts = candidate.split()
                    if parts:
                        urls.add(parts[0])

        urls.add(src)


def _collect_links(soup: BeautifulSoup, urls: _UrlSet) -> None:
    for link in soup.find_all("link"):
        rel = (_attr(link, "rel") or "").lower()
        if "stylesheet" in rel or "icon" in rel:
            urls.add(_attr(link, "href"))


def discover_resources(html: str, base_url: str) -> List[str]:
    """Collect absolute resource URLs referenced by *html*, deduplicated and in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    urls = _UrlSet(base_url)

    _collect_images(soup, urls)

    for script in soup.find_all("script", src=True):
        urls.add(_attr(script, "src"))

    _collect_links(soup, urls)

    for media in soup.find_all(["video", "audio", "source"]):
        urls.add(_attr(media, "src") or _attr(media, "data-src"))

    for name in ("iframe", "embed"):
        for tag in soup.find_all(name, src=True):
            urls.add(_attr(tag, "src"))

    for obj in soup.find_all("object", attrs={"data": True}):
        urls.add(_attr(obj, "data"))

    for style in soup.find_all("style"):
        _collect_css(style.get_text(), urls)

    for element in soup.find_all(attrs={"style": True}):
        _collect_css(_attr(element, "style"), urls)

    found = urls.as_list()
    logger.debug("Discovered %d resource URLs on %s", len(found), base_url)
    return found
