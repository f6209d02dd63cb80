# File: resource_scout/utils.py
"""resource_scout.utils: URL normalisation/resolution and small formatting helpers."""

from __future__ import annotations

import math
import re
from typing import Optional, Sequence
from urllib.parse import urljoin, urlsplit

from resource_scout.exceptions import InvalidURL
from resource_scout.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "resolve_url",
    "file_name",
    "file_type",
    "format_bytes",
    "round_half_up",
    "RESOURCE_TYPES",
)

RESOURCE_TYPES: Sequence[str] = ("html", "css", "js", "image", "video", "audio", "font", "other")

_ALLOWED_SCHEMES = ("http", "https")
_WHITESPACE_RE = re.compile(r"\s")

_IMAGE_RE = re.compile(r"\.(jpg|jpeg|png|gif|svg|webp|ico|bmp)$")
_VIDEO_RE = re.compile(r"\.(mp4|webm|ogg|avi|mov)$")
_AUDIO_RE = re.compile(r"\.(mp3|wav|ogg|m4a)$")
_FONT_RE = re.compile(r"\.(woff|woff2|ttf|eot|otf)$")


def normalize_url(text: str) -> str:
    """Приводит ввод пользователя к абсолютному URL.

    ``http://`` переписывается на ``https://``, ввод без ``://`` получает
    ``https://``; остальные схемы не трогаем.
    """
    url = text.strip()
    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]
    elif "://" not in url:
        url = "https://" + url

    try:
        parsed = urlsplit(url)
        parsed.port  # raises ValueError on a malformed port
    except ValueError as exc:
        raise InvalidURL(text) from exc
    if not parsed.scheme or not parsed.netloc or _WHITESPACE_RE.search(parsed.netloc):
        raise InvalidURL(text)

    logger.debug("Normalized URL: %s -> %s", text, url)
    return url


def resolve_url(base: str, relative: Optional[str]) -> Optional[str]:
    """Resolve *relative* against *base*; return None unless the result is http(s)."""
    if not relative or not relative.strip():
        return None

    trimmed = relative.strip()
    try:
        if trimmed.startswith("//"):
            trimmed = f"{urlsplit(base).scheme}:{trimmed}"
        resolved = urljoin(base, trimmed)
        parsed = urlsplit(resolved)
    except ValueError:
        return None

    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.netloc:
        return None
    if _WHITESPACE_RE.search(parsed.netloc):
        return None
    return resolved


def file_name(url: str) -> str:
    """Имя файла из URL: последний сегмент пути, ``<host>.html`` для корня."""
    parsed = urlsplit(url)
    path = parsed.path
    if not path or path == "/":
        return f"{parsed.hostname or parsed.netloc}.html"
    name = path.rsplit("/", 1)[-1]
    return name or "index.html"


def file_type(url: str) -> str:
    """Classify a URL into one of :data:`RESOURCE_TYPES` by its file extension."""
    name = file_name(url).lower()
    if name.endswith((".html", ".htm")):
        return "html"
    if name.endswith(".css"):
        return "css"
    if name.endswith(".js"):
        return "js"
    if _IMAGE_RE.search(name):
        return "image"
    if _VIDEO_RE.search(name):
        return "video"
    if _AUDIO_RE.search(name):
        return "audio"
    if _FONT_RE.search(name):
        return "font"
    return "other"


def format_bytes(size: float, decimals: int = 2) -> str:
    """Human-readable 1024-based size, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    index = 0
    while size >= 1024 ** (index + 1) and index < len(units) - 1:
        index += 1
    value = round(size / 1024 ** index, decimals)
    return f"{value:g} {units[index]}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return int(math.floor(value + 0.5))
