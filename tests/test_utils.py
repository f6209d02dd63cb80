# File: tests/test_utils.py
import pytest

from resource_scout.exceptions import InvalidURL
from resource_scout.utils import file_name, file_type, format_bytes, normalize_url, resolve_url, round_half_up

BASE = "https://example.com/blog/post.html"


@pytest.mark.parametrize("raw", ["example.com", "  example.com/path?q=1  ", "sub.example.org:8080/x"])
def test_normalize_adds_https_to_schemeless(raw):
    assert normalize_url(raw) == "https://" + raw.strip()


def test_normalize_rewrites_http():
    assert normalize_url("http://example.com/a") == "https://example.com/a"


@pytest.mark.parametrize("raw", ["https://example.com", "ftp://files.example.com/pub"])
def test_normalize_keeps_other_schemes(raw):
    assert normalize_url(raw) == raw


@pytest.mark.parametrize("raw", ["", "   ", "https://", "exa mple.com", "https://[::1"])
def test_normalize_rejects_garbage(raw):
    with pytest.raises(InvalidURL):
        normalize_url(raw)


def test_invalid_url_is_value_error():
    with pytest.raises(ValueError):
        normalize_url("https://")


@pytest.mark.parametrize(
    "reference",
    ["", "   ", None, "javascript:alert(1)", "data:image/png;base64,AAAA", "mailto:a@b.c", "blob:https://x/1"],
)
def test_resolve_rejects_non_http(reference):
    assert resolve_url(BASE, reference) is None


@pytest.mark.parametrize("reference", ["http://exa mple.com/a.png", "//cdn .example.net/b.css"])
def test_resolve_rejects_whitespace_in_host(reference):
    assert resolve_url(BASE, reference) is None


def test_resolve_protocol_relative_inherits_scheme():
    assert resolve_url(BASE, "//cdn.example.net/a.png") == "https://cdn.example.net/a.png"
    assert resolve_url("http://example.com/", "//host/a.png") == "http://host/a.png"


@pytest.mark.parametrize(
    "reference,expected",
    [
        ("img/a.png", "https://example.com/blog/img/a.png"),
        ("/static/app.js", "https://example.com/static/app.js"),
        ("../style.css", "https://example.com/style.css"),
        ("  https://other.org/x.woff2 ", "https://other.org/x.woff2"),
    ],
)
def test_resolve_relative(reference, expected):
    assert resolve_url(BASE, reference) == expected


@pytest.mark.parametrize(
    "url,name",
    [
        ("https://example.com", "example.com.html"),
        ("https://example.com/", "example.com.html"),
        ("https://example.com/docs/", "index.html"),
        ("https://example.com/js/app.min.js?v=3", "app.min.js"),
    ],
)
def test_file_name(url, name):
    assert file_name(url) == name


@pytest.mark.parametrize(
    "url,kind",
    [
        ("https://e.com/", "html"),
        ("https://e.com/page.htm", "html"),
        ("https://e.com/a.CSS", "css"),
        ("https://e.com/a.js", "js"),
        ("https://e.com/a.webp", "image"),
        ("https://e.com/a.mp4", "video"),
        ("https://e.com/a.ogg", "video"),
        ("https://e.com/a.mp3", "audio"),
        ("https://e.com/a.woff2", "font"),
        ("https://e.com/api/data", "other"),
    ],
)
def test_file_type(url, kind):
    assert file_type(url) == kind


@pytest.mark.parametrize(
    "size,text",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1024, "1 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB")],
)
def test_format_bytes(size, text):
    assert format_bytes(size) == text


@pytest.mark.parametrize(
    "value,expected",
    [(0.5, 1), (1.49, 1), (2.5, 3), (93.75, 94), (81.195, 81), (-2.5, -2), (0.0, 0)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
