# File: tests/test_utils.py
import pytest
from site_graph.errors import InvalidUrlError
from site_graph.utils import extract_host, normalize_url, remove_duplicates, site_origin, try_normalize


@pytest.mark.parametrize(
    "raw,base,expected",
    [
        ("https://Example.COM/Path/", None, "https://example.com/Path"),
        ("https://example.com", None, "https://example.com/"),
        ("https://example.com/", None, "https://example.com/"),
        ("https://example.com/a#section", None, "https://example.com/a"),
        ("https://example.com/a/?b=2&a=1", None, "https://example.com/a?b=2&a=1"),
        ("/docs/", "https://example.com/a/b", "https://example.com/docs"),
        ("c", "https://example.com/a/b", "https://example.com/a/c"),
        ("?page=2", "https://example.com/list", "https://example.com/list?page=2"),
        ("#top", "https://example.com/page", "https://example.com/page"),
        ("//cdn.example.com/x", "https://example.com/", "https://cdn.example.com/x"),
        ("HTTP://EXAMPLE.com:8080/A", None, "http://example.com:8080/A"),
    ],
)
def test_normalize_url(raw, base, expected):
    assert normalize_url(raw, base) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "javascript:void(0)",
        "mailto:someone@example.com",
        "tel:+123456",
        "ftp://example.com/file",
        "http://",
        "https://example.com:notaport/",
        "http://[::1",
        "http://a..b/",
        "https://.example.com/",
        "http://" + "a" * 64 + ".com/",
        "",
        "just some words",
    ],
)
def test_normalize_url_rejects_invalid(raw):
    with pytest.raises(InvalidUrlError):
        normalize_url(raw)


@pytest.mark.parametrize(
    "raw",
    [
        "https://Example.com/a/b/",
        "https://example.com/a//",
        "https://example.com/?q=1#frag",
        "http://example.com:8000/x/y?z=%20",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize_url(raw)
    assert normalize_url(once) == once


def test_query_variants_stay_distinct():
    assert normalize_url("https://ex.com/p?a=1") != normalize_url("https://ex.com/p?a=2")


def test_try_normalize_returns_none_for_invalid():
    assert try_normalize("mailto:x@example.com") is None
    assert try_normalize("/a", "https://ex.com/") == "https://ex.com/a"


def test_host_and_origin_helpers():
    assert extract_host("https://User@Example.com:8443/a") == "example.com"
    assert extract_host("not a url") == ""
    assert site_origin("https://Example.com:8443/a/b?c") == "https://example.com:8443"


def test_remove_duplicates_keeps_order():
    assert remove_duplicates(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
