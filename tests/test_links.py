import pytest

from mdpreview.links import is_external_url, navigation_url, rewrite_link

BASE = "/notes/a/doc.md"


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com",
        "http://example.com/a/../b?x=1#y",
        "mailto:me@example.com",
        "ftp://host/file",
    ],
)
def test_external_urls_pass_through(url):
    assert is_external_url(url)
    assert rewrite_link(url, BASE) == url


@pytest.mark.parametrize(
    "ref", ["../other.md", "/abs/other.md", "C:/notes/x.md", "file:///x.md"]
)
def test_local_references_are_not_external(ref):
    assert not is_external_url(ref)


def test_relative_link_becomes_navigation_url():
    assert rewrite_link("../other.md", BASE) == "/?path=/notes/other.md"


def test_relative_link_under_cwd():
    assert rewrite_link("../other.md", BASE, cwd="/notes") == "/?path=other.md"


def test_link_outside_cwd_stays_absolute():
    assert rewrite_link("../other.md", BASE, cwd="/home") == (
        "/?path=/notes/other.md"
    )


def test_fragment_is_kept():
    assert rewrite_link("b.md#usage", BASE) == "/?path=/notes/a/b.md#usage"


def test_in_page_anchor_is_untouched():
    assert rewrite_link("#usage", BASE) == "#usage"


def test_unparseable_reference_is_untouched():
    assert rewrite_link("", BASE) == ""
    assert rewrite_link("?q=1", BASE) == "?q=1"


def test_local_link_always_has_navigation_shape():
    for ref in ["x.md", "./x.md", "../../../../x", "sub/dir/", "x%20y.md"]:
        assert rewrite_link(ref, BASE).startswith("/?path=")


def test_navigation_url_escapes_query_breakers():
    assert navigation_url("/n/a b&c#d+e%f.md") == (
        "/?path=/n/a%20b%26c%23d%2Be%25f.md"
    )
    assert navigation_url("/notes/other.md") == "/?path=/notes/other.md"
