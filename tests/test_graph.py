# File: tests/test_graph.py
from site_graph.crawler.models import CrawledPage
from site_graph.graph import (
    EXTERNAL,
    INTERNAL,
    LinkNode,
    analyze_link_distribution,
    build_graph,
    classify_page_type,
    graph_stats,
    suggest_internal_links,
)

SEED = "https://ex.com/"


def make_page(url, *anchors, depth=1, parent=SEED, requested=None, status=200):
    hrefs = [a if isinstance(a, str) else a[0] for a in anchors]
    pairs = [(a, "") if isinstance(a, str) else a for a in anchors]
    return CrawledPage(
        url=url,
        requested_url=requested or url,
        title=url.rsplit("/", 1)[-1] or "home",
        status_code=status,
        depth=depth,
        parent_url=parent,
        outgoing_links=tuple(hrefs),
        anchors=tuple(pairs),
    )


def test_edges_incoming_counts_and_orphans():
    pages = [
        make_page(SEED, ("https://ex.com/a", "A"), "https://ex.com/b", "https://other.com/", depth=0, parent=None),
        make_page("https://ex.com/a", "https://ex.com/b", SEED),
        make_page("https://ex.com/b"),
        make_page("https://ex.com/lonely", "https://ex.com/a"),
    ]
    graph = build_graph(pages, SEED)

    assert graph.node("https://ex.com/a").incoming_links == 2
    assert graph.node("https://ex.com/b").incoming_links == 2
    assert graph.node(SEED).incoming_links == 1
    assert graph.node("https://ex.com/lonely").is_orphan
    assert graph.orphan_pages == ("https://ex.com/lonely",)
    assert not graph.node(SEED).is_orphan

    first = graph.edges[0]
    assert (first.source, first.target, first.anchor_text, first.type) == (SEED, "https://ex.com/a", "A", INTERNAL)
    assert [e.target for e in graph.external_edges] == ["https://other.com/"]
    assert graph.external_edges[0].type == EXTERNAL
    assert graph.node(SEED).outgoing_links == 2


def test_seed_is_never_orphan():
    graph = build_graph([make_page(SEED, depth=0, parent=None)], SEED)
    assert graph.node(SEED).incoming_links == 0
    assert not graph.node(SEED).is_orphan
    assert graph.orphan_pages == ()


def test_page_with_no_incoming_edges_is_orphan():
    pages = [make_page(SEED, depth=0, parent=None), make_page("https://ex.com/x")]
    graph = build_graph(pages, SEED)
    assert graph.node("https://ex.com/x").is_orphan


def test_self_links_and_repeated_links_do_not_inflate_counts():
    pages = [
        make_page(SEED, "https://ex.com/a", "https://ex.com/a", depth=0, parent=None),
        make_page("https://ex.com/a", "https://ex.com/a"),
    ]
    graph = build_graph(pages, SEED)
    assert graph.node("https://ex.com/a").incoming_links == 1
    assert len(graph.edges) == 1


def test_uncrawled_targets_count_and_are_reported():
    pages = [
        make_page(SEED, "https://ex.com/a", "https://ex.com/deep", depth=0, parent=None),
        make_page("https://ex.com/a", "https://ex.com/deep"),
    ]
    graph = build_graph(pages, SEED)

    assert graph.uncrawled_targets == {"https://ex.com/deep": 2}
    assert graph.node("https://ex.com/deep") is None
    assert len(graph.internal_edges) == 3


def test_links_to_redirected_url_credit_the_landing_page():
    pages = [
        make_page(SEED, "https://ex.com/old", depth=0, parent=None),
        make_page("https://ex.com/new", requested="https://ex.com/old"),
    ]
    graph = build_graph(pages, SEED)

    assert graph.node("https://ex.com/new").incoming_links == 1
    assert graph.uncrawled_targets == {}
    assert graph.orphan_pages == ()


def test_seed_defaults_to_page_without_parent():
    pages = [make_page("https://ex.com/a"), make_page(SEED, "https://ex.com/a", depth=0, parent=None)]
    assert build_graph(pages).seed_url == SEED
    assert build_graph([]).nodes == ()


def test_graph_stats():
    pages = [
        make_page(SEED, "https://ex.com/a", "https://ex.com/b", depth=0, parent=None),
        make_page("https://ex.com/a", "https://ex.com/b", depth=1),
        make_page("https://ex.com/b", depth=2),
    ]
    stats = graph_stats(build_graph(pages, SEED))
    assert stats.total_pages == 3
    assert stats.total_links == 3
    assert stats.avg_links_per_page == 1.0
    assert stats.max_depth == 2


def test_classify_page_type():
    assert classify_page_type("https://ex.com/") == "homepage"
    assert classify_page_type("https://ex.com/blog/hello") == "blog"
    assert classify_page_type("https://ex.com/shop/item") == "product"
    assert classify_page_type("https://ex.com/category/shoes") == "category"
    assert classify_page_type("https://ex.com/about-us") == "information"
    assert classify_page_type("https://ex.com/pricing") == "page"


def _node(url, incoming, outgoing, orphan=False, page_type="page"):
    return LinkNode(url, url, 1, incoming, outgoing, orphan, page_type, 200)


def test_link_distribution_and_suggestions():
    nodes = [
        _node("https://ex.com/", 1, 8, page_type="homepage"),
        _node("https://ex.com/x", 6, 1),
        _node("https://ex.com/y", 1, 1),
        _node("https://ex.com/z", 0, 0, orphan=True),
    ]
    dist = analyze_link_distribution(nodes)
    assert [n.url for n in dist.hubs] == ["https://ex.com/"]
    assert [n.url for n in dist.authorities] == ["https://ex.com/x"]
    assert "https://ex.com/z" in [n.url for n in dist.under_linked]

    suggestions = suggest_internal_links(nodes)
    assert suggestions[0].to_page == "https://ex.com/z"
    assert suggestions[0].from_page == "https://ex.com/x"
    assert suggestions[0].priority == "high"
    assert any(s.to_page == "https://ex.com/y" and s.from_page == "https://ex.com/" for s in suggestions)


def test_link_distribution_empty():
    assert analyze_link_distribution([]).hubs == []


def test_redirected_seed_is_resolved_to_landing_page():
    pages = [
        make_page("https://ex.com/", "https://ex.com/a", depth=0, parent=None, requested="http://ex.com/"),
        make_page("https://ex.com/a", parent="https://ex.com/"),
    ]
    graph = build_graph(pages, "http://ex.com/")

    assert graph.seed_url == "https://ex.com/"
    assert graph.orphan_pages == ()
    assert not graph.node("https://ex.com/").is_orphan
