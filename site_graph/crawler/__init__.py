"""site_graph.crawler: traversal engine, frontier, fetcher contract and site probe."""
