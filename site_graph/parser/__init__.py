"""site_graph.parser: HTML and sitemap parsing."""
