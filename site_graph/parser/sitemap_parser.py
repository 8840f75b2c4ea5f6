# File: site_graph/parser/sitemap_parser.py
"""site_graph.parser.sitemap_parser: Разбор sitemap.xml / sitemap_index.xml и извлечение URL."""

from __future__ import annotations

from typing import List

from lxml import etree


def parse_sitemap(xml_content: str) -> List[str]:
    """Разбирает XML sitemap и возвращает список URL из тегов <loc>.

    Для sitemap_index.xml это адреса вложенных карт сайта. Повреждённый XML
    не приводит к исключению: парсер работает в режиме recover, а пустой или
    нечитаемый документ даёт пустой список.

    Пример:
    ```python
    from site_graph.parser.sitemap_parser import parse_sitemap

    urls = parse_sitemap(xml_text)
    print(len(urls))
    ```
    """
    if not xml_content or not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return []
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
