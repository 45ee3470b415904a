"""CSS-selector-based HTML extraction.

Thin helpers over BeautifulSoup so structured markup (the embed page's
server list) is queried as a document tree, never with regexes.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(root: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    """Select elements matching a CSS *selector*, in document order."""
    return list(root.select(selector))


def attr_values(items: list[Tag], attr: str) -> list[str]:
    """Collect non-empty *attr* values from *items*, keeping order and duplicates."""
    values: list[str] = []
    for item in items:
        val = item.get(attr)
        if isinstance(val, list):
            val = " ".join(val)
        if val:
            values.append(val.strip())
    return [v for v in values if v]
