"""Common infrastructure utilities."""

from __future__ import annotations

from .extractors import extract_first_match
from .html_selectors import parse_html, select_items
from .user_agents import browser_headers, pick_user_agent

__all__ = [
    "browser_headers",
    "extract_first_match",
    "parse_html",
    "pick_user_agent",
    "select_items",
]
