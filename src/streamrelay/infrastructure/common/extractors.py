"""Pattern extraction over opaque page/script text.

The embed site hides its redirect targets inside inline script literals.
All knowledge of that format lives in the patterns below so a markup change
on the third-party side only touches this module.
"""

from __future__ import annotations

import re

# First ``src="..."`` in the embed page (the player iframe).
IFRAME_SRC_RE = re.compile(r'src="([^"]*)"')

# ``src: '/prorcp/...'`` inside the rcp page script.
RCP_SRC_RE = re.compile(r"src:\s*'([^']*)'")

# ``file: 'https://...'`` inside the prorcp player setup.
PRORCP_FILE_RE = re.compile(r"file:\s*'([^']*)'")

PRORCP_PREFIX = "/prorcp/"


def extract_first_match(text: str, pattern: re.Pattern[str] | str) -> str | None:
    """Return the first capture group of *pattern* in *text*, or None.

    An empty capture counts as a match and is returned as ``""``; callers
    decide whether empty is usable.
    """
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1)


def strip_prorcp_prefix(path: str) -> str:
    """Drop the first ``/prorcp/`` occurrence from an rcp redirect path."""
    return path.replace(PRORCP_PREFIX, "", 1)
