"""Browser User-Agent pool and spoofed request headers.

Selection is a pure function of the supplied random source so callers (and
tests) can pass a seeded ``random.Random`` for deterministic output.
"""

from __future__ import annotations

import random

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/128.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/128.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:129.0) "
    "Gecko/20100101 Firefox/129.0",
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/128.0.0.0 Safari/537.36",
)

ACCEPT_LANGUAGE = "en-US,en;q=0.9"


def pick_user_agent(
    rng: random.Random | None = None,
    pool: tuple[str, ...] = USER_AGENTS,
) -> str:
    """Pick one User-Agent from *pool* using *rng* (module RNG if None)."""
    chooser = rng.choice if rng is not None else random.choice
    return chooser(pool)  # noqa: S311


def browser_headers(rng: random.Random | None = None) -> dict[str, str]:
    """Headers mimicking a browser loading the embed page inside an iframe."""
    return {
        "accept": "*/*",
        "accept-language": ACCEPT_LANGUAGE,
        "user-agent": pick_user_agent(rng),
        "sec-fetch-dest": "iframe",
        "sec-fetch-mode": "no-cors",
        "sec-fetch-site": "same-origin",
    }
