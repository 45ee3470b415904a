"""Tests for User-Agent rotation and spoofed browser headers."""

from __future__ import annotations

import random

from streamrelay.infrastructure.common.user_agents import (
    ACCEPT_LANGUAGE,
    USER_AGENTS,
    browser_headers,
    pick_user_agent,
)


class TestPickUserAgent:
    def test_pool_has_four_browsers(self) -> None:
        assert len(USER_AGENTS) == 4
        assert all(ua.startswith("Mozilla/5.0") for ua in USER_AGENTS)

    def test_result_from_pool(self) -> None:
        for _ in range(20):
            assert pick_user_agent() in USER_AGENTS

    def test_seeded_rng_is_deterministic(self) -> None:
        a = [pick_user_agent(random.Random(7)) for _ in range(3)]
        b = [pick_user_agent(random.Random(7)) for _ in range(3)]
        assert a == b

    def test_seeded_sequence_matches_choice(self) -> None:
        expected = random.Random(3).choice(USER_AGENTS)
        assert pick_user_agent(random.Random(3)) == expected

    def test_custom_pool(self) -> None:
        assert pick_user_agent(random.Random(1), pool=("only",)) == "only"

    def test_rotation_covers_pool(self) -> None:
        rng = random.Random(0)
        seen = {pick_user_agent(rng) for _ in range(200)}
        assert seen == set(USER_AGENTS)


class TestBrowserHeaders:
    def test_iframe_fetch_headers(self, seeded_rng: random.Random) -> None:
        headers = browser_headers(seeded_rng)
        assert headers["accept"] == "*/*"
        assert headers["accept-language"] == ACCEPT_LANGUAGE
        assert headers["sec-fetch-dest"] == "iframe"
        assert headers["sec-fetch-mode"] == "no-cors"
        assert headers["sec-fetch-site"] == "same-origin"
        assert headers["user-agent"] in USER_AGENTS

    def test_fresh_dict_each_call(self) -> None:
        a = browser_headers()
        a["accept"] = "text/html"
        assert browser_headers()["accept"] == "*/*"
