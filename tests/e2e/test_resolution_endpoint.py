"""End-to-end tests for the resolution and proxy endpoints.

Tests the full request-response cycle through:
    HTTP Request -> FastAPI Router -> Use Case -> Infrastructure -> JSON Response

Only the outbound HTTP layer is mocked (respx), so the real composition
root, TMDB client, embed fetcher, server extraction, chain resolver and
stream proxy are exercised.

Endpoints covered:
    GET /
    GET /movie/{tmdb_id}
    GET /tv/{tmdb_id}/{season}/{episode}
    GET /stream?url=...&referer=...
"""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from streamrelay.infrastructure.config import AppConfig
from streamrelay.interfaces.app import create_app

pytestmark = pytest.mark.e2e

_TMDB = "https://api.themoviedb.org/3"
_EMBED = "https://vidsrc.xyz/embed"
_REDIRECT = "https://cloudnestra.com"
_MEDIA = "https://cdn.example.com/hls/abc123/master.m3u8"

_EMBED_PAGE = """
<html><body>
  <iframe id="player_iframe" src="//cloudnestra.com/rcp/abc123"></iframe>
  <div class="serversList">
    <div class="server" data-hash="abc123">CloudStream Pro</div>
  </div>
</body></html>
"""
_RCP_PAGE = "<script>$('#the_frame').html({ src: '/prorcp/cHJvcmNw', frameborder: 0 });</script>"
_PRORCP_PAGE = f"<script>new Playerjs({{id:'player_parent', file: '{_MEDIA}'}});</script>"


@pytest.fixture()
def config() -> AppConfig:
    return AppConfig(tmdb_api_key="e2e-key", environment="test")


@pytest.fixture()
def client(config: AppConfig) -> Iterator[TestClient]:
    with TestClient(create_app(config)) as c:
        yield c


def _mock_chain() -> None:
    respx.get(f"{_REDIRECT}/rcp/abc123").respond(200, text=_RCP_PAGE)
    respx.get(f"{_REDIRECT}/prorcp/cHJvcmNw").respond(200, text=_PRORCP_PAGE)


class TestHealth:
    def test_usage(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert set(body["usage"]) == {"movie", "tv", "stream"}

    def test_cors_headers(self, client: TestClient) -> None:
        resp = client.get("/", headers={"Origin": "https://player.example"})
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, client: TestClient) -> None:
        resp = client.options(
            "/movie/27205",
            headers={
                "Origin": "https://player.example",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert resp.status_code == 200
        assert "GET" in resp.headers["access-control-allow-methods"]

    def test_plain_options(self, client: TestClient) -> None:
        resp = client.options("/movie/27205")
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-methods"] == "GET, OPTIONS"
        assert "Content-Type" in resp.headers["access-control-allow-headers"]

    def test_range_preflight_for_stream(self, client: TestClient) -> None:
        resp = client.options(
            "/stream",
            headers={
                "Origin": "https://player.example",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "range",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "range" in resp.headers["access-control-allow-headers"].lower()

    def test_options_on_unknown_path(self, client: TestClient) -> None:
        assert client.options("/does-not-exist").status_code == 200


class TestMovieResolution:
    @respx.mock
    def test_inception(self, client: TestClient) -> None:
        respx.get(f"{_TMDB}/movie/27205").respond(
            json={"id": 27205, "external_ids": {"imdb_id": "tt1375666"}}
        )
        respx.get(f"{_EMBED}/movie/tt1375666").respond(200, text=_EMBED_PAGE)
        _mock_chain()

        resp = client.get("/movie/27205")

        assert resp.status_code == 200
        body = resp.json()
        assert body["tmdb_id"] == "27205"
        assert body["imdb_id"] == "tt1375666"
        assert body["type"] == "movie"
        assert body["streams"] == [
            {
                "url": (
                    "/stream?url=https%3A%2F%2Fcdn.example.com%2Fhls%2Fabc123%2Fmaster.m3u8"
                    "&referer=https%3A%2F%2Fcloudnestra.com"
                ),
                "originalUrl": _MEDIA,
                "referer": _REDIRECT,
            }
        ]

    @respx.mock
    def test_no_cross_reference(self, client: TestClient) -> None:
        respx.get(f"{_TMDB}/movie/1").respond(json={"id": 1})
        respx.get(f"{_TMDB}/movie/1/external_ids").respond(json={"id": 1, "imdb_id": None})

        resp = client.get("/movie/1")

        assert resp.status_code == 404
        assert resp.json() == {"error": "IMDB ID not found for this TMDB ID"}

    @respx.mock
    def test_no_servers(self, client: TestClient) -> None:
        respx.get(f"{_TMDB}/movie/27205").respond(
            json={"external_ids": {"imdb_id": "tt1375666"}}
        )
        respx.get(f"{_EMBED}/movie/tt1375666").respond(200, text="<html></html>")

        resp = client.get("/movie/27205")

        assert resp.status_code == 404
        assert resp.json() == {"error": "No streams found"}

    @respx.mock
    def test_every_chain_fails(self, client: TestClient) -> None:
        respx.get(f"{_TMDB}/movie/27205").respond(
            json={"external_ids": {"imdb_id": "tt1375666"}}
        )
        respx.get(f"{_EMBED}/movie/tt1375666").respond(200, text=_EMBED_PAGE)
        respx.get(f"{_REDIRECT}/rcp/abc123").mock(side_effect=httpx.ConnectError("down"))

        resp = client.get("/movie/27205")

        assert resp.status_code == 404
        assert resp.json() == {"error": "No streams found"}

    @respx.mock
    def test_tmdb_failure(self, client: TestClient) -> None:
        respx.get(f"{_TMDB}/movie/27205").respond(503)

        resp = client.get("/movie/27205")

        assert resp.status_code == 500
        assert resp.json()["error"].startswith("Failed to convert TMDB ID to IMDB ID")

    def test_missing_api_key(self) -> None:
        with TestClient(create_app(AppConfig(environment="test"))) as c:
            resp = c.get("/movie/27205")
        assert resp.status_code == 500
        assert resp.json() == {"error": "TMDB_API_KEY environment variable is not set"}


class TestEpisodeResolution:
    @respx.mock
    def test_breaking_bad(self, client: TestClient) -> None:
        respx.get(f"{_TMDB}/tv/1396").respond(json={"id": 1396, "name": "Breaking Bad"})
        respx.get(f"{_TMDB}/tv/1396/external_ids").respond(json={"imdb_id": "tt0903747"})
        respx.get(f"{_EMBED}/tv/tt0903747/1-3").respond(200, text=_EMBED_PAGE)
        _mock_chain()

        resp = client.get("/tv/1396/1/3")

        assert resp.status_code == 200
        body = resp.json()
        assert body["imdb_id"] == "tt0903747"
        assert body["season"] == 1
        assert body["episode"] == 3
        assert body["type"] == "tv"
        assert body["streams"][0]["originalUrl"] == _MEDIA

    def test_bad_episode(self, client: TestClient) -> None:
        resp = client.get("/tv/1396/1/x")
        assert resp.status_code == 400


class TestStreamProxy:
    @respx.mock
    def test_relays_with_spoofed_referer(self, client: TestClient) -> None:
        route = respx.get(_MEDIA).respond(
            200,
            content=b"#EXTM3U\n",
            headers={"Content-Type": "application/vnd.apple.mpegurl"},
        )

        resp = client.get("/stream", params={"url": _MEDIA, "referer": _REDIRECT})

        assert resp.status_code == 200
        assert resp.content == b"#EXTM3U\n"
        assert resp.headers["content-type"] == "application/vnd.apple.mpegurl"
        assert resp.headers["content-length"] == "8"
        assert resp.headers["access-control-allow-origin"] == "*"
        assert route.calls.last.request.headers["referer"] == _REDIRECT

    @respx.mock
    def test_range_request(self, client: TestClient) -> None:
        route = respx.get(_MEDIA).respond(
            206,
            content=b"EXT",
            headers={"Content-Type": "video/mp4", "Content-Range": "bytes 1-3/8"},
        )

        resp = client.get(
            "/stream",
            params={"url": _MEDIA, "referer": _REDIRECT},
            headers={"Range": "bytes=1-3"},
        )

        assert resp.status_code == 206
        assert resp.headers["content-range"] == "bytes 1-3/8"
        assert route.calls.last.request.headers["range"] == "bytes=1-3"

    @respx.mock
    def test_upstream_unreachable(self, client: TestClient) -> None:
        respx.get(_MEDIA).mock(side_effect=httpx.ConnectError("refused"))

        resp = client.get("/stream", params={"url": _MEDIA})

        assert resp.status_code == 500
        assert "error" in resp.json()

    @respx.mock
    def test_range_past_end(self, client: TestClient) -> None:
        respx.get(_MEDIA).respond(416, content=b"", headers={"Content-Range": "bytes */8"})

        resp = client.get(
            "/stream",
            params={"url": _MEDIA, "referer": _REDIRECT},
            headers={"Range": "bytes=100-"},
        )

        assert resp.status_code == 416
        assert resp.headers["content-range"] == "bytes */8"

    def test_url_required(self, client: TestClient) -> None:
        resp = client.get("/stream")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Stream URL required"}
