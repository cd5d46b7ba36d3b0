import html
import json
import re
from typing import Dict, List, Optional

import httpx
import pytest

from MovieDownloader.client import CatalogClient


BASE_URL = "https://sc.test"
PLAYER_URL = "https://vix.test"


def app_page(page: dict) -> str:
    data = html.escape(json.dumps(page), quote=True)
    return f'<html><body><div id="app" data-page="{data}"></div></body></html>'


class FakeSite:
    """In-memory catalog and player answering like the real site."""

    def __init__(self, titles: Optional[Dict[str, List[dict]]] = None):
        self.titles = titles or {"it": []}
        self.seasons: Dict[str, List[dict]] = {}
        self.episodes: Dict[tuple, List[dict]] = {}
        self.playable: Dict[tuple, str] = {}
        self.files: Dict[str, bytes] = {}
        self.status: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []

    def add_series(self, media_id, seasons: Dict[int, List[dict]]) -> None:
        self.seasons[str(media_id)] = [{"id": number * 100, "number": number} for number in seasons]
        for number, episodes in seasons.items():
            self.episodes[(str(media_id), number)] = episodes

    def add_playable(self, media_id, episode_id=None, master: Optional[str] = None) -> str:
        key = f"{media_id}-{episode_id}"
        self.playable[(str(media_id), str(episode_id) if episode_id is not None else None)] = key
        if master is not None:
            self.files[f"{PLAYER_URL}/playlist/{key}"] = master.encode()
        return f"{PLAYER_URL}/playlist/{key}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"

        if url in self.status:
            return httpx.Response(self.status[url])

        if url in self.files:
            return httpx.Response(200, content=self.files[url])

        path = request.url.path
        lang_match = re.match(r"^/(\w\w)(/.*)?$", path)

        if request.url.host == "sc.test" and lang_match:
            lang, rest = lang_match.group(1), lang_match.group(2) or ""

            if rest == "":
                return httpx.Response(200, text=app_page({"version": "v1", "props": {}}))

            if rest == "/search":
                assert request.headers.get("x-inertia") == "true"
                return httpx.Response(200, json={"props": {"titles": self.titles.get(lang, [])}})

            season_match = re.match(r"^/titles/([^-]+)-[^/]+/season-(\d+)$", rest)
            if season_match:
                episodes = self.episodes.get((season_match.group(1), int(season_match.group(2))), [])
                return httpx.Response(200, json={"props": {"loadedSeason": {"episodes": episodes}}})

            title_match = re.match(r"^/titles/([^-]+)-[^/]+$", rest)
            if title_match:
                seasons = self.seasons.get(title_match.group(1), [])
                return httpx.Response(200, text=app_page({"version": "v1", "props": {"title": {"seasons": seasons}}}))

            iframe_match = re.match(r"^/iframe/(.+)$", rest)
            if iframe_match:
                key = (iframe_match.group(1), request.url.params.get("episode_id"))
                if key not in self.playable:
                    return httpx.Response(404)
                return httpx.Response(200, text=f'<html><body><iframe src="{PLAYER_URL}/embed/{self.playable[key]}"></iframe></body></html>')

        if request.url.host == "vix.test" and path.startswith("/embed/"):
            key = path[len("/embed/"):]
            script = (
                "window.video = {id: '1'};"
                "window.masterPlaylist = { params: { 'token': 'tok', 'expires': '999' }, "
                f"url: '{PLAYER_URL}/playlist/{key}?b=1' }};"
                "window.canPlayFHD = true"
            )
            return httpx.Response(200, text=f"<html><body><script>{script}</script></body></html>")

        return httpx.Response(404)


def media_playlist(names: List[str], key_line: str = "", sequence: int = 0) -> str:
    lines = ["#EXTM3U", "#EXT-X-VERSION:3", "#EXT-X-TARGETDURATION:4", f"#EXT-X-MEDIA-SEQUENCE:{sequence}"]
    if key_line:
        lines.append(key_line)
    for name in names:
        lines.extend(["#EXTINF:4.0,", name])
    lines.append("#EXT-X-ENDLIST")
    return "\n".join(lines)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def make_client(site):
    clients = []

    def factory(**kwargs) -> CatalogClient:
        options = {
            "base_url": BASE_URL,
            "languages": ["it"],
            "timeout": 5,
            "max_retries": 3,
            "backoff_factor": 0,
            "max_backoff": 0,
            "max_workers": 4,
            "quality": "best",
        }
        options.update(kwargs)
        options.setdefault("transport", httpx.MockTransport(site.handler))
        client = CatalogClient(**options)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
