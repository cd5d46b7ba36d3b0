# 16.10.26

import re
import logging
from urllib.parse import urljoin, urlparse, parse_qs, urlencode, urlunparse
from types import SimpleNamespace
from typing import Optional


# External libraries
import httpx
from bs4 import BeautifulSoup


# Internal utilities
from MovieDownloader.exceptions import ContentNotAvailable, ServiceError
from MovieDownloader.utils.http_client import UNAVAILABLE_STATUS
from MovieDownloader.services._base.object import ResolutionTarget
from MovieDownloader.source.parser.hls import HLSParser, is_master_playlist, select_stream
from MovieDownloader.source.utils.object import Manifest


# Variable
logger = logging.getLogger(__name__)


def fetch(client: httpx.Client, url: str, **kwargs) -> httpx.Response:
    """
    GET a url and classify failures.

    Raises:
        ContentNotAvailable: On 401/403/404/410/451 answers.
        ServiceError: On transport errors, timeouts and any other error status.
    """
    try:
        response = client.get(url, **kwargs)
        response.raise_for_status()
        return response

    except httpx.HTTPStatusError as e:
        if e.response.status_code in UNAVAILABLE_STATUS:
            raise ContentNotAvailable(f"{url} answered {e.response.status_code}", cause=e) from e
        raise ServiceError(f"{url} answered {e.response.status_code}", cause=e) from e

    except httpx.HTTPError as e:
        raise ServiceError(f"Request to {url} failed: {e}", cause=e) from e


class VideoSource:
    def __init__(self, client: httpx.Client, url: str, is_series: bool, media_id: int):
        """
        Initialize video source for streaming site.

        Args:
            - client (httpx.Client): Client used for every request.
            - url (str): Site url including the language, e.g. https://host/it
            - is_series (bool): Flag for series or movie content
            - media_id (int): Unique identifier for media item
        """
        self.client = client
        self.url = url
        self.is_series = is_series
        self.media_id = media_id
        self.iframe_src = None
        self.window_parameter = None
        self.canPlayFHD = False

    def get_iframe(self, episode_id: Optional[int] = None) -> None:
        """
        Retrieve iframe source for the movie or the specified episode.
        """
        params = {}
        if self.is_series:
            params = {
                'episode_id': episode_id,
                'next_episode': '1'
            }

        response = fetch(self.client, f"{self.url}/iframe/{self.media_id}", params=params)
        iframe = BeautifulSoup(response.text, "html.parser").find("iframe")

        if iframe is None or not iframe.get("src"):
            raise ContentNotAvailable(f"No player iframe for {self.media_id} (episode {episode_id})")

        self.iframe_src = urljoin(self.url, iframe.get("src"))

    def parse_script(self, script_text: str) -> None:
        token_m = re.search(r"(?:['\"]token['\"]|token)\s*:\s*['\"](?P<token>[^'\"]+)['\"]", script_text)
        expires_m = re.search(r"(?:['\"]expires['\"]|expires)\s*:\s*['\"](?P<expires>[^'\"]+)['\"]", script_text)
        url_m = re.search(r"(?:['\"]url['\"]|url)\s*:\s*['\"](?P<url>https?://[^'\"]+)['\"]", script_text)
        canplay_m = re.search(r"window\.canPlayFHD\s*=\s*(true|false)", script_text)

        self.canPlayFHD = bool(canplay_m and canplay_m.group(1).lower() == 'true')

        if token_m and url_m:
            self.window_parameter = SimpleNamespace(
                token=token_m.group('token'),
                expires=expires_m.group('expires') if expires_m else "",
                url=url_m.group('url')
            )
        else:
            self.window_parameter = None

    def get_content(self) -> None:
        """
        Fetch the player page and read the playlist parameters from its inline scripts.
        """
        response = fetch(self.client, self.iframe_src)
        body = BeautifulSoup(response.text, "html.parser").find("body")
        scripts = body.find_all("script") if body is not None else []

        for script in scripts:
            self.parse_script(script_text=script.text)
            if self.window_parameter is not None:
                return

        raise ContentNotAvailable(f"No playlist parameters in player page for {self.media_id}")

    def get_playlist(self) -> str:
        """
        Generate authenticated master playlist URL.

        Returns:
            str: Playlist URL with token, expires and quality parameters.
        """
        params = {}
        if self.canPlayFHD:
            params['h'] = 1

        parsed_url = urlparse(str(self.window_parameter.url))
        query_params = parse_qs(str(parsed_url.query))

        if query_params.get('b') == ['1']:
            params['b'] = 1

        params.update({
            "token": str(self.window_parameter.token),
            "expires": str(self.window_parameter.expires)
        })

        return urlunparse(parsed_url._replace(query=urlencode(params)))


def build_manifest(client: httpx.Client, playlist_url: str, quality: str = "best") -> Manifest:
    """
    Load an HLS playlist and turn it into a Manifest. A master playlist is resolved to
    one variant first.
    """
    content = fetch(client, playlist_url).text
    resolution, bandwidth = None, None

    if is_master_playlist(content):
        stream = select_stream(HLSParser(playlist_url, content).parse_streams(), quality)
        if stream is None:
            raise ContentNotAvailable(f"Master playlist without variants: {playlist_url}")

        logger.info(f"Selected variant {stream.resolution} @ {stream.bitrate}")
        resolution, bandwidth = stream.resolution, stream.bitrate
        playlist_url = stream.playlist_url
        content = fetch(client, playlist_url).text

    try:
        segments, key, media_sequence = HLSParser(playlist_url, content).parse_segments()
    except ValueError as e:
        raise ServiceError(f"Malformed playlist {playlist_url}: {e}", cause=e) from e

    if not segments:
        raise ContentNotAvailable(f"Playlist without segments: {playlist_url}")

    return Manifest(
        source_url=playlist_url,
        segments=tuple(segments),
        key=key,
        media_sequence=media_sequence,
        resolution=resolution,
        bandwidth=bandwidth
    )


def get_playlist(client: httpx.Client, url: str, target: ResolutionTarget, quality: str = "best") -> Manifest:
    """
    Exchange a resolution target for a playable manifest.

    Parameters:
        - client (httpx.Client): Client used for every request.
        - url (str): Site url including the language, e.g. https://host/it
        - target (ResolutionTarget): Movie id and, for series, episode id.
        - quality (str): Variant selection, see select_stream.

    Raises:
        ContentNotAvailable: The ids are valid but nothing can be played.
        ServiceError: Transient failure, the caller may retry.
    """
    video_source = VideoSource(client, url, target.episode_id is not None, target.movie_id)
    video_source.get_iframe(target.episode_id)
    video_source.get_content()

    master_playlist = video_source.get_playlist()
    logger.debug(f"Master playlist for {target.movie_id}/{target.episode_id}: {master_playlist}")
    return build_manifest(client, master_playlist, quality)
