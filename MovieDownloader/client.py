# 17.10.26

import logging
import threading
from typing import Callable, List, Optional, Sequence


# External libraries
import httpx


# Internal utilities
from MovieDownloader.utils import config_manager
from MovieDownloader.utils.http_client import create_client, get_headers
from MovieDownloader.services import streamingcommunity
from MovieDownloader.services._base import CatalogEntry, ResolutionTarget, resolve
from MovieDownloader.player.vixcloud import get_playlist
from MovieDownloader.source.utils.object import Manifest
from MovieDownloader.source.utils.tracker import TransferTracker
from MovieDownloader.source.downloader import TransferEngine, TransferResult


# Variable
logger = logging.getLogger(__name__)


class CatalogClient:
    def __init__(self, base_url: Optional[str] = None, languages: Optional[Sequence[str]] = None, timeout: Optional[float] = None,
        max_retries: Optional[int] = None, backoff_factor: Optional[float] = None, max_backoff: Optional[float] = None,
        max_workers: Optional[int] = None, quality: Optional[str] = None, transport: Optional[httpx.BaseTransport] = None):
        """
        Entry point of the engine. Every setting defaults to the configuration file and
        can be overridden here; nothing is read from global state afterwards.

        Parameters:
            - base_url (str, optional): Catalog site root, SITE.full_url.
            - languages (list, optional): Catalog languages to search, SITE.languages.
            - timeout (float, optional): Per request timeout in seconds, REQUESTS.timeout.
            - max_retries (int, optional): Attempts per segment, REQUESTS.max_retry.
            - backoff_factor (float, optional): First retry delay, REQUESTS.backoff_factor.
            - max_backoff (float, optional): Retry delay cap, REQUESTS.max_backoff.
            - max_workers (int, optional): Parallel segment fetches, DOWNLOAD.thread_count.
            - quality (str, optional): Variant choice, DOWNLOAD.quality.
            - transport (httpx.BaseTransport, optional): Custom transport for the http client.
        """
        self.base_url = (base_url or config_manager.get("SITE", "full_url")).rstrip("/")
        self.languages = list(languages or config_manager.get_list("SITE", "languages", ["it"]))
        self.timeout = timeout if timeout is not None else config_manager.get_float("REQUESTS", "timeout", 20)
        self.max_retries = max_retries if max_retries is not None else config_manager.get_int("REQUESTS", "max_retry", 4)
        self.backoff_factor = backoff_factor if backoff_factor is not None else config_manager.get_float("REQUESTS", "backoff_factor", 0.5)
        self.max_backoff = max_backoff if max_backoff is not None else config_manager.get_float("REQUESTS", "max_backoff", 8)
        self.max_workers = max_workers if max_workers is not None else config_manager.get_int("DOWNLOAD", "thread_count", 8)
        self.quality = quality or str(config_manager.get("DOWNLOAD", "quality", "best"))

        self.http = create_client(headers=get_headers(), timeout=self.timeout, transport=transport)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "CatalogClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def search(self, query: str, match_exact: Optional[bool] = None, match_estimate: Optional[bool] = None, with_seasons: bool = True) -> List[CatalogEntry]:
        """
        Search the catalog.

        Returns:
            list: Matching entries, exact matches first. Empty when nothing matches.

        Raises:
            CatalogUnavailable: The catalog could not be queried.
        """
        if match_exact is None:
            match_exact = config_manager.get_bool("SEARCH", "match_exact", True)
        if match_estimate is None:
            match_estimate = config_manager.get_bool("SEARCH", "match_estimate", True)

        return streamingcommunity.search(
            self.http,
            self.base_url,
            query,
            self.languages,
            match_exact=match_exact,
            match_estimate=match_estimate,
            threshold=config_manager.get_float("SEARCH", "estimate_threshold", 0.6),
            with_seasons=with_seasons
        )

    def resolve(self, entry: CatalogEntry, season_number: Optional[int] = None, episode_number: Optional[int] = None) -> ResolutionTarget:
        return resolve(entry, season_number, episode_number)

    def get_playlist(self, target: ResolutionTarget, language: Optional[str] = None) -> Manifest:
        """
        Exchange a resolution target for a manifest. Never retried here.

        Parameters:
            - target (ResolutionTarget): Output of resolve().
            - language (str, optional): Catalog language of the entry, defaults to the first configured one.

        Raises:
            ContentNotAvailable: Nothing playable for these ids.
            ServiceError: Transient failure.
        """
        language = language or self.languages[0]
        return get_playlist(self.http, f"{self.base_url}/{language}", target, quality=self.quality)

    def download(self, manifest: Manifest, destination: str, cancel_event: Optional[threading.Event] = None,
        on_progress: Optional[Callable[[TransferTracker], None]] = None) -> TransferResult:
        engine = TransferEngine(
            self.http,
            max_workers=self.max_workers,
            max_retries=self.max_retries,
            backoff_factor=self.backoff_factor,
            max_backoff=self.max_backoff
        )
        return engine.download(manifest, destination, cancel_event=cancel_event, on_progress=on_progress)
