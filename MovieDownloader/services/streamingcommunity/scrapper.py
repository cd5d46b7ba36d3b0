# 15.10.26

import json
import logging


# External libraries
import httpx
from bs4 import BeautifulSoup


# Internal utilities
from MovieDownloader.exceptions import CatalogUnavailable
from MovieDownloader.services._base.object import SeasonManager, Episode, Season


# Variable
logger = logging.getLogger(__name__)


def extract_page(html: str) -> dict:
    """Read the inertia page object stored in the data-page attribute of div#app."""
    soup = BeautifulSoup(html, "html.parser")
    app = soup.find("div", {"id": "app"})
    if app is None or not app.get("data-page"):
        raise ValueError("div#app with data-page not found")

    return json.loads(app.get("data-page"))


class GetSerieInfo:
    def __init__(self, client: httpx.Client, url: str, media_id: int, series_name: str):
        """
        Initialize the GetSerieInfo class for scraping TV series information.

        Args:
            - client (httpx.Client): Client used for every request.
            - url (str): Site url including the language, e.g. https://host/it
            - media_id (int): Unique identifier for the media
            - series_name (str): Slug of the TV series
        """
        self.client = client
        self.url = url
        self.media_id = media_id
        self.series_name = series_name
        self.version = None
        self.title_info = {}
        self.seasons_manager = SeasonManager()

    def collect_info_title(self) -> None:
        """
        Retrieve general information about the TV series and its season list.

        Raises:
            CatalogUnavailable: If the title page cannot be fetched or parsed.
        """
        try:
            response = self.client.get(f"{self.url}/titles/{self.media_id}-{self.series_name}")
            response.raise_for_status()
            json_response = extract_page(response.text)

        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error collecting series info for {self.media_id}: {e}")
            raise CatalogUnavailable(f"Cannot load title {self.media_id}", cause=e) from e

        self.version = json_response.get('version')
        self.title_info = json_response.get("props", {}).get("title", {}) or {}

        for season_data in self.title_info.get("seasons", []) or []:
            if season_data.get('number') is None:
                continue

            self.seasons_manager.add(Season(
                id=season_data.get('id'),
                number=int(season_data.get('number')),
                name=f"Season {season_data.get('number')}",
                slug=season_data.get('slug')
            ))

    def collect_info_season(self, number_season: int) -> None:
        """
        Retrieve episode information for a specific season.

        Args:
            number_season (int): Season number to fetch episodes for

        Raises:
            CatalogUnavailable: If the season page cannot be fetched or parsed.
        """
        season = self.seasons_manager.get_season_by_number(number_season)
        if season is None:
            logger.error(f"Season {number_season} not found for {self.media_id}")
            return

        headers = {'x-inertia': 'true'}
        if self.version:
            headers['x-inertia-version'] = str(self.version)

        try:
            response = self.client.get(f"{self.url}/titles/{self.media_id}-{self.series_name}/season-{number_season}", headers=headers)
            response.raise_for_status()
            episodes = response.json().get('props', {}).get('loadedSeason', {}).get('episodes', []) or []

        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Error collecting episodes for season {number_season}: {e}")
            raise CatalogUnavailable(f"Cannot load season {number_season} of {self.media_id}", cause=e) from e

        for ep in episodes:
            if ep.get('number') is None:
                continue

            season.episodes.add(Episode(
                id=ep.get('id'),
                number=int(ep.get('number')),
                name=ep.get('name'),
                duration=ep.get('duration')
            ))

    def collect_all(self) -> SeasonManager:
        """Load the season list, then every season's episodes. Empty seasons are dropped."""
        self.collect_info_title()

        for season in list(self.seasons_manager):
            self.collect_info_season(season.number)

        self.seasons_manager.drop_empty()
        return self.seasons_manager
