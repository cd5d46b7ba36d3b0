# 15.10.26

import logging
from typing import Optional


# Internal utilities
from MovieDownloader.exceptions import SelectionNotFound


# Logic
from .object import CatalogEntry, ResolutionTarget


# Variable
logger = logging.getLogger(__name__)


def resolve(entry: CatalogEntry, season_number: Optional[int] = None, episode_number: Optional[int] = None) -> ResolutionTarget:
    """
    Turn a catalog entry plus an optional season/episode pair into the ids needed to
    request a playlist. Pure lookup, no network.

    Parameters:
        - entry (CatalogEntry): Entry returned by the search.
        - season_number (int, optional): Declared season number (not a list position).
        - episode_number (int, optional): Declared episode number within that season.

    Returns:
        ResolutionTarget: movie id, plus episode id and season number for series.

    Raises:
        SelectionNotFound: If the series has no season or episode with those numbers.
    """
    if not entry.is_series:
        if season_number is not None or episode_number is not None:
            logger.debug(f"Ignoring season/episode selection for movie {entry.id}")
        return ResolutionTarget(movie_id=entry.id)

    if season_number is None or episode_number is None:
        raise SelectionNotFound(f"{entry.name}: season and episode numbers are required for a series")

    season = entry.seasons.get_season_by_number(season_number)
    if season is None:
        available = [s.number for s in entry.seasons]
        raise SelectionNotFound(f"{entry.name}: season {season_number} not found, available: {available}")

    episode = season.episodes.get_episode_by_number(episode_number)
    if episode is None:
        available = [e.number for e in season.episodes]
        raise SelectionNotFound(f"{entry.name}: episode {episode_number} not found in season {season_number}, available: {available}")

    return ResolutionTarget(movie_id=entry.id, episode_id=episode.id, season_number=season.number)
