# 15.10.26

import difflib
from typing import Any, List, NamedTuple, Optional


# Variable
SERIES_TYPES = ('tv', 'serie', 'series', 'show')


class Episode:
    def __init__(self, id: Optional[Any] = None, number: Optional[int] = None, name: Optional[str] = None, duration: Optional[Any] = None, **kwargs):
        self.id = id
        self.number = number
        self.name = name
        self.duration = duration

        for key, value in kwargs.items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        """Convert the episode to a dictionary."""
        return self.__dict__.copy()

    def __str__(self):
        return f"Episode(id={self.id}, number={self.number}, name='{self.name}', duration={self.duration} min)"


class EpisodeManager:
    def __init__(self):
        self.episodes: List[Episode] = []

    def add(self, episode: Episode) -> Episode:
        self.episodes.append(episode)
        self.episodes.sort(key=lambda x: x.number)
        return episode

    def get_episode_by_number(self, number: int) -> Optional[Episode]:
        for episode in self.episodes:
            if episode.number == number:
                return episode

        return None

    def clear(self) -> None:
        self.episodes.clear()

    def __iter__(self):
        return iter(self.episodes)

    def __len__(self) -> int:
        return len(self.episodes)

    def __str__(self):
        return f"EpisodeManager(num_episodes={len(self.episodes)})"


class Season:
    def __init__(self, id: Optional[int] = None, number: Optional[int] = None, name: Optional[str] = None, slug: Optional[str] = None, **kwargs):
        self.id = id
        self.number = number
        self.name = name
        self.slug = slug
        self.episodes: EpisodeManager = EpisodeManager()

        for key, value in kwargs.items():
            setattr(self, key, value)

    def __str__(self):
        return f"Season(id={self.id}, number={self.number}, name='{self.name}', episodes={len(self.episodes)})"


class SeasonManager:
    def __init__(self):
        self.seasons: List[Season] = []

    def add(self, season: Season) -> Season:
        self.seasons.append(season)
        self.seasons.sort(key=lambda x: x.number)
        return season

    def get_season_by_number(self, number: int) -> Optional[Season]:
        # Numbers can have gaps (1, 3, 4), never fall back to a position
        for season in self.seasons:
            if season.number == number:
                return season

        return None

    def drop_empty(self) -> None:
        self.seasons = [season for season in self.seasons if len(season.episodes) > 0]

    def __iter__(self):
        return iter(self.seasons)

    def __len__(self) -> int:
        return len(self.seasons)


class CatalogEntry:
    def __init__(self, id: Any, name: str, type: str = "movie", slug: Optional[str] = None, year: Optional[str] = None,
        provider_language: Optional[str] = None, image: Optional[str] = None, **kwargs):
        self.id = id
        self.name = name
        self.type = type
        self.slug = slug
        self.year = year
        self.provider_language = provider_language
        self.image = image
        self.score = 0.0
        self.match = None
        self.seasons: SeasonManager = SeasonManager()

        for key, value in kwargs.items():
            setattr(self, key, value)

    @property
    def is_series(self) -> bool:
        return str(self.type).lower() in SERIES_TYPES

    @property
    def friendly_name(self) -> str:
        if self.year and self.year != "9999":
            return f"{self.name} ({self.year})"
        return str(self.name)

    def to_dict(self) -> dict:
        data = self.__dict__.copy()
        data['seasons'] = [season.number for season in self.seasons]
        return data

    def __str__(self):
        return f"CatalogEntry(id={self.id}, name='{self.name}', type='{self.type}', year='{self.year}', slug='{self.slug}', seasons={len(self.seasons)})"


class ResolutionTarget(NamedTuple):
    movie_id: Any
    episode_id: Optional[Any] = None
    season_number: Optional[int] = None


class EntriesManager:
    def __init__(self):
        self.media_list: List[CatalogEntry] = []
        self._seen_ids = set()

    def add(self, media: CatalogEntry) -> bool:
        """
        Collect a candidate. Candidates sharing an id are all kept, rank() picks one of them.
        Returns True if the id was not seen before.
        """
        is_new = media.id not in self._seen_ids
        self._seen_ids.add(media.id)
        self.media_list.append(media)
        return is_new

    def get(self, index: int) -> CatalogEntry:
        return self.media_list[index]

    def clear(self) -> None:
        self.media_list.clear()
        self._seen_ids.clear()

    def __len__(self) -> int:
        return len(self._seen_ids)

    def __str__(self):
        return f"EntriesManager(num_media={len(self._seen_ids)}, num_candidates={len(self.media_list)})"

    def rank(self, query: str, match_exact: bool = True, match_estimate: bool = True, threshold: float = 0.6) -> List[CatalogEntry]:
        """
        Classify and order the collected entries against the query.

        Every candidate is classified on its own title, then one candidate is kept per id:
        an exact match beats an estimated one, a higher score beats a lower one among
        estimates, and otherwise the first collected candidate wins.

        Parameters:
            - query (str): The text the user searched for.
            - match_exact (bool): Keep titles containing the query (case-insensitive).
            - match_estimate (bool): Keep titles whose similarity ratio reaches the threshold.
            - threshold (float): Minimum difflib ratio for an estimated match.

        Returns:
            list: Exact matches in catalog order, then estimated matches by descending
            score. Ties keep catalog order so the result is stable.
        """
        query_lower = query.strip().lower()
        best = {}

        for position, media in enumerate(self.media_list):
            title = (media.name or "").lower()
            media.score = difflib.SequenceMatcher(None, query_lower, title).ratio()

            if match_exact and query_lower in title:
                media.match = "exact"
                key = (0, 0.0)

            elif match_estimate and media.score >= threshold:
                media.match = "estimate"
                key = (1, -media.score)

            elif not match_exact and not match_estimate:
                media.match = None
                key = (0, 0.0)

            else:
                continue

            current = best.get(media.id)
            if current is None or key < current[0]:
                best[media.id] = (key, position, media)

        exact = sorted((item for item in best.values() if item[0][0] == 0), key=lambda item: item[1])
        estimated = sorted((item for item in best.values() if item[0][0] == 1), key=lambda item: (item[0][1], item[1]))
        return [media for _, _, media in exact + estimated]
