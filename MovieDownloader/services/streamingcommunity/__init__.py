# 16.10.26

import logging
from typing import List, Sequence


# External library
import httpx


# Internal utilities
from MovieDownloader.exceptions import CatalogUnavailable
from MovieDownloader.services._base import CatalogEntry, EntriesManager


# Logic
from .scrapper import GetSerieInfo, extract_page


# Variable
logger = logging.getLogger(__name__)


def _extract_year(dict_title: dict) -> str:
    # Prefer first_air_date, then release_date from translations, then root level fields
    year = None
    for key in ('first_air_date', 'release_date'):
        for trans in dict_title.get('translations') or []:
            if trans.get('key') == key and trans.get('value'):
                year = trans.get('value')
                break
        if year:
            break

    if not year:
        year = dict_title.get('last_air_date') or dict_title.get('release_date')

    return year.split("-")[0] if year and "-" in year else "9999"


def title_search(client: httpx.Client, full_url: str, query: str, languages: Sequence[str]) -> EntriesManager:
    """
    Search for titles in every configured language. Every candidate is kept, ids are deduplicated by rank().

    Parameters:
        - client (httpx.Client): Client used for every request.
        - full_url (str): Site root without trailing slash.
        - query (str): The query to search for.
        - languages (list): Language prefixes to query, e.g. ['it', 'en'].

    Returns:
        EntriesManager: Candidates in catalog relevance order, language by language.

    Raises:
        CatalogUnavailable: If no language could be queried successfully.
    """
    entries_manager = EntriesManager()
    last_error = None
    succeeded = 0

    for lang in languages:
        logger.info(f"Searching '{query}' in language: {lang}")

        try:
            response = client.get(f"{full_url}/{lang}")
            response.raise_for_status()
            version = extract_page(response.text)['version']

            response = client.get(
                f"{full_url}/{lang}/search",
                params={'q': query},
                headers={'x-inertia': 'true', 'x-inertia-version': str(version)}
            )
            response.raise_for_status()
            data = response.json().get('props').get('titles') or []

        except (httpx.HTTPError, ValueError, KeyError, AttributeError) as e:
            logger.error(f"Search request error ({lang}): {e}")
            last_error = e
            continue

        succeeded += 1
        for dict_title in data:
            if dict_title.get('id') is None:
                logger.warning(f"Skipping title without id ({lang}): {dict_title.get('name')}")
                continue

            entries_manager.add(CatalogEntry(
                id=dict_title.get('id'),
                name=dict_title.get('name'),
                type=dict_title.get('type') or 'movie',
                slug=dict_title.get('slug'),
                year=_extract_year(dict_title),
                provider_language=lang
            ))

    if succeeded == 0:
        raise CatalogUnavailable(f"Catalog search failed for '{query}'", cause=last_error) from last_error

    return entries_manager


def load_seasons(client: httpx.Client, full_url: str, entry: CatalogEntry) -> CatalogEntry:
    """Fill entry.seasons for a series. Movies are returned untouched."""
    if not entry.is_series:
        return entry

    scrape_serie = GetSerieInfo(client, f"{full_url}/{entry.provider_language}", entry.id, entry.slug)
    entry.seasons = scrape_serie.collect_all()
    return entry


def search(client: httpx.Client, full_url: str, query: str, languages: Sequence[str], match_exact: bool = True, match_estimate: bool = True,
    threshold: float = 0.6, with_seasons: bool = True) -> List[CatalogEntry]:
    """
    Search the catalog and return matching entries: exact matches first, then estimated ones.
    Series without any episode are left out of the result.
    """
    if not query or not query.strip():
        raise ValueError("query must not be empty")

    query = query.strip()
    entries_manager = title_search(client, full_url, query, languages)
    ranked = entries_manager.rank(query, match_exact=match_exact, match_estimate=match_estimate, threshold=threshold)

    if not with_seasons:
        return ranked

    results = []
    for entry in ranked:
        load_seasons(client, full_url, entry)

        if entry.is_series and len(entry.seasons) == 0:
            logger.warning(f"Series {entry.name} ({entry.id}) has no episodes, skipped")
            continue

        results.append(entry)

    return results
