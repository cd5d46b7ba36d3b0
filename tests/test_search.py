import httpx
import pytest

from MovieDownloader.exceptions import CatalogUnavailable
from MovieDownloader.services._base import CatalogEntry, EntriesManager


TITLES = [
    {"id": 1, "name": "Alpha", "type": "movie", "slug": "alpha"},
    {"id": 4, "name": "Beta", "type": "movie", "slug": "beta"},
    {"id": 5, "name": "Alfa", "type": "movie", "slug": "alfa"},
    {"id": 2, "name": "The Alpha Team", "type": "movie", "slug": "the-alpha-team"},
    {"id": 3, "name": "Alpah", "type": "movie", "slug": "alpah"},
]


@pytest.fixture
def catalog_site(site):
    site.titles = {"it": TITLES, "en": [{"id": 2, "name": "Alpha Team (EN)", "type": "movie"}, {"id": 6, "name": "Alpha Centauri", "type": "movie"}]}
    return site


def ids(entries):
    return [entry.id for entry in entries]


def test_exact_matches_come_before_estimated(catalog_site, make_client):
    client = make_client()

    results = client.search("alpha", match_exact=True, match_estimate=True, with_seasons=False)

    assert ids(results) == [1, 2, 3, 5]
    assert [entry.match for entry in results] == ["exact", "exact", "estimate", "estimate"]


def test_estimated_matches_sorted_by_descending_score(catalog_site, make_client):
    client = make_client()

    results = client.search("alpha", match_exact=False, match_estimate=True, with_seasons=False)

    assert ids(results) == [1, 3, 5]
    scores = [entry.score for entry in results]
    assert scores == sorted(scores, reverse=True)


def test_exact_only_keeps_catalog_order(catalog_site, make_client):
    client = make_client()

    results = client.search("Alpha", match_exact=True, match_estimate=False, with_seasons=False)

    assert ids(results) == [1, 2]


def test_no_flags_returns_every_candidate(catalog_site, make_client):
    client = make_client()

    results = client.search("alpha", match_exact=False, match_estimate=False, with_seasons=False)

    assert ids(results) == [1, 4, 5, 2, 3]


def test_search_is_deterministic(catalog_site, make_client):
    client = make_client()

    first = client.search("alpha", with_seasons=False)
    second = client.search("alpha", with_seasons=False)

    assert ids(first) == ids(second)


def test_duplicates_across_languages_are_suppressed(catalog_site, make_client):
    client = make_client(languages=["it", "en"])

    results = client.search("alpha", match_exact=True, match_estimate=True, with_seasons=False)

    assert len(ids(results)) == len(set(ids(results)))
    assert 6 in ids(results)
    team = next(entry for entry in results if entry.id == 2)
    assert team.name == "The Alpha Team"
    assert team.provider_language == "it"


def test_exact_title_in_second_language_wins_over_first(site, make_client):
    site.titles = {
        "it": [{"id": 2, "name": "The Alpha Team", "type": "movie"}],
        "en": [{"id": 2, "name": "Squadra Alpha", "type": "movie"}],
    }
    client = make_client(languages=["it", "en"])

    results = client.search("Squadra", match_exact=True, match_estimate=True, with_seasons=False)

    assert [(entry.id, entry.match) for entry in results] == [(2, "exact")]
    assert results[0].provider_language == "en"


def test_rank_prefers_exact_candidate_over_earlier_estimate():
    manager = EntriesManager()
    manager.add(CatalogEntry(id=7, name="Alpah", provider_language="it"))
    manager.add(CatalogEntry(id=7, name="Alpha Squad", provider_language="en"))

    results = manager.rank("alpha")

    assert len(manager) == 1
    assert [(entry.id, entry.match, entry.provider_language) for entry in results] == [(7, "exact", "en")]


def test_no_matches_is_an_empty_list(site, make_client):
    site.titles = {"it": []}
    client = make_client()

    assert client.search("nothing") == []


def test_service_error_raises_catalog_unavailable(site, make_client):
    site.status["https://sc.test/it/search"] = 503
    client = make_client()

    with pytest.raises(CatalogUnavailable) as exc_info:
        client.search("alpha")

    assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)


def test_transport_error_raises_catalog_unavailable(make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(transport=httpx.MockTransport(handler))

    with pytest.raises(CatalogUnavailable):
        client.search("alpha")


def test_one_language_failing_still_returns_results(catalog_site, make_client):
    catalog_site.status["https://sc.test/en/search"] = 500
    client = make_client(languages=["it", "en"])

    results = client.search("alpha", with_seasons=False)

    assert ids(results) == [1, 2, 3, 5]


def test_empty_query_is_rejected(make_client):
    client = make_client()

    with pytest.raises(ValueError):
        client.search("   ")


def test_series_are_loaded_with_their_seasons(site, make_client):
    site.titles = {"it": [
        {"id": 10, "name": "Alpha Show", "type": "tv", "slug": "alpha-show"},
        {"id": 11, "name": "Alpha Empty", "type": "tv", "slug": "alpha-empty"},
    ]}
    site.add_series(10, {1: [{"id": 501, "number": 1}, {"id": 502, "number": 2}], 2: [], 3: [{"id": 701, "number": 1}]})
    site.add_series(11, {1: []})
    client = make_client()

    results = client.search("alpha")

    assert ids(results) == [10]
    show = results[0]
    assert show.is_series
    assert [season.number for season in show.seasons] == [1, 3]
    assert [episode.id for episode in show.seasons.get_season_by_number(1).episodes] == [501, 502]


def test_rank_scores_are_stable_on_ties():
    manager = EntriesManager()
    manager.add(CatalogEntry(id="a", name="Alpah"))
    manager.add(CatalogEntry(id="b", name="Alpah"))

    assert manager.add(CatalogEntry(id="a", name="Other")) is False
    assert [entry.id for entry in manager.rank("alpha", match_exact=False)] == ["a", "b"]
