from conftest import PLAYER_URL, media_playlist

from MovieDownloader.services._base import ResolutionTarget


def test_search_resolve_playlist_download(site, make_client, tmp_path):
    site.titles = {"it": [{"id": "m1", "name": "Alpha", "type": "movie", "slug": "alpha"}]}
    site.add_playable("m1", master=media_playlist(["seg0.ts", "seg1.ts"]))
    site.files[f"{PLAYER_URL}/playlist/seg0.ts"] = b"He"
    site.files[f"{PLAYER_URL}/playlist/seg1.ts"] = b"llo"
    client = make_client()

    entries = client.search("Alpha", match_exact=True, match_estimate=True)
    assert [entry.id for entry in entries] == ["m1"]
    assert entries[0].match == "exact"
    assert not entries[0].is_series

    target = client.resolve(entries[0])
    assert target == ResolutionTarget(movie_id="m1")

    manifest = client.get_playlist(target)
    assert len(manifest.segments) == 2

    destination = tmp_path / "Alpha.mp4"
    result = client.download(manifest, str(destination))

    assert result.success
    assert destination.read_bytes() == b"Hello"


def test_series_episode_pipeline(site, make_client, tmp_path):
    site.titles = {"it": [{"id": 10, "name": "Gamma", "type": "tv", "slug": "gamma"}]}
    site.add_series(10, {1: [{"id": 501, "number": 1}], 3: [{"id": 701, "number": 4}]})
    site.add_playable(10, episode_id=701, master=media_playlist(["ep.ts"]))
    site.files[f"{PLAYER_URL}/playlist/ep.ts"] = b"episode"
    client = make_client()

    entry = client.search("Gamma")[0]
    target = client.resolve(entry, season_number=3, episode_number=4)
    assert target == ResolutionTarget(movie_id=10, episode_id=701, season_number=3)

    result = client.download(client.get_playlist(target, language=entry.provider_language), str(tmp_path / "ep.mp4"))

    assert (tmp_path / "ep.mp4").read_bytes() == b"episode"
    assert result.size == 7
