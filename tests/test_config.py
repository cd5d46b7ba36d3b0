import json

import pytest

from MovieDownloader.utils.config_json import ConfigManager
from MovieDownloader.utils.os import InternetManager, OsManager


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "REQUESTS": {"timeout": "7", "verify": "false"},
        "SITE": {"languages": "it, en"},
        "CUSTOM": {"flag": True}
    }))
    return path


def test_user_values_override_defaults(config_file):
    manager = ConfigManager(str(config_file))

    assert manager.get_int("REQUESTS", "timeout") == 7
    assert manager.get_bool("REQUESTS", "verify") is False
    assert manager.get_int("REQUESTS", "max_retry") == 4
    assert manager.get_list("SITE", "languages") == ["it", "en"]
    assert manager.get_bool("CUSTOM", "flag") is True


def test_missing_file_uses_defaults(tmp_path):
    manager = ConfigManager(str(tmp_path / "nope.json"))

    assert manager.get("DOWNLOAD", "quality") == "best"
    assert manager.get("DOWNLOAD", "missing", "fallback") == "fallback"


def test_environment_variable_points_to_file(config_file, monkeypatch):
    monkeypatch.setenv("MOVIE_DOWNLOADER_CONFIG", str(config_file))

    assert ConfigManager().get_int("REQUESTS", "timeout") == 7


def test_invalid_int_falls_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"DOWNLOAD": {"thread_count": "many"}}))

    assert ConfigManager(str(path)).get_int("DOWNLOAD", "thread_count", 8) == 8


def test_get_dict_requires_an_object(config_file):
    with pytest.raises(KeyError):
        ConfigManager(str(config_file)).get_dict("REQUESTS", "timeout")


def test_broken_json_is_reported(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(json.JSONDecodeError):
        ConfigManager(str(path))


@pytest.mark.parametrize("size, expected", [(0, "0.00 B"), (1536, "1.50 KB"), (1048576, "1.00 MB")])
def test_format_file_size(size, expected):
    assert InternetManager().format_file_size(size) == expected


def test_sanitize_file_name():
    assert OsManager().get_sanitize_file('What? A "Movie": Part 1/2') == "What A Movie Part 12"
