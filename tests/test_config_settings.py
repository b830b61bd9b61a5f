"""
Tests for flatmodel/config/settings.py and flatmodel/config/store.py
"""

from pathlib import Path

import pytest

from flatmodel.config.settings import Settings, get_settings, reset_settings
from flatmodel.config.store import CsvDialect, StoreConfig, StorePolicy


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FLATMODEL_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("FLATMODEL_DELIMITER", ";")
    monkeypatch.setenv("FLATMODEL_ESCAPE", "")
    monkeypatch.setenv("FLATMODEL_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.base_dir == tmp_path
    assert settings.delimiter == ";"
    assert settings.escape == ""
    assert settings.log_level_number == 10


def test_settings_defaults(monkeypatch):
    for name in ("FLATMODEL_BASE_DIR", "FLATMODEL_DELIMITER", "FLATMODEL_ENCLOSURE",
                 "FLATMODEL_ESCAPE", "FLATMODEL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.base_dir == Path.cwd()
    assert settings.delimiter == ","
    assert settings.enclosure == '"'
    assert settings.escape == "\\"
    assert settings.log_level == "WARNING"


def test_settings_reject_bad_values():
    with pytest.raises(ValueError):
        Settings(base_dir=Path("."), delimiter=";;")
    with pytest.raises(ValueError):
        Settings(base_dir=Path("."), log_level="LOUD")


def test_get_settings_caches_until_reset(monkeypatch):
    monkeypatch.setenv("FLATMODEL_DELIMITER", "|")
    first = get_settings()

    monkeypatch.setenv("FLATMODEL_DELIMITER", ";")
    assert get_settings() is first

    reset_settings()
    assert get_settings().delimiter == ";"


def test_dialect_from_settings():
    dialect = CsvDialect.from_settings(Settings(base_dir=Path("."), delimiter="\t", escape=""))

    assert dialect == CsvDialect(delimiter="\t", enclosure='"', escape="")
    assert dialect.reader_options()["escapechar"] is None


def test_dialect_validation():
    with pytest.raises(ValueError):
        CsvDialect(delimiter="")
    with pytest.raises(ValueError):
        CsvDialect(delimiter='"')


def test_store_config_normalizes_and_validates():
    config = StoreConfig(path="users.csv", headers=["id", "name"])

    assert config.headers == ("id", "name")
    assert config.policy == StorePolicy()

    with pytest.raises(ValueError):
        StoreConfig(headers=["id", "id"])
    with pytest.raises(ValueError):
        StoreConfig(primary_key=" ")


def test_store_config_resolves_paths(tmp_path, monkeypatch):
    assert StoreConfig().resolve_path() is None
    assert StoreConfig(path=tmp_path / "a.csv").resolve_path() == tmp_path / "a.csv"
    assert StoreConfig(path="csv/a.csv").resolve_path(tmp_path) == tmp_path / "csv" / "a.csv"

    monkeypatch.setenv("FLATMODEL_BASE_DIR", str(tmp_path))
    reset_settings()
    assert StoreConfig(path="b.csv").resolve_path() == tmp_path / "b.csv"
