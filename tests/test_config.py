import tomllib

from repair_bom import config


def test_relative_sqlite_path_resolves_next_to_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "SETTINGS_PATH", tmp_path / "settings.toml")
    url = config._ensure_sqlite_directory("sqlite:///data/bom.db")
    assert url == f"sqlite:///{(tmp_path / 'data' / 'bom.db').as_posix()}"
    assert (tmp_path / "data").is_dir()


def test_non_file_urls_are_untouched():
    assert config._ensure_sqlite_directory("sqlite:///:memory:") == "sqlite:///:memory:"
    assert (
        config._ensure_sqlite_directory("postgresql://u:p@db/repair")
        == "postgresql://u:p@db/repair"
    )


def test_save_database_url_persists(tmp_path, monkeypatch):
    settings = tmp_path / "settings.toml"
    monkeypatch.setattr(config, "SETTINGS_PATH", settings)
    db_url = f"sqlite:///{(tmp_path / 'saved.db').as_posix()}"
    config.save_database_url(db_url)
    with open(settings, "rb") as handle:
        data = tomllib.load(handle)
    assert data["database"]["url"] == db_url
    assert config.DATABASE_URL == db_url


def test_env_database_url_wins(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    assert config.load_settings() == "sqlite:///:memory:"
