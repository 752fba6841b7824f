"""Settings.from_env のテスト."""

import dataclasses

import pytest

from marketscraper.config import DEFAULT_BASE_URL, Settings

ENV_NAMES = ("SCRAPING_URI", "MAX_PAGES", "REQUEST_TIMEOUT", "MAX_REDIRECTS", "DEBUG")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsFromEnv:
    """Settings.from_env のテスト."""

    def test_defaults(self, clean_env):
        settings = Settings.from_env()
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.max_pages == 3
        assert settings.request_timeout == 25.0
        assert settings.max_redirects == 5
        assert settings.debug is False

    def test_overrides(self, clean_env):
        clean_env.setenv("SCRAPING_URI", "https://www.amazon.co.uk/")
        clean_env.setenv("MAX_PAGES", "5")
        clean_env.setenv("REQUEST_TIMEOUT", "10")
        clean_env.setenv("MAX_REDIRECTS", "2")
        clean_env.setenv("DEBUG", "true")

        settings = Settings.from_env()

        assert settings.base_url == "https://www.amazon.co.uk/"
        assert settings.max_pages == 5
        assert settings.request_timeout == 10.0
        assert settings.max_redirects == 2
        assert settings.debug is True

    def test_invalid_numbers_fall_back(self, clean_env):
        clean_env.setenv("MAX_PAGES", "many")
        clean_env.setenv("REQUEST_TIMEOUT", "-1")

        settings = Settings.from_env()

        assert settings.max_pages == 3
        assert settings.request_timeout == 25.0

    def test_max_pages_at_least_one(self, clean_env):
        clean_env.setenv("MAX_PAGES", "0")
        assert Settings.from_env().max_pages == 1

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Settings().max_pages = 10


class TestLogDir:
    """LOG_DIR のテスト."""

    def test_relative_to_working_directory(self, clean_env, tmp_path):
        """インストール先ではなく実行ディレクトリ基準で解決されること."""
        import importlib

        import marketscraper.config as config

        clean_env.chdir(tmp_path)
        clean_env.delenv("LOG_DIR", raising=False)
        try:
            reloaded = importlib.reload(config)
            assert reloaded.LOG_DIR.resolve() == (tmp_path / "logs").resolve()

            clean_env.setenv("LOG_DIR", str(tmp_path / "custom"))
            assert importlib.reload(config).LOG_DIR == tmp_path / "custom"
        finally:
            clean_env.undo()
            importlib.reload(config)
