"""
Unit tests for environment-driven settings.
"""

import pytest

from paper_engine.config import Settings, load_env, load_settings

ENV_VARS = [
    "PAPER_ENGINE_CACHE_PATH",
    "PAPER_ENGINE_HOST",
    "PAPER_ENGINE_PORT",
    "PAPER_ENGINE_LOG_FILE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_defaults(self):
        assert load_settings() == Settings()
        assert Settings().cache_path == "paper-engine-cache.pec"
        assert Settings().port == 42069

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAPER_ENGINE_CACHE_PATH", "/var/lib/pe/cache.pec")
        monkeypatch.setenv("PAPER_ENGINE_PORT", "8080")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.cache_path == "/var/lib/pe/cache.pec"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"

    def test_env_local_preferred(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("PAPER_ENGINE_HOST=from-env\n")
        (tmp_path / ".env.local").write_text("PAPER_ENGINE_HOST=from-env-local\n")
        # load_dotenv writes os.environ directly; register for cleanup
        monkeypatch.setenv("PAPER_ENGINE_HOST", "unset")

        load_env(tmp_path)

        assert load_settings().host == "from-env-local"

    def test_no_env_files(self, tmp_path):
        load_env(tmp_path)
        assert load_settings() == Settings()
