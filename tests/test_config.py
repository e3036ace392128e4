"""Tests for loading settings from TOML files and the environment."""

import pytest

from newsmentions.config import (
    DEFAULT_AGGREGATE_LIMIT,
    DEFAULT_DATABASE_URL,
    DEFAULT_RETENTION_DAYS,
    NewsMentionsConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run each test in an empty directory with no config variables set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NEWSMENTIONS_CONFIG", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


class TestLoadConfig:
    """Tests for config discovery and precedence."""

    def test_defaults_without_file(self) -> None:
        """Built-in defaults apply when no file or variable is present."""
        config = load_config()

        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.retention_days == DEFAULT_RETENTION_DAYS
        assert config.aggregate_limit == DEFAULT_AGGREGATE_LIMIT

    def test_reads_file_in_working_directory(self, tmp_path) -> None:
        """newsmentions.toml in the working directory is picked up."""
        (tmp_path / "newsmentions.toml").write_text(
            '[store]\ndatabase_url = "sqlite:///news.db"\n\n[retention]\ndays = 7\nmax_attempts = 5\n\n[aggregation]\nlimit = 25\n'
        )

        config = load_config()

        assert config.database_url == "sqlite:///news.db"
        assert config.retention_days == 7
        assert config.prune_max_attempts == 5
        assert config.aggregate_limit == 25

    def test_env_var_names_file(self, tmp_path, monkeypatch) -> None:
        """NEWSMENTIONS_CONFIG takes precedence over the working directory file."""
        (tmp_path / "newsmentions.toml").write_text("[retention]\ndays = 7\n")
        other = tmp_path / "other.toml"
        other.write_text("[retention]\ndays = 14\n")
        monkeypatch.setenv("NEWSMENTIONS_CONFIG", str(other))

        assert load_config().retention_days == 14

    def test_database_url_env_overrides_file(self, tmp_path, monkeypatch) -> None:
        """DATABASE_URL wins over the configured database URL."""
        (tmp_path / "newsmentions.toml").write_text('[store]\ndatabase_url = "sqlite:///file.db"\n')
        monkeypatch.setenv("DATABASE_URL", "postgresql://db/news")

        assert load_config().database_url == "postgresql://db/news"

    def test_unreadable_file_skipped(self, tmp_path) -> None:
        """Invalid TOML falls back to defaults."""
        (tmp_path / "newsmentions.toml").write_text("this is = = not toml")

        assert load_config() == NewsMentionsConfig()

    def test_wrong_types_ignored(self, tmp_path) -> None:
        """Values of the wrong type keep their defaults."""
        (tmp_path / "newsmentions.toml").write_text('[retention]\ndays = "thirty"\n')

        assert load_config().retention_days == DEFAULT_RETENTION_DAYS
