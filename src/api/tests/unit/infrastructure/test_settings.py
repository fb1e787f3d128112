"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    ContentServiceSettings,
    DatabaseSettings,
    MembershipSettings,
    ReclamationSettings,
    Settings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_max_respects_upper_limit(self):
        """Pool max should not exceed reasonable limit."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_connection_string_omits_password(self):
        """The loggable connection string never carries the password."""
        settings = DatabaseSettings(username="og", password="secret", host="db")
        assert "secret" not in settings.connection_string
        assert settings.connection_string == "postgresql://og@db:5432/organic_groups"


class TestMembershipSettings:
    """Tests for membership settings."""

    def test_default_roles(self):
        """New group types get administrator and moderator by default."""
        assert MembershipSettings().default_roles == ["administrator", "moderator"]

    def test_group_types_are_parsed(self):
        """Group types are entity_type:bundle strings."""
        settings = MembershipSettings(group_types=["node:club", "taxonomy_term:team"])
        assert settings.parsed_group_types() == [
            ("node", "club"),
            ("taxonomy_term", "team"),
        ]

    @pytest.mark.parametrize("value", ["node", "node:", ":club"])
    def test_malformed_group_type_rejected(self, value):
        """A group type needs both halves."""
        with pytest.raises(ValidationError):
            MembershipSettings(group_types=[value])


class TestReclamationSettings:
    """Tests for reclamation settings."""

    def test_defaults(self):
        """Defaults select the simple strategy and the standard queue."""
        settings = ReclamationSettings()
        assert settings.strategy == "simple"
        assert settings.queue_name == "og_orphaned_group_content"
        assert settings.batch_size == 10
        assert settings.max_retries == 5

    def test_unknown_strategy_rejected(self):
        """Only simple, batch and cron exist."""
        with pytest.raises(ValidationError):
            ReclamationSettings(strategy="move")

    def test_batch_size_must_be_positive(self):
        """A batch holds at least one candidate."""
        with pytest.raises(ValidationError):
            ReclamationSettings(batch_size=0)

    def test_cron_time_limit_must_fit_interval(self):
        """A cron run must end before the next one starts."""
        with pytest.raises(ValidationError) as exc_info:
            ReclamationSettings(cron_time_limit_seconds=90, cron_interval_seconds=60)

        assert "cron_time_limit_seconds" in str(exc_info.value)

    def test_strategy_from_environment(self, monkeypatch):
        """OG_RECLAMATION_STRATEGY selects the strategy."""
        monkeypatch.setenv("OG_RECLAMATION_STRATEGY", "cron")
        assert ReclamationSettings().strategy == "cron"


class TestContentServiceSettings:
    """Tests for content service settings."""

    def test_no_base_url_by_default(self):
        """Without a base URL content stays in process."""
        assert ContentServiceSettings().base_url is None

    def test_timeout_must_be_positive(self):
        """Zero timeouts are rejected."""
        with pytest.raises(ValidationError):
            ContentServiceSettings(timeout_seconds=0)


class TestSettings:
    """Tests for the main settings."""

    def test_defaults(self):
        """The memory backend is the default."""
        settings = Settings()
        assert settings.storage_backend == "memory"
        assert settings.log_level == "INFO"

    def test_storage_backend_from_environment(self, monkeypatch):
        """OG_STORAGE_BACKEND selects the backend."""
        monkeypatch.setenv("OG_STORAGE_BACKEND", "postgres")
        assert Settings().storage_backend == "postgres"

    def test_invalid_log_level_rejected(self):
        """Only known level names are accepted."""
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")
