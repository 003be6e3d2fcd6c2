"""Tests for settings loading and YAML interpolation."""

import os
from unittest.mock import patch

import pytest
import yaml

import rentdesk.config as config_mod
from rentdesk.config import (
    clear_settings_cache,
    get_config_path,
    get_settings,
    interpolate_env_vars,
    set_config_path,
)


@pytest.fixture(autouse=True)
def reset_config():
    config_mod._config_path_override = None
    clear_settings_cache()
    yield
    config_mod._config_path_override = None
    clear_settings_cache()


class TestInterpolateEnvVars:
    def test_replaces_nested_values(self):
        with patch.dict(os.environ, {"SUPABASE_KEY": "secret"}):
            result = interpolate_env_vars({"a": ["$SUPABASE_KEY", {"b": "key=$SUPABASE_KEY"}]})
        assert result == {"a": ["secret", {"b": "key=secret"}]}

    def test_missing_variable_raises(self):
        os.environ.pop("RENTDESK_MISSING_VAR", None)
        with pytest.raises(ValueError, match="RENTDESK_MISSING_VAR"):
            interpolate_env_vars("$RENTDESK_MISSING_VAR")

    def test_non_strings_untouched(self):
        assert interpolate_env_vars(5) == 5


class TestGetConfigPath:
    def test_override(self, tmp_path):
        set_config_path(tmp_path / "custom.yaml")
        assert get_config_path() == tmp_path / "custom.yaml"

    def test_environment_specific_file(self):
        with patch.dict(os.environ, {"RENTDESK_ENV": "testing"}):
            assert get_config_path().name == "app.testing.yaml"

    def test_production_fallback(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("RENTDESK_ENV", None)
            assert get_config_path().name == "app.yaml"


class TestGetSettings:
    def test_defaults_without_file(self, tmp_path):
        set_config_path(tmp_path / "missing.yaml")
        settings = get_settings()
        assert settings.storage.backend == "local"
        assert settings.assets == {}
        assert settings.logfire.enabled is False

    def test_loads_storage_and_overrides(self, tmp_path):
        config_file = tmp_path / "app.yaml"
        config_file.write_text(yaml.safe_dump({
            "debug": True,
            "storage": {
                "backend": "supabase",
                "supabase": {"url": "https://abc.supabase.co", "service_key": "$TEST_SERVICE_KEY"},
            },
            "assets": {"document": {"max_size_mb": 20}},
        }))
        set_config_path(config_file)

        with patch.dict(os.environ, {"TEST_SERVICE_KEY": "k-123"}):
            settings = get_settings()

        assert settings.debug is True
        assert settings.storage.supabase.service_key == "k-123"
        assert settings.storage.supabase.timeout == 30.0
        assert settings.assets["document"].max_size_mb == 20
        assert settings.assets["document"].allowed_types is None

    def test_cached_until_cleared(self, tmp_path):
        set_config_path(tmp_path / "missing.yaml")
        assert get_settings() is get_settings()
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
