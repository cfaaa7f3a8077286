"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Tests run against the real project files (YAML configs).
Failure scenarios use tmp_path to create controlled filesystems.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from pgops.core.config import (
    AppConfig,
    Settings,
    find_project_root,
    get_app_config,
    get_database_service_endpoint,
    get_platform_endpoint,
    get_settings,
    load_yaml_config,
    validate_project_root,
)
from pgops.core.config_schema import ApplicationSchema, LoggingSchema, WaitSchema
from pgops.core.exceptions import ConfigurationError


def _write_settings(root, application: str, logging: str) -> None:
    (root / ".project_root").touch()
    settings_dir = root / "config" / "settings"
    settings_dir.mkdir(parents=True)
    (settings_dir / "application.yaml").write_text(application)
    (settings_dir / "logging.yaml").write_text(logging)


# =============================================================================
# find_project_root
# =============================================================================


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_project_directory(self):
        root = find_project_root()
        assert root.is_dir()
        assert (root / ".project_root").exists()

    def test_config_directory_exists_at_root(self):
        root = find_project_root()
        assert (root / "config" / "settings").is_dir()

    def test_finds_root_from_subdirectory(self, tmp_path, monkeypatch):
        (tmp_path / ".project_root").touch()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert find_project_root() == tmp_path

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()


class TestValidateProjectRoot:
    """Tests for the SystemExit wrapper around find_project_root."""

    def test_returns_path_when_marker_exists(self):
        root = validate_project_root()
        assert (root / ".project_root").exists()

    def test_exits_when_marker_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            validate_project_root()


# =============================================================================
# load_yaml_config
# =============================================================================


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    def test_loads_application_yaml_as_dict(self):
        data = load_yaml_config("application.yaml")
        assert isinstance(data, dict)
        assert "platform" in data
        assert "database_service" in data

    def test_raises_for_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, tmp_path, monkeypatch):
        """An empty YAML file should return {} rather than None."""
        (tmp_path / ".project_root").touch()
        settings_dir = tmp_path / "config" / "settings"
        settings_dir.mkdir(parents=True)
        (settings_dir / "empty.yaml").write_text("")
        monkeypatch.chdir(tmp_path)

        assert load_yaml_config("empty.yaml") == {}


# =============================================================================
# Settings (per-user values)
# =============================================================================


class TestSettings:
    """Tests for per-user settings."""

    def test_require_api_key_returns_value(self):
        assert Settings(platform_api_key="k").require_api_key() == "k"

    def test_require_api_key_raises_when_missing(self):
        with pytest.raises(ConfigurationError, match="PLATFORM_API_KEY"):
            Settings(platform_api_key=None).require_api_key()

    def test_require_app_returns_value(self):
        assert Settings(platform_app="myapp").require_app() == "myapp"

    def test_require_app_raises_when_blank(self):
        with pytest.raises(ConfigurationError, match="PLATFORM_APP"):
            Settings(platform_app="").require_app()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PLATFORM_APP", "from-env")
        assert Settings().platform_app == "from-env"


# =============================================================================
# AppConfig (validated YAML)
# =============================================================================


class TestAppConfig:
    """Tests for validated YAML configuration loading."""

    def test_application_returns_typed_schema(self):
        assert isinstance(AppConfig().application, ApplicationSchema)

    def test_logging_returns_typed_schema(self):
        assert isinstance(AppConfig().logging, LoggingSchema)

    def test_application_has_attribute_access(self):
        app = AppConfig().application
        assert isinstance(app.name, str)
        assert app.platform.api_url.startswith("https://")
        assert app.database_service.api_url.startswith("https://")
        assert app.wait.interval_seconds > 0

    def test_rejects_yaml_with_missing_required_fields(self, tmp_path, monkeypatch):
        _write_settings(tmp_path, "name: 'Incomplete'", "level: INFO")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            AppConfig()

    def test_rejects_yaml_with_unknown_fields(self):
        data = load_yaml_config("application.yaml")
        data["unknown_field"] = "oops"
        with pytest.raises(PydanticValidationError, match="Extra inputs are not permitted"):
            ApplicationSchema(**data)

    def test_rejects_non_positive_wait_interval(self):
        with pytest.raises(PydanticValidationError):
            WaitSchema(interval_seconds=0)


# =============================================================================
# Cached accessors
# =============================================================================


class TestCachedAccessors:
    """Tests for get_settings() and get_app_config()."""

    def test_settings_caching_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_app_config_caching_returns_same_instance(self):
        assert get_app_config() is get_app_config()


# =============================================================================
# Endpoints
# =============================================================================


class TestEndpoints:
    """Tests for API endpoint lookups."""

    @pytest.mark.parametrize("lookup", [get_platform_endpoint, get_database_service_endpoint])
    def test_returns_url_and_positive_timeout(self, lookup):
        base_url, timeout = lookup()
        assert base_url.startswith("https://")
        assert isinstance(timeout, float)
        assert timeout > 0

    def test_endpoints_come_from_application_yaml(self):
        app = get_app_config().application
        assert get_platform_endpoint()[0] == app.platform.api_url
        assert get_database_service_endpoint()[0] == app.database_service.api_url
