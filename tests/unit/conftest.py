"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching a real API.
"""

from typing import Any
from unittest.mock import MagicMock

import pytest

from pgops.cli.models import DatabaseStatus
from pgops.core.config import Settings


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings for the app "myapp" with a dummy API key."""
    return Settings(platform_api_key="test-api-key", platform_app="myapp")


# =============================================================================
# API Client Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_platform(config_vars: dict[str, Any]) -> MagicMock:
    """
    Mock PlatformClient for unit tests.

    Returns the shared config_vars fixture for any app.

    Usage:
        def test_promote(mock_platform):
            ...
            mock_platform.set_config_vars.assert_called_once()
    """
    platform = MagicMock()
    platform.config_vars.return_value = config_vars
    platform.app_info.return_value = {"database_size": 0}
    return platform


@pytest.fixture
def mock_db_client() -> MagicMock:
    """
    Mock DatabaseServiceClient for unit tests.

    Reports an available database unless a test overrides get_database.
    """
    client = MagicMock()
    client.get_database.return_value = DatabaseStatus(state="available")
    return client
