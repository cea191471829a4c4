"""
Shared fixtures for Release Watcher tests.

Provides common test fixtures for use across all test modules.
"""

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from release_watcher.config import AppConfig, PollingConfig, StorageConfig
from release_watcher.storage import CacheStore


# Path to test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    """Return path to sample config file."""
    return fixtures_dir / "sample_config.yaml"


@pytest.fixture
def minimal_config_dict() -> dict[str, Any]:
    """
    Create a minimal valid configuration dictionary.

    Returns
    -------
    dict
        Configuration dictionary that can be used to create AppConfig.
    """
    return {"repos": ["a/b"]}


@pytest.fixture
def cache_store(tmp_path: Path) -> CacheStore:
    """
    Create a cache store inside a temporary directory.

    Returns
    -------
    CacheStore
        A store whose file does not exist yet.
    """
    return CacheStore("github-release.txt", cache_dir=tmp_path / "cache")


@pytest.fixture
def fast_config(tmp_path: Path) -> AppConfig:
    """
    Create a configuration with every delay disabled.

    Returns
    -------
    AppConfig
        Watches ``a/b`` then ``c/d`` with a temporary cache directory.
    """
    return AppConfig(
        repos=["a/b", "c/d"],
        polling=PollingConfig(check_interval=0, request_delay=0, error_delay=0),
        storage=StorageConfig(cache_dir=str(tmp_path / "cache")),
    )


@pytest.fixture
def mock_fetcher() -> MagicMock:
    """
    Create a mock release fetcher.

    Returns
    -------
    MagicMock
        A fetcher with async ``fetch_latest_tag`` and ``close``.
    """
    fetcher = MagicMock()
    fetcher.fetch_latest_tag = AsyncMock(return_value=None)
    fetcher.close = AsyncMock()
    return fetcher


@pytest.fixture
def mock_notifier() -> MagicMock:
    """
    Create a mock notifier.

    Returns
    -------
    MagicMock
        A notifier with an async ``notify``.
    """
    notifier = MagicMock()
    notifier.notify = AsyncMock()
    return notifier

