"""
Pytest configuration and shared fixtures for binfetch tests.
"""

import json
from pathlib import Path

import pytest

from binfetch.config.settings import InstallerConfig
from binfetch.core.environment import Environment


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


def _release_body(*asset_names: str) -> str:
    return json.dumps(
        {
            "tag_name": "v1.0.0",
            "assets": [
                {
                    "name": name,
                    "url": f"https://api.github.com/repos/owner/tool/releases/assets/{42 + i}",
                }
                for i, name in enumerate(asset_names)
            ],
        }
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def make_release():
    """Build a release API body listing the given asset names."""
    return _release_body


@pytest.fixture
def linux_env() -> Environment:
    """Linux x64 host with an empty environment."""
    return Environment(os_name="linux", machine="x86_64", environ={})


@pytest.fixture
def darwin_env() -> Environment:
    """Apple silicon host with an empty environment."""
    return Environment(os_name="darwin", machine="arm64", environ={})


@pytest.fixture
def windows_env() -> Environment:
    """Windows x64 host with an empty environment."""
    return Environment(os_name="win32", machine="AMD64", environ={})


@pytest.fixture
def installer_config(tmp_path: Path) -> InstallerConfig:
    """Configuration for a tool named 'tool' in 'owner/tool'."""
    return InstallerConfig(
        tool_name="tool",
        repo="owner/tool",
        version="v1.0.0",
        user_agent="binfetch-tests",
        bin_dir=tmp_path / "out",
        cache_dir=tmp_path / "cache",
    )
