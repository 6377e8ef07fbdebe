"""Shared fixtures: a throwaway site tree holding every resource type."""

from pathlib import Path

import pytest

from simplates import SITE_FILES, write_site


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A site root holding one resource of every type."""
    return write_site(tmp_path / "test-site", SITE_FILES)


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    return tmp_path / "out"
