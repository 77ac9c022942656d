from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.package_builder import PackageBuilder, seed_sample_tree


@pytest.fixture
def package_builder(tmp_path: Path) -> PackageBuilder:
    """Provide a reusable source tree builder rooted at the pytest tmp_path."""
    return PackageBuilder(tmp_path)


@pytest.fixture
def sample_tree(package_builder: PackageBuilder) -> PackageBuilder:
    """Source tree holding the `one`, `two` and `three` sample packages."""
    seed_sample_tree(package_builder)
    return package_builder
