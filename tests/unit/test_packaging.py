import os

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def test_project_metadata_points_only_at_package_files():
    with open(os.path.join(ROOT, "pyproject.toml"), "rb") as f:
        meta = tomllib.load(f)["project"]

    assert "readme" not in meta
    assert meta["scripts"]["car-price-analysis"] == "main:cli"
