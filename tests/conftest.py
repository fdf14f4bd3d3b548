"""Pytest configuration for tapedeck."""

from __future__ import annotations

import os

import pytest

CI_ENV = "TAPEDECK_CI"


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    del config
    if os.environ.get(CI_ENV) != "1":
        return
    skip_vlc = pytest.mark.skip(reason="Skipping tests that need libVLC in CI.")
    for item in items:
        if "vlc" in item.keywords:
            item.add_marker(skip_vlc)
