import os
from pathlib import Path

import pytest

from flaclink.orchestrator.config import ConfigManager

from tests.utils import make_tree


@pytest.fixture
def config(tmp_path: Path) -> ConfigManager:
    config = ConfigManager(tmp_path / "data")
    config.setup_data_dir()
    return config


@pytest.fixture
def source(tmp_path: Path) -> Path:
    return make_tree(tmp_path / "downloads", {})


@pytest.fixture
def target(tmp_path: Path) -> Path:
    return make_tree(tmp_path / "music", {})


@pytest.fixture
def as_unprivileged():
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        pytest.skip("permission checks don't apply to root")
