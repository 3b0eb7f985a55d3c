# Shared fixtures: every test gets its own sandbox root under tmp_path.

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from rootshare.api_server.api import create_api_app
from rootshare.core.config import FileManagerConfig
from rootshare.services.file_service import FileService
from rootshare.services.path_resolver import PathResolver


@pytest.fixture
def scratch_dir(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def config(tmp_path, scratch_dir):
    return FileManagerConfig.create(tmp_path / "root", case_insensitive=False, temp_dir=scratch_dir)


@pytest.fixture
def root(config) -> Path:
    return config.root


@pytest.fixture
def resolver(config):
    return PathResolver(config)


@pytest.fixture
def service(config):
    return FileService(config)


@pytest.fixture
def client(config):
    return TestClient(create_api_app(config))


@pytest.fixture
def make_symlink():
    """Creates a symlink or skips the test where the platform refuses to."""

    def _make(link: Path, target: Path, target_is_directory: bool = False):
        try:
            os.symlink(target, link, target_is_directory=target_is_directory)
        except (OSError, NotImplementedError) as e:
            pytest.skip(f"symlinks not supported here: {e}")
        return link

    return _make
