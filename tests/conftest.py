"""Shared fixtures for the mcsi test suite."""

from pathlib import Path

import pytest

from fakes import FakeCatalog, FakeDownloader
from mcsi.context import ExecutionContext
from mcsi.utils.stager import ArtifactStager


@pytest.fixture
def target_dir(tmp_path) -> Path:
    path = tmp_path / "server"
    path.mkdir()
    return path


@pytest.fixture
def context(target_dir) -> ExecutionContext:
    ctx = ExecutionContext.for_target(target_dir)
    ctx.setup()
    return ctx


@pytest.fixture
def downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture
def stager(downloader) -> ArtifactStager:
    return ArtifactStager(downloader)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()
