"""Tests for artifact staging and the execution context."""

import asyncio

import pytest

from fakes import zip_bytes
from mcsi.exceptions import StagingIOError
from mcsi.utils.stager import closest_common_parent, iter_relative_files


def _touch(path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x")


class TestClosestCommonParent:

    def test_unwraps_nested_wrappers(self, tmp_path) -> None:
        _touch(tmp_path / "Pack" / "server" / "mods" / "a.jar")
        _touch(tmp_path / "Pack" / "server" / "config" / "c.toml")
        _touch(tmp_path / "Pack" / "server" / "start.sh")

        assert closest_common_parent(tmp_path) == tmp_path / "Pack" / "server"

    def test_root_with_several_directories_is_content_root(self, tmp_path) -> None:
        _touch(tmp_path / "mods" / "a.jar")
        _touch(tmp_path / "config" / "c.toml")
        _touch(tmp_path / "server.jar")

        assert closest_common_parent(tmp_path) == tmp_path

    def test_single_file_is_not_descended_into(self, tmp_path) -> None:
        _touch(tmp_path / "server.jar")

        assert closest_common_parent(tmp_path) == tmp_path

    def test_deepest_lone_directory_wins(self, tmp_path) -> None:
        _touch(tmp_path / "Pack" / "config" / "sub" / "only.toml")
        _touch(tmp_path / "Pack" / "mods" / "a.jar")

        assert closest_common_parent(tmp_path) == tmp_path / "Pack" / "config" / "sub"

    def test_loose_file_beside_wrapper_is_ignored(self, tmp_path) -> None:
        _touch(tmp_path / "README.txt")
        _touch(tmp_path / "Pack Server" / "mods" / "a.jar")
        _touch(tmp_path / "Pack Server" / "config" / "c.toml")
        _touch(tmp_path / "Pack Server" / "start.sh")

        assert closest_common_parent(tmp_path) == tmp_path / "Pack Server"

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(StagingIOError):
            closest_common_parent(tmp_path / "nope")


class TestArtifactStager:

    def test_download_creates_parent_directories(self, tmp_path, stager, downloader) -> None:
        downloader.payloads["https://x/a"] = b"abc"

        path = asyncio.run(stager.download("https://x/a", tmp_path / "deep" / "a.bin"))

        assert path.read_bytes() == b"abc"

    def test_extract_zip(self, tmp_path, stager) -> None:
        archive = tmp_path / "pack.zip"
        archive.write_bytes(zip_bytes({"a/b.txt": b"hi", "c.txt": b"yo"}))

        stager.extract_zip(archive, tmp_path / "out")

        assert (tmp_path / "out" / "a" / "b.txt").read_bytes() == b"hi"

    def test_extract_bad_archive(self, tmp_path, stager) -> None:
        archive = tmp_path / "broken.zip"
        archive.write_bytes(b"not a zip")

        with pytest.raises(StagingIOError):
            stager.extract_zip(archive, tmp_path / "out")

    def test_recursive_copy_overwrites_and_keeps_other_files(self, tmp_path, stager) -> None:
        src = tmp_path / "src"
        dest = tmp_path / "dest"
        _touch(src / "mods" / "a.jar")
        (src / "server.jar").write_text("new")
        _touch(dest / "world" / "level.dat")
        (dest / "server.jar").write_text("old")

        count = stager.recursive_copy(src, dest)

        assert count == 2
        assert (dest / "server.jar").read_text() == "new"
        assert (dest / "world" / "level.dat").is_file()
        assert sorted(p.as_posix() for p in iter_relative_files(dest)) == [
            "mods/a.jar", "server.jar", "world/level.dat",
        ]


class TestExecutionContext:

    def test_paths_live_under_mcsi(self, context) -> None:
        mcsi = context.target_dir / ".mcsi"
        assert context.work_dir == mcsi / "work_dir"
        assert context.backups_dir == mcsi / "backups"
        assert context.logs_dir == mcsi / "logs"

    def test_setup_removes_stale_scratch(self, context) -> None:
        _touch(context.client_dir / "left.txt")
        _touch(context.work_dir / "left.txt")

        context.setup()

        assert not context.client_dir.exists()
        assert not context.work_dir.exists()

    def test_fresh_dir_empties_existing(self, context) -> None:
        _touch(context.server_dir / "old.txt")

        context.fresh_dir(context.server_dir)

        assert context.server_dir.is_dir()
        assert list(context.server_dir.iterdir()) == []
