"""Tests for command line input validation."""

import pytest

from mcsi.exceptions import ValidationError
from mcsi.utils.validation import InstallValidator


def test_target_directory_is_resolved(tmp_path) -> None:
    assert InstallValidator.validate_target_directory(str(tmp_path / "a" / ".." / "b")) == tmp_path / "b"


def test_target_directory_must_not_be_a_file(tmp_path) -> None:
    path = tmp_path / "file"
    path.write_text("x")

    with pytest.raises(ValidationError):
        InstallValidator.validate_target_directory(path)


@pytest.mark.parametrize("path", ["/etc", "/usr/lib/minecraft", ""])
def test_target_directory_rejects_system_paths(path: str) -> None:
    with pytest.raises(ValidationError):
        InstallValidator.validate_target_directory(path)


def test_search_terms_drop_blanks() -> None:
    assert InstallValidator.validate_search_terms(["a", " ", "b "]) == ["a", "b"]

    with pytest.raises(ValidationError):
        InstallValidator.validate_search_terms(["  "])


@pytest.mark.parametrize("version", ["43.2.21", "20.4.80-beta", "0.14.21+build.1"])
def test_loader_version_accepts(version: str) -> None:
    assert InstallValidator.validate_loader_version(version) == version


def test_loader_version_rejects_spaces() -> None:
    with pytest.raises(ValidationError):
        InstallValidator.validate_loader_version("43 2")
