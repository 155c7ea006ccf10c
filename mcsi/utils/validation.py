"""
Common validation utilities for mcsi.

This module provides shared validation functions used by the CLI before
any network or filesystem work starts.
"""

import re
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ..constants import MAX_VERSION_LENGTH, VALID_VERSION_CHARS
from ..exceptions import ValidationError
from ..version import McVersion

FORBIDDEN_SYSTEM_PATHS: List[str] = ['/etc', '/usr', '/var', '/boot', '/sys', '/proc', '/dev']


class BaseValidator:
    """Base validator class with common validation methods."""

    @staticmethod
    def validate_non_empty_string(value: Any, field_name: str) -> str:
        """Validate that value is a non-empty string."""
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field_name} cannot be empty")

        return stripped

    @staticmethod
    def validate_positive_integer(value: Any, field_name: str) -> int:
        """Validate that value is a positive integer."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{field_name} must be an integer")

        if value <= 0:
            raise ValidationError(f"{field_name} must be positive")

        return value

    @staticmethod
    def validate_string_length(
        value: str,
        field_name: str,
        max_length: int,
        min_length: int = 1
    ) -> str:
        """Validate string length constraints."""
        if len(value) < min_length:
            raise ValidationError(f"{field_name} must be at least {min_length} characters")

        if len(value) > max_length:
            raise ValidationError(f"{field_name} must be no more than {max_length} characters")

        return value

    @staticmethod
    def validate_regex_pattern(
        value: str,
        field_name: str,
        pattern: str,
        pattern_description: str = "valid format"
    ) -> str:
        """Validate that value matches the given regex pattern."""
        if not re.match(pattern, value):
            raise ValidationError(f"{field_name} must have {pattern_description}")

        return value


class InstallValidator(BaseValidator):
    """Validator for install command inputs."""

    @staticmethod
    def validate_release_version(version: Any) -> str:
        """Validate a release selector (``latest``, a file id or a name fragment)."""
        version_str = InstallValidator.validate_non_empty_string(version, "Version")
        return InstallValidator.validate_string_length(version_str, "Version", MAX_VERSION_LENGTH)

    @staticmethod
    def validate_loader_version(version: Any) -> str:
        """Validate a loader version such as ``43.2.21``."""
        version_str = InstallValidator.validate_non_empty_string(version, "Loader version")
        version_str = InstallValidator.validate_string_length(
            version_str, "Loader version", MAX_VERSION_LENGTH
        )
        return InstallValidator.validate_regex_pattern(
            version_str,
            "Loader version",
            VALID_VERSION_CHARS,
            "valid characters (alphanumeric, dots, dashes, underscores, plus signs only)"
        )

    @staticmethod
    def validate_mc_version(version: Any) -> McVersion:
        """Validate and parse a Minecraft version."""
        version_str = InstallValidator.validate_non_empty_string(version, "Minecraft version")
        return McVersion.parse(version_str)

    @staticmethod
    def validate_search_terms(terms: Optional[Sequence[str]]) -> List[str]:
        """Validate FTB search terms, dropping blank entries."""
        cleaned = [term.strip() for term in terms or [] if term and term.strip()]
        if not cleaned:
            raise ValidationError("At least one search term is required")
        return cleaned

    @staticmethod
    def validate_target_directory(directory: Any) -> Path:
        """Validate the install target directory path."""
        if not isinstance(directory, (str, Path)) or not str(directory).strip():
            raise ValidationError("Target directory must be a non-empty path")

        try:
            directory_path = Path(directory).expanduser().resolve()
        except (OSError, RuntimeError) as e:
            raise ValidationError(f"Invalid directory path: {directory}", e)

        if directory_path.exists() and not directory_path.is_dir():
            raise ValidationError(f"Target {directory_path} exists and is not a directory")

        path_str = str(directory_path)
        for forbidden_path in FORBIDDEN_SYSTEM_PATHS:
            if path_str == forbidden_path or path_str.startswith(forbidden_path + "/"):
                raise ValidationError("Cannot install to system directories")

        return directory_path
