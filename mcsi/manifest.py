"""
Install manifest persistence.

The manifest lists, relative to the target directory, every file the
last install put there. Nothing under ``.mcsi`` is ever listed.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .constants import MANIFEST_FILE_NAME, MCSI_DIR_NAME
from .exceptions import ManifestError, ManifestNotFound

logger = logging.getLogger(__name__)


def _is_mcsi_path(relative: Path) -> bool:
    return MCSI_DIR_NAME in relative.parts


@dataclass
class PackManifest:
    """Ordered list of relative file paths owned by the current install."""

    files: List[str] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackManifest):
            return NotImplemented
        return sorted(self.files) == sorted(other.files)

    def to_dict(self) -> dict:
        return {"files": list(self.files)}

    @classmethod
    def from_dict(cls, data: dict) -> 'PackManifest':
        files = data.get("files") if isinstance(data, dict) else None
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ManifestError("Manifest must contain a 'files' list of strings")
        return cls(files=list(files))

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> 'PackManifest':
        """Build a manifest from the files below ``directory``, skipping ``.mcsi``."""
        directory = Path(directory)
        files = []
        for dirpath, dirnames, filenames in os.walk(directory):
            relative_dir = Path(dirpath).relative_to(directory)
            if _is_mcsi_path(relative_dir):
                continue
            for filename in filenames:
                relative = relative_dir / filename
                if not _is_mcsi_path(relative):
                    files.append(relative.as_posix())
        return cls(files=files)


def manifest_path(mcsi_dir: Union[str, Path]) -> Path:
    return Path(mcsi_dir) / MANIFEST_FILE_NAME


def load(mcsi_dir: Union[str, Path]) -> PackManifest:
    """Load the manifest stored in ``mcsi_dir``.

    Raises:
        ManifestNotFound: If there is no manifest file
        ManifestError: If the file is not a valid manifest
    """
    path = manifest_path(mcsi_dir)
    if not path.is_file():
        raise ManifestNotFound(f"No manifest at {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ManifestError(f"Cannot read manifest {path}", e) from e

    manifest = PackManifest.from_dict(data)
    logger.debug(f"Loaded manifest with {len(manifest.files)} files from {path}")
    return manifest


def save(manifest: PackManifest, mcsi_dir: Union[str, Path]) -> Path:
    """Write ``manifest`` into ``mcsi_dir``, replacing any existing one."""
    path = manifest_path(mcsi_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.is_file():
            path.unlink()
        path.write_text(json.dumps(manifest.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot write manifest {path}", e) from e

    logger.debug(f"Saved manifest with {len(manifest.files)} files to {path}")
    return path
