"""
Execution context for a single install run.

All paths used during a run live under ``<target>/.mcsi``. The context
owns the scratch directories: stale ones left by a crashed run are
removed before use, and every scratch directory is recreated empty.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .constants import (
    BACKUPS_DIR_NAME, CLIENT_DIR_NAME, LOGS_DIR_NAME, MCSI_DIR_NAME,
    SERVER_DIR_NAME, WORK_DIR_NAME,
)
from .exceptions import StagingIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    """Paths for one run, rooted at the target directory."""

    target_dir: Path

    @classmethod
    def for_target(cls, target_dir) -> 'ExecutionContext':
        return cls(Path(target_dir).resolve())

    @property
    def mcsi_dir(self) -> Path:
        return self.target_dir / MCSI_DIR_NAME

    @property
    def work_dir(self) -> Path:
        """Staging tree where the new install is assembled."""
        return self.mcsi_dir / WORK_DIR_NAME

    @property
    def client_dir(self) -> Path:
        return self.mcsi_dir / CLIENT_DIR_NAME

    @property
    def server_dir(self) -> Path:
        return self.mcsi_dir / SERVER_DIR_NAME

    @property
    def logs_dir(self) -> Path:
        return self.mcsi_dir / LOGS_DIR_NAME

    @property
    def backups_dir(self) -> Path:
        return self.mcsi_dir / BACKUPS_DIR_NAME

    @property
    def scratch_dirs(self):
        return (self.work_dir, self.client_dir, self.server_dir)

    def setup(self) -> None:
        """Create ``.mcsi`` and discard scratch directories left by an earlier run."""
        try:
            self.mcsi_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingIOError(f"Cannot create {self.mcsi_dir}", e) from e

        for scratch in self.scratch_dirs:
            if scratch.exists():
                logger.warning(f"Removing stale directory {scratch} from a previous run")
                self.remove_dir(scratch)

    def fresh_dir(self, path: Path) -> Path:
        """Delete ``path`` if present and recreate it empty."""
        self.remove_dir(path)
        try:
            path.mkdir(parents=True)
        except OSError as e:
            raise StagingIOError(f"Cannot create directory {path}", e) from e
        return path

    def remove_dir(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            raise StagingIOError(f"Cannot remove {path}", e) from e

    def cleanup_scratch(self) -> None:
        """Remove the client and server scratch directories."""
        for scratch in (self.client_dir, self.server_dir):
            self.remove_dir(scratch)
