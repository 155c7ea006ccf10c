"""
Install reconciliation.

Before a new install is promoted, every file the previous install owned
(per its manifest) is moved into a timestamped backup directory. After
promotion the manifest is rebuilt from what is actually on disk.
"""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.progress import Progress

from . import manifest as manifest_store
from .constants import BACKUP_DIR_PREFIX, BACKUP_TIMESTAMP_FORMAT
from .context import ExecutionContext
from .exceptions import ManifestNotFound, StagingIOError
from .manifest import PackManifest
from .utils.stager import ArtifactStager

logger = logging.getLogger(__name__)


def backup_dir_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{BACKUP_DIR_PREFIX}{now.strftime(BACKUP_TIMESTAMP_FORMAT)}"


class InstallReconciler:
    """Backs up files owned by the previous install and promotes a staged tree."""

    def __init__(
        self,
        context: ExecutionContext,
        stager: ArtifactStager,
        progress: Optional[Progress] = None,
    ) -> None:
        self.context = context
        self.stager = stager
        self.progress = progress

    def reconcile(self, now: Optional[datetime] = None) -> Optional[Path]:
        """Move every file listed in the previous manifest into a new backup directory.

        Returns the backup directory, or None on a first install.
        """
        try:
            previous = manifest_store.load(self.context.mcsi_dir)
        except ManifestNotFound:
            logger.info("No previous install manifest, nothing to back up")
            return None

        backup_dir = self._unique_backup_dir(backup_dir_name(now))
        logger.info(f"Backing up {len(previous.files)} files to {backup_dir}")

        task_id = None
        if self.progress is not None:
            task_id = self.progress.add_task("Backing up files", total=len(previous.files))

        try:
            backup_dir.mkdir(parents=True)
            for relative in previous.files:
                self._backup_file(relative, backup_dir)
                if task_id is not None:
                    self.progress.update(task_id, advance=1, description=f"Backing up {relative}")
        except OSError as e:
            raise StagingIOError(f"Failed to back up previous install to {backup_dir}", e) from e
        finally:
            if task_id is not None:
                self.progress.remove_task(task_id)

        return backup_dir

    def _unique_backup_dir(self, name: str) -> Path:
        """Return ``backups/<name>``, suffixed with -1, -2, ... if a backup by that name exists."""
        candidate = self.context.backups_dir / name
        suffix = 0
        while candidate.exists():
            suffix += 1
            candidate = self.context.backups_dir / f"{name}-{suffix}"
        return candidate

    def _backup_file(self, relative: str, backup_dir: Path) -> None:
        source = self.context.target_dir / relative
        if not source.is_file():
            logger.warning(f"File {source} doesn't exist, skipping backup")
            return

        destination = backup_dir / relative
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))
        logger.debug(f"Backed up {relative}")

        parent = source.parent
        if parent != self.context.target_dir and not any(parent.iterdir()):
            try:
                parent.rmdir()
                logger.debug(f"Removed empty directory {parent}")
            except OSError as e:
                logger.debug(f"Could not remove empty directory {parent}: {e}")

    def promote(self, staging_dir: Optional[Path] = None) -> PackManifest:
        """Copy the staged tree over the target, drop staging and write the new manifest."""
        staging_dir = staging_dir or self.context.work_dir
        target_dir = self.context.target_dir

        logger.info(f"Installing staged files into {target_dir}")
        self.stager.recursive_copy(staging_dir, target_dir)
        self.context.remove_dir(staging_dir)

        try:
            self.context.mcsi_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingIOError(f"Cannot create {self.context.mcsi_dir}", e) from e

        manifest = PackManifest.from_directory(target_dir)
        manifest_store.save(manifest, self.context.mcsi_dir)
        logger.info(f"Manifest updated with {len(manifest.files)} files")
        return manifest
