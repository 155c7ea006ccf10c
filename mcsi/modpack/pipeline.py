"""
Shared tail of every install pipeline: back up the previous install,
promote the staged tree and record the new manifest.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.progress import Progress

from ..context import ExecutionContext
from ..manifest import PackManifest
from ..reconcile import InstallReconciler
from ..utils.stager import ArtifactStager

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Summary of a finished install, shown to the user by the CLI."""

    target_dir: Path
    description: str
    manifest: PackManifest
    backup_dir: Optional[Path] = None


def finish_install(
    context: ExecutionContext,
    stager: ArtifactStager,
    staging_dir: Path,
    description: str,
    progress: Optional[Progress] = None,
) -> InstallResult:
    reconciler = InstallReconciler(context, stager, progress)
    backup_dir = reconciler.reconcile()
    manifest = reconciler.promote(staging_dir)
    logger.info(f"Installed {description} into {context.target_dir}")
    return InstallResult(
        target_dir=context.target_dir,
        description=description,
        manifest=manifest,
        backup_dir=backup_dir,
    )
