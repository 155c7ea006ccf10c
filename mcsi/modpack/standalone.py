"""
Install a bare mod loader server without a modpack.
"""

import logging
from typing import Optional

from rich.progress import Progress

from ..context import ExecutionContext
from ..loaders.dispatch import install_loader
from ..utils.stager import ArtifactStager
from ..version import LoaderDescriptor, LoaderKind, McVersion
from .pipeline import InstallResult, finish_install

logger = logging.getLogger(__name__)


async def install_loader_server(
    context: ExecutionContext,
    stager: ArtifactStager,
    kind: LoaderKind,
    mc_version: McVersion,
    loader_version: str,
    java_executable: Optional[str] = None,
    progress: Optional[Progress] = None,
) -> InstallResult:
    """Install ``kind`` ``loader_version`` for ``mc_version`` into the context's target."""
    context.setup()

    descriptor = LoaderDescriptor(kind, loader_version)
    staging_dir = context.fresh_dir(context.work_dir)
    await install_loader(descriptor, mc_version, staging_dir, stager, java_executable)

    return finish_install(
        context, stager, staging_dir, f"{descriptor} for Minecraft {mc_version}", progress
    )
