"""
CurseForge modpack install pipeline.
"""

import logging
from typing import Optional

from rich.progress import Progress

from ..context import ExecutionContext
from ..utils.stager import ArtifactStager
from ..version import parse_selector
from .assembler import PackAssembler
from .pipeline import InstallResult, finish_install
from .resolver import ReleaseCatalog, pair, resolve

logger = logging.getLogger(__name__)


async def install_flame_pack(
    context: ExecutionContext,
    catalog: ReleaseCatalog,
    stager: ArtifactStager,
    project_id: int,
    version: str,
    java_executable: Optional[str] = None,
    progress: Optional[Progress] = None,
) -> InstallResult:
    """Install release ``version`` of CurseForge project ``project_id`` into the context's target."""
    context.setup()

    selector = parse_selector(version)
    release = await resolve(selector, catalog, project_id)
    resolved = await pair(release, catalog, project_id)

    assembler = PackAssembler(context, catalog, stager, java_executable)
    assembled = await assembler.assemble(resolved)

    description = f"{release.display_name} ({assembled.loader} for Minecraft {assembled.mc_version})"
    return finish_install(context, stager, assembled.staging_dir, description, progress)
