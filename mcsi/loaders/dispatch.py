"""
Dispatch from a loader descriptor to its installer.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Type

from ..utils.stager import ArtifactStager
from ..version import LoaderDescriptor, LoaderKind, McVersion
from .base import BaseLoaderInstaller
from .fabric import FabricInstaller
from .forge import ForgeInstaller
from .neoforge import NeoForgeInstaller

logger = logging.getLogger(__name__)

# Loader type mapping
LOADER_INSTALLERS: Dict[LoaderKind, Type[BaseLoaderInstaller]] = {
    LoaderKind.FORGE: ForgeInstaller,
    LoaderKind.NEOFORGE: NeoForgeInstaller,
    LoaderKind.FABRIC: FabricInstaller,
}


def create_installer(
    descriptor: LoaderDescriptor,
    mc_version: McVersion,
    stager: ArtifactStager,
    java_executable: Optional[str] = None,
) -> Optional[BaseLoaderInstaller]:
    """Build the installer for ``descriptor``, or None for loaders installed elsewhere."""
    installer_class = LOADER_INSTALLERS.get(descriptor.kind)
    if installer_class is None:
        return None
    return installer_class(mc_version, descriptor.version, stager, java_executable)


async def install_loader(
    descriptor: LoaderDescriptor,
    mc_version: McVersion,
    target_dir: Path,
    stager: ArtifactStager,
    java_executable: Optional[str] = None,
) -> Optional[Path]:
    """Install the loader into ``target_dir``; returns the server jar or None for Quilt."""
    logger.info(f"Loader resolved to {descriptor} for Minecraft {mc_version}")

    installer = create_installer(descriptor, mc_version, stager, java_executable)
    if installer is None:
        logger.warning(f"No installer for {descriptor.kind.value}, the loader must be installed manually")
        return None

    return await installer.install(target_dir)
