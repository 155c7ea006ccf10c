"""
Base classes for mod loader installers.

This module provides the abstract installer interface and the shared
flow for loaders shipped as a Maven installer jar (Forge, NeoForge).
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..constants import INSTALLER_JAR_NAME, SERVER_JAR_NAME
from ..exceptions import InstallerProcessError, ValidationError
from ..utils import system
from ..utils.stager import ArtifactStager
from ..utils.system import JavaManager
from ..version import McVersion

logger = logging.getLogger(__name__)


class BaseLoaderInstaller(ABC):
    """Abstract base class for mod loader installers."""

    def __init__(
        self,
        mc_version: McVersion,
        loader_version: str,
        stager: ArtifactStager,
        java_executable: Optional[str] = None,
    ) -> None:
        if not isinstance(loader_version, str) or not loader_version.strip():
            raise ValidationError("Loader version must be a non-empty string")

        self.mc_version = mc_version
        self.loader_version = loader_version.strip()
        self.stager = stager
        self.java_executable = java_executable

    @property
    @abstractmethod
    def loader_type(self) -> str:
        """Return the loader name."""
        pass

    @abstractmethod
    async def install(self, target_dir: Path) -> Path:
        """Install a runnable server into ``target_dir`` and return the server jar."""
        pass


class MavenJarInstaller(BaseLoaderInstaller):
    """Installer for loaders published as ``-installer.jar`` / ``-universal.jar`` pairs."""

    @property
    @abstractmethod
    def long_version(self) -> str:
        """Version string used in Maven artifact names."""
        pass

    @property
    @abstractmethod
    def maven_url(self) -> str:
        pass

    @property
    def artifact_base(self) -> str:
        return f"{self.maven_url}/{self.long_version}/{self.loader_type}-{self.long_version}"

    def get_installer_url(self) -> str:
        return f"{self.artifact_base}-installer.jar"

    def get_universal_url(self) -> str:
        return f"{self.artifact_base}-universal.jar"

    async def install(self, target_dir: Path) -> Path:
        """Download the installer and universal jars and run ``--installServer``.

        The installer jar is removed afterwards, also when installation fails.
        """
        target_dir = Path(target_dir)
        installer_path = target_dir / INSTALLER_JAR_NAME
        server_jar = target_dir / SERVER_JAR_NAME

        logger.info(f"Downloading {self.loader_type} {self.long_version}...")
        try:
            await self.stager.download(self.get_installer_url(), installer_path)
            await self.stager.download(self.get_universal_url(), server_jar)

            java_exe = JavaManager.require_java_executable(self.mc_version, self.java_executable)

            logger.info(f"Installing {self.loader_type} server, this may take a few minutes...")
            returncode, output = await system.run_process(
                [java_exe, "-jar", INSTALLER_JAR_NAME, "--installServer"],
                target_dir,
            )

            if returncode != 0:
                tail = "\n".join(output)
                logger.error(f"{self.loader_type} installer failed with return code {returncode}\n{tail}")
                raise InstallerProcessError(
                    f"{self.loader_type} installer failed with return code {returncode}"
                )
        finally:
            if installer_path.is_file():
                installer_path.unlink()

        logger.info(f"Successfully installed {self.loader_type} {self.long_version}")
        return server_jar
